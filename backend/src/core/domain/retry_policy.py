from dataclasses import dataclass, field
from typing import Literal

from core.exceptions.data_store_error import DataStoreError, TransientStoreError
from core.exceptions.invalid_bulk_request_error import InvalidBulkRequestError
from core.exceptions.invalid_price_adjustment_error import InvalidPriceAdjustmentError
from core.exceptions.site_not_found_error import SiteNotFoundError


def _default_non_retryable() -> tuple[type[BaseException], ...]:
    return (InvalidBulkRequestError, InvalidPriceAdjustmentError, SiteNotFoundError)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_ms: int = 1_000
    backoff: Literal["fixed", "exponential"] = "exponential"
    multiplier: float = 2.0
    max_delay_ms: int = 30_000

    non_retryable: tuple[type[BaseException], ...] = field(default_factory=_default_non_retryable)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        if self.base_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("Retry delays must be non-negative")

        if self.backoff not in ("fixed", "exponential"):
            raise ValueError(f"Unsupported backoff: {self.backoff}")

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        if attempt >= self.max_attempts:
            return False

        if isinstance(error, self.non_retryable):
            return False

        # only connection, timeout and serialization failures may succeed on another attempt
        if isinstance(error, DataStoreError):
            return isinstance(error, TransientStoreError)

        return True

    def delay_seconds(self, attempt: int) -> float:
        """Delay after the given failed attempt (1-based)."""
        if self.backoff == "fixed":
            delay_ms = self.base_delay_ms
        else:
            delay_ms = self.base_delay_ms * (self.multiplier ** (attempt - 1))

        return min(delay_ms, self.max_delay_ms) / 1_000
