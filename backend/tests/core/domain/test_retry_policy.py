import pytest

from core.domain.retry_policy import RetryPolicy
from core.exceptions.bulk_mutation_error import BulkMutationError
from core.exceptions.data_store_error import DataStoreError, TransientStoreError
from core.exceptions.invalid_bulk_request_error import InvalidBulkRequestError


def test_exponential_delays_are_capped() -> None:
    policy = RetryPolicy(base_delay_ms=1_000, multiplier=2.0, max_delay_ms=3_000)

    assert policy.delay_seconds(1) == 1.0
    assert policy.delay_seconds(2) == 2.0
    assert policy.delay_seconds(3) == 3.0
    assert policy.delay_seconds(10) == 3.0


def test_fixed_backoff_uses_base_delay() -> None:
    policy = RetryPolicy(base_delay_ms=250, backoff="fixed")

    assert policy.delay_seconds(1) == policy.delay_seconds(3) == 0.25


def test_retries_until_max_attempts() -> None:
    policy = RetryPolicy(max_attempts=3)
    error = TransientStoreError("apply_bulk_mutation", "timeout")

    assert policy.should_retry(error, 1) is True
    assert policy.should_retry(error, 2) is True
    assert policy.should_retry(error, 3) is False


def test_validation_errors_are_never_retried() -> None:
    assert RetryPolicy().should_retry(InvalidBulkRequestError("bad ids"), 1) is False


def test_permanent_store_errors_are_not_retried() -> None:
    policy = RetryPolicy()

    assert policy.should_retry(DataStoreError("apply_bulk_mutation", "IntegrityError"), 1) is False
    assert policy.should_retry(TransientStoreError("apply_bulk_mutation", "OperationalError"), 1) is True
    assert policy.should_retry(BulkMutationError("price", [1], "mutation reported failure"), 1) is True


@pytest.mark.parametrize(
    "kwargs",
    [{"max_attempts": 0}, {"base_delay_ms": -1}, {"backoff": "linear"}],
)
def test_invalid_policies_are_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)
