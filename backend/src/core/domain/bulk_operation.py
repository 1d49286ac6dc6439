from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from core.domain.price_adjustment import PriceAdjustmentRule

T = TypeVar("T")


class BulkOperationKind(str, Enum):
    UPDATE = "update"
    DELETE = "delete"
    DUPLICATE = "duplicate"
    PRICE = "price"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    FEATURE = "feature"


@dataclass(frozen=True)
class UpdateFieldsMutation:
    fields: dict[str, Any]


@dataclass(frozen=True)
class DeleteMutation:
    pass


@dataclass(frozen=True)
class DuplicateMutation:
    pass


@dataclass(frozen=True)
class AdjustPriceMutation:
    rule: PriceAdjustmentRule


ProductMutation = UpdateFieldsMutation | DeleteMutation | DuplicateMutation | AdjustPriceMutation


@dataclass
class BulkMutationResult(Generic[T]):
    success: bool
    affected_rows: list[T] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class BulkOperationResult(Generic[T]):
    operation: str
    total_items: int
    chunk_count: int
    processed_ids: list[Any] = field(default_factory=list)
    items: list[T] = field(default_factory=list)

    @property
    def processed_count(self) -> int:
        return len(self.processed_ids)
