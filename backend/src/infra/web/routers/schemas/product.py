from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Optional, Self

from pydantic import Field, PlainSerializer, model_validator

from core.domain.price_adjustment import AdjustmentOperation, AdjustmentType
from infra.web.routers.schemas import CamelModel

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ProductResponseDTO(CamelModel):
    id: int
    site_id: int
    name: str
    sku: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    price: Optional[Money] = None
    compare_at_price: Optional[Money] = None
    inventory_count: int
    in_stock: bool
    stock_status: Optional[str] = None
    is_active: bool
    is_featured: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BulkIdsDTO(CamelModel):
    ids: list[int] = Field(min_length=1)


class BulkUpdateDTO(BulkIdsDTO):
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    compare_at_price: Optional[Decimal] = Field(default=None, ge=0)
    inventory_count: Optional[int] = Field(default=None, ge=0)
    in_stock: Optional[bool] = None
    stock_status: Optional[str] = None

    @model_validator(mode="after")
    def check_update_fields(self) -> Self:
        if not self.update_fields():
            raise ValueError("At least one field must be updated")

        return self

    def update_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude={"ids"})


class BulkPriceDTO(BulkIdsDTO):
    type: AdjustmentType
    value: Decimal = Field(ge=0, allow_inf_nan=False)
    operation: AdjustmentOperation


class BulkFeatureDTO(BulkIdsDTO):
    featured: bool = True


class BulkOperationResponseDTO(CamelModel):
    operation: str
    total_items: int
    chunk_count: int
    processed_count: int
    affected: list[ProductResponseDTO]


class BulkPartialFailureDTO(CamelModel):
    operation: str
    message: str
    failed_chunk_index: int
    failed_ids: list[int]
    succeeded_chunks: int
    committed_count: int
    committed_ids: list[int]
    attempts: int
    cause: Optional[str] = None
