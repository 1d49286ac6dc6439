import asyncio
from decimal import InvalidOperation
from typing import Any, Optional

from core.domain.bulk_operation import BulkOperationKind, BulkOperationResult, UpdateFieldsMutation
from core.domain.price_adjustment import to_decimal
from core.domain.product import BULK_UPDATABLE_FIELDS, Product
from core.exceptions.invalid_bulk_request_error import InvalidBulkRequestError
from use_cases.bulk.bulk_operation_processor import ProgressCallback
from use_cases.product.bulk_product_use_case import BulkProductUseCase

PRICE_FIELDS = ("price", "compare_at_price")


class BulkUpdateProductsUseCase(BulkProductUseCase):
    async def execute(
        self,
        site_id: int,
        product_ids: list[int],
        fields: dict[str, Any],
        on_progress: Optional[ProgressCallback] = None,
        abort_signal: Optional[asyncio.Event] = None,
    ) -> BulkOperationResult[Product]:
        if not fields:
            raise InvalidBulkRequestError("Bulk update requires at least one field")

        unsupported = sorted(set(fields) - BULK_UPDATABLE_FIELDS)
        if unsupported:
            raise InvalidBulkRequestError(f"Fields cannot be bulk updated: {', '.join(unsupported)}")

        values = dict(fields)
        for name in PRICE_FIELDS:
            if values.get(name) is None:
                continue

            try:
                values[name] = to_decimal(values[name])
            except (InvalidOperation, TypeError, ValueError):
                raise InvalidBulkRequestError(f"{name} is not a valid amount")

            if not values[name].is_finite() or values[name] < 0:
                raise InvalidBulkRequestError(f"{name} must be a non-negative amount")

        return await self._run(
            site_id,
            product_ids,
            UpdateFieldsMutation(values),
            BulkOperationKind.UPDATE,
            on_progress,
            abort_signal,
        )
