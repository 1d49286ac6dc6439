import asyncio
from typing import Optional

from core.domain.bulk_operation import BulkOperationKind, BulkOperationResult, UpdateFieldsMutation
from core.domain.product import Product
from use_cases.bulk.bulk_operation_processor import ProgressCallback
from use_cases.product.bulk_product_use_case import BulkProductUseCase


class BulkSetActiveUseCase(BulkProductUseCase):
    async def execute(
        self,
        site_id: int,
        product_ids: list[int],
        active: bool,
        on_progress: Optional[ProgressCallback] = None,
        abort_signal: Optional[asyncio.Event] = None,
    ) -> BulkOperationResult[Product]:
        kind = BulkOperationKind.ACTIVATE if active else BulkOperationKind.DEACTIVATE

        return await self._run(
            site_id,
            product_ids,
            UpdateFieldsMutation({"is_active": active}),
            kind,
            on_progress,
            abort_signal,
        )
