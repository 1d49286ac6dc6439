import asyncio
from typing import Optional

from core.domain.bulk_operation import BulkOperationKind, BulkOperationResult, DeleteMutation
from core.domain.product import Product
from use_cases.bulk.bulk_operation_processor import ProgressCallback
from use_cases.product.bulk_product_use_case import BulkProductUseCase


class BulkDeleteProductsUseCase(BulkProductUseCase):
    async def execute(
        self,
        site_id: int,
        product_ids: list[int],
        on_progress: Optional[ProgressCallback] = None,
        abort_signal: Optional[asyncio.Event] = None,
    ) -> BulkOperationResult[Product]:
        return await self._run(
            site_id,
            product_ids,
            DeleteMutation(),
            BulkOperationKind.DELETE,
            on_progress,
            abort_signal,
        )
