import asyncio
from typing import Optional

from core.domain.bulk_operation import BulkOperationKind, BulkOperationResult, DuplicateMutation
from core.domain.product import Product
from use_cases.bulk.bulk_operation_processor import ProgressCallback
from use_cases.product.bulk_product_use_case import BulkProductUseCase


class BulkDuplicateProductsUseCase(BulkProductUseCase):
    """Copies are created inactive, named "<name> (Copy)", "<name> (Copy 2)" and so on."""

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
            DuplicateMutation(),
            BulkOperationKind.DUPLICATE,
            on_progress,
            abort_signal,
        )
