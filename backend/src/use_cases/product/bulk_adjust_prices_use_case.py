import asyncio
from typing import Optional

from core.domain.bulk_operation import AdjustPriceMutation, BulkOperationKind, BulkOperationResult
from core.domain.price_adjustment import PriceAdjustmentRule
from core.domain.product import Product
from use_cases.bulk.bulk_operation_processor import ProgressCallback
from use_cases.product.bulk_product_use_case import BulkProductUseCase


class BulkAdjustPricesUseCase(BulkProductUseCase):
    async def execute(
        self,
        site_id: int,
        product_ids: list[int],
        rule: PriceAdjustmentRule,
        on_progress: Optional[ProgressCallback] = None,
        abort_signal: Optional[asyncio.Event] = None,
    ) -> BulkOperationResult[Product]:
        return await self._run(
            site_id,
            product_ids,
            AdjustPriceMutation(rule),
            BulkOperationKind.PRICE,
            on_progress,
            abort_signal,
        )
