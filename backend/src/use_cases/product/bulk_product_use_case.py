import asyncio
from typing import Optional

from core.domain.bulk_operation import BulkOperationKind, BulkOperationResult, ProductMutation
from core.domain.product import Product
from core.exceptions.invalid_bulk_request_error import InvalidBulkRequestError
from core.exceptions.site_not_found_error import SiteNotFoundError
from core.port.product_repository import ProductRepository
from core.port.site_repository import SiteRepository
from use_cases.bulk.bulk_operation_processor import BulkOperationProcessor, ProgressCallback


class BulkProductUseCase:
    """Validates the id list against the site, then hands the mutation to the processor."""

    def __init__(
        self,
        site_repository: SiteRepository,
        product_repository: ProductRepository,
        processor: BulkOperationProcessor,
    ) -> None:
        self.site_repository = site_repository
        self.product_repository = product_repository
        self.processor = processor

    async def _run(
        self,
        site_id: int,
        product_ids: list[int],
        mutation: ProductMutation,
        kind: BulkOperationKind,
        on_progress: Optional[ProgressCallback] = None,
        abort_signal: Optional[asyncio.Event] = None,
    ) -> BulkOperationResult[Product]:
        await self._validate_scope(site_id, product_ids, kind)

        # only duplicate is per occurrence; every other kind applies once per product
        if kind is not BulkOperationKind.DUPLICATE:
            product_ids = list(dict.fromkeys(product_ids))

        async def apply_chunk(chunk: list[int]):
            return await self.product_repository.apply_bulk_mutation(site_id, chunk, mutation)

        return await self.processor.process(
            product_ids,
            apply_chunk,
            on_progress=on_progress,
            abort_signal=abort_signal,
            operation=kind.value,
        )

    async def _validate_scope(self, site_id: int, product_ids: list[int], kind: BulkOperationKind) -> None:
        if not product_ids:
            raise InvalidBulkRequestError(f"'{kind.value}' requires at least one product id")

        site = await self.site_repository.find_by_id(site_id)

        if site is None or not site.is_in_scope():
            raise SiteNotFoundError(site_id)

        unique_ids = list(dict.fromkeys(product_ids))
        found = await self.product_repository.find_by_ids(site_id, unique_ids)
        found_ids = {product.id for product in found}
        missing = [product_id for product_id in unique_ids if product_id not in found_ids]

        if missing:
            raise InvalidBulkRequestError(
                f"{len(missing)} product ids do not belong to site {site_id}",
                invalid_ids=missing,
            )
