from abc import ABC, abstractmethod
from typing import Optional

from core.domain.bulk_operation import BulkMutationResult, ProductMutation
from core.domain.product import Product


class ProductRepository(ABC):
    @abstractmethod
    async def save(self, product: Product) -> Product:
        raise NotImplementedError

    @abstractmethod
    async def find_by_ids(self, site_id: int, product_ids: list[int]) -> list[Product]:
        raise NotImplementedError

    @abstractmethod
    async def find_all_by_site(self, site_id: int, product_ids: Optional[list[int]] = None) -> list[Product]:
        raise NotImplementedError

    @abstractmethod
    async def apply_bulk_mutation(
        self,
        site_id: int,
        product_ids: list[int],
        mutation: ProductMutation,
    ) -> BulkMutationResult[Product]:
        """Apply ``mutation`` to every id in one transaction: all rows change or none do."""
        raise NotImplementedError
