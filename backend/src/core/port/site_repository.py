from abc import ABC, abstractmethod
from typing import Optional

from core.domain.site import Site


class SiteRepository(ABC):
    @abstractmethod
    async def find_by_id(self, site_id: int) -> Optional[Site]:
        raise NotImplementedError

    @abstractmethod
    async def find_all_active(self) -> list[Site]:
        raise NotImplementedError

    @abstractmethod
    async def count_published_content(self, site_id: int) -> int:
        raise NotImplementedError

    @abstractmethod
    async def count_active_products(self, site_id: int) -> int:
        raise NotImplementedError
