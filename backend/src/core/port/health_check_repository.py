from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from core.domain.health_check_record import HealthCheckRecord


class HealthCheckRepository(ABC):
    @abstractmethod
    async def add(self, record: HealthCheckRecord) -> HealthCheckRecord:
        """Append one immutable record."""
        raise NotImplementedError

    @abstractmethod
    async def find_latest(self, site_id: int) -> Optional[HealthCheckRecord]:
        raise NotImplementedError

    @abstractmethod
    async def find_recent(self, site_id: int, limit: int) -> list[HealthCheckRecord]:
        """Up to ``limit`` records for the site, newest first."""
        raise NotImplementedError

    @abstractmethod
    async def find_latest_for_sites(self, site_ids: list[int]) -> dict[int, HealthCheckRecord]:
        raise NotImplementedError

    @abstractmethod
    async def find_in_range(
        self,
        site_id: Optional[int],
        start: datetime,
        end: datetime,
    ) -> list[HealthCheckRecord]:
        """Records with start <= checked_at <= end, oldest first. ``site_id=None`` means every site."""
        raise NotImplementedError

    @abstractmethod
    async def count_critical_since(self, since: datetime, site_ids: Optional[list[int]] = None) -> int:
        raise NotImplementedError
