import asyncio
from typing import Optional

from core.domain.health_check_record import HealthCheckRecord
from core.exceptions.invalid_history_limit_error import InvalidHistoryLimitError
from core.exceptions.operation_aborted_error import OperationAbortedError
from core.exceptions.site_not_found_error import SiteNotFoundError
from core.port.health_check_repository import HealthCheckRepository
from core.port.site_repository import SiteRepository

DEFAULT_HISTORY_LIMIT = 50
MAX_HISTORY_LIMIT = 500


class SiteHealthHistory:
    """Read side of one site's check history.

    History stays readable for inactive sites; only deleted or unknown sites are not found.
    """

    OPERATION = "site_health_history"

    def __init__(self, site_repository: SiteRepository, health_check_repository: HealthCheckRepository) -> None:
        self.site_repository = site_repository
        self.health_check_repository = health_check_repository

    async def get_recent_checks(
        self,
        site_id: int,
        limit: int = DEFAULT_HISTORY_LIMIT,
        abort_signal: Optional[asyncio.Event] = None,
    ) -> list[HealthCheckRecord]:
        if limit < 1 or limit > MAX_HISTORY_LIMIT:
            raise InvalidHistoryLimitError(limit, MAX_HISTORY_LIMIT)

        await self._ensure_site(site_id, abort_signal)

        return await self.health_check_repository.find_recent(site_id, limit)

    async def get_latest_check(
        self,
        site_id: int,
        abort_signal: Optional[asyncio.Event] = None,
    ) -> Optional[HealthCheckRecord]:
        await self._ensure_site(site_id, abort_signal)

        return await self.health_check_repository.find_latest(site_id)

    async def _ensure_site(self, site_id: int, abort_signal: Optional[asyncio.Event]) -> None:
        OperationAbortedError.raise_if_set(abort_signal, self.OPERATION)

        site = await self.site_repository.find_by_id(site_id)

        if site is None or site.is_deleted:
            raise SiteNotFoundError(site_id)

        OperationAbortedError.raise_if_set(abort_signal, self.OPERATION)
