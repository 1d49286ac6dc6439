import asyncio
from dataclasses import dataclass, field
from typing import Optional

import structlog

from core.domain.health_check_record import HealthCheckRecord
from core.exceptions.operation_aborted_error import OperationAbortedError
from core.port.site_repository import SiteRepository
from use_cases.health.health_checker import HealthChecker

logger = structlog.stdlib.get_logger(__name__)


@dataclass
class PlatformCheckRun:
    sites_checked: int = 0
    sites_failed: int = 0
    records: list[HealthCheckRecord] = field(default_factory=list)


class RunPlatformHealthChecksUseCase:
    def __init__(self, site_repository: SiteRepository, health_checker: HealthChecker) -> None:
        self.site_repository = site_repository
        self.health_checker = health_checker

    async def execute(self, abort_signal: Optional[asyncio.Event] = None) -> PlatformCheckRun:
        sites = await self.site_repository.find_all_active()
        run = PlatformCheckRun()

        for site in sites:
            OperationAbortedError.raise_if_set(abort_signal, "platform_health_checks")

            try:
                record = await self.health_checker.execute(site.id, abort_signal=abort_signal)
            except OperationAbortedError:
                raise
            except Exception as e:
                run.sites_failed += 1
                logger.exception(f"Health check failed for site '{site.name}' (ID: {site.id}): {e}")
                continue

            run.sites_checked += 1
            run.records.append(record)

        logger.info(f"Platform health checks finished: checked={run.sites_checked}, failed={run.sites_failed}")

        return run
