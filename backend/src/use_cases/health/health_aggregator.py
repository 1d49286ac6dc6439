import asyncio
from datetime import datetime, timedelta
from statistics import fmean
from typing import Callable, Optional

import structlog

from core.domain.health_check_record import HealthCheckRecord
from core.domain.health_status import HealthStatus
from core.domain.platform_health_overview import PlatformHealthOverview, PlatformIssue
from core.domain.site import Site
from core.domain.site_attention import SiteAttention
from core.domain.uptime_trend_point import round_metric
from core.exceptions.operation_aborted_error import OperationAbortedError
from core.port.health_check_repository import HealthCheckRepository
from core.port.site_repository import SiteRepository
from use_cases.health.health_checker import utc_now

logger = structlog.stdlib.get_logger(__name__)

ERROR_WINDOW = timedelta(hours=24)


class HealthAggregator:
    """Platform-wide view over the latest health record of every site in scope."""

    def __init__(
        self,
        site_repository: SiteRepository,
        health_check_repository: HealthCheckRepository,
        recent_issues_limit: int = 50,
        attention_issues_limit: int = 5,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.site_repository = site_repository
        self.health_check_repository = health_check_repository
        self.recent_issues_limit = recent_issues_limit
        self.attention_issues_limit = attention_issues_limit
        self._clock = clock

    async def get_platform_overview(self, abort_signal: Optional[asyncio.Event] = None) -> PlatformHealthOverview:
        sites, latest = await self._load_latest(abort_signal, "platform_overview")

        if not sites:
            return PlatformHealthOverview()

        OperationAbortedError.raise_if_set(abort_signal, "platform_overview")

        site_ids = [site.id for site in sites]
        total_errors = await self.health_check_repository.count_critical_since(
            self._clock() - ERROR_WINDOW, site_ids
        )

        overview = PlatformHealthOverview(total_sites=len(sites), total_errors_24h=total_errors)
        records = list(latest.values())

        for record in records:
            if record.overall_status is HealthStatus.CRITICAL:
                overview.critical_sites += 1
            elif record.overall_status is HealthStatus.WARNING:
                overview.warning_sites += 1
            else:
                overview.healthy_sites += 1

        overview.unchecked_sites = overview.total_sites - overview.checked_sites

        if records:
            overview.avg_platform_uptime = round_metric(fmean(r.uptime_24h for r in records))

        response_times = [r.response_time_ms for r in records if r.response_time_ms is not None]
        if response_times:
            overview.avg_response_time = round_metric(fmean(response_times))

        overview.recent_issues = self._recent_issues(sites, latest)

        return overview

    async def get_sites_needing_attention(self, abort_signal: Optional[asyncio.Event] = None) -> list[SiteAttention]:
        sites, latest = await self._load_latest(abort_signal, "sites_needing_attention")
        attention = []

        for site in sites:
            record = latest.get(site.id)

            if record is None or record.overall_status is HealthStatus.HEALTHY:
                continue

            messages = [issue.message for issue in record.issues + record.warnings]

            attention.append(
                SiteAttention(
                    site_id=site.id,
                    site_name=site.name,
                    health_score=record.health_score,
                    status=record.overall_status,
                    last_checked=record.checked_at,
                    issues=messages[: self.attention_issues_limit],
                )
            )

        # critical first, then lowest score, then most recently checked
        attention.sort(key=lambda a: a.last_checked, reverse=True)
        attention.sort(key=lambda a: (-a.status.severity, a.health_score))

        return attention

    async def _load_latest(
        self,
        abort_signal: Optional[asyncio.Event],
        operation: str,
    ) -> tuple[list[Site], dict[int, HealthCheckRecord]]:
        OperationAbortedError.raise_if_set(abort_signal, operation)

        sites = await self.site_repository.find_all_active()

        if not sites:
            return [], {}

        OperationAbortedError.raise_if_set(abort_signal, operation)

        latest = await self.health_check_repository.find_latest_for_sites([site.id for site in sites])

        return sites, latest

    def _recent_issues(self, sites: list[Site], latest: dict[int, HealthCheckRecord]) -> list[PlatformIssue]:
        issues = [
            PlatformIssue(
                site_id=site.id,
                site_name=site.name,
                issue_type=issue.type,
                severity=issue.severity,
                message=issue.message,
                occurred_at=record.checked_at,
            )
            for site in sites
            if (record := latest.get(site.id)) is not None
            for issue in record.issues
        ]
        issues.sort(key=lambda issue: issue.occurred_at, reverse=True)

        return issues[: self.recent_issues_limit]
