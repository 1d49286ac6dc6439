import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import structlog

from core.domain.health_check_record import (
    ComponentStatuses,
    HealthCheckRecord,
    HealthIssue,
    HealthMetrics,
)
from core.domain.health_component import HealthComponent
from core.domain.health_score import HealthScoringPolicy, derive_overall_status
from core.domain.health_status import HealthStatus
from core.domain.uptime_trend_point import uptime_percentage
from core.exceptions.data_store_error import DataStoreError
from core.exceptions.health_check_persistence_error import HealthCheckPersistenceError
from core.exceptions.operation_aborted_error import OperationAbortedError
from core.exceptions.site_not_found_error import SiteNotFoundError
from core.port.health_check_repository import HealthCheckRepository
from core.port.site_repository import SiteRepository
from use_cases.health.component_checks import (
    ComponentCheck,
    ComponentCheckResult,
    SiteCheckContext,
)

logger = structlog.stdlib.get_logger(__name__)

HISTORY_WINDOW = timedelta(hours=24)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HealthChecker:
    """Runs every component check for one site and appends the scored record."""

    OPERATION = "health_check"

    def __init__(
        self,
        site_repository: SiteRepository,
        health_check_repository: HealthCheckRepository,
        checks: list[ComponentCheck],
        scoring_policy: Optional[HealthScoringPolicy] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        configured = sorted(check.component.value for check in checks)
        if configured != sorted(component.value for component in HealthComponent):
            raise ValueError(f"Health checks must cover each component exactly once, got {configured}")

        self.site_repository = site_repository
        self.health_check_repository = health_check_repository
        self.checks = checks
        self.scoring_policy = scoring_policy or HealthScoringPolicy()
        self._clock = clock

    async def execute(self, site_id: int, abort_signal: Optional[asyncio.Event] = None) -> HealthCheckRecord:
        OperationAbortedError.raise_if_set(abort_signal, self.OPERATION)

        site = await self.site_repository.find_by_id(site_id)

        if site is None or not site.is_in_scope():
            raise SiteNotFoundError(site_id)

        checked_at = self._clock()
        history_warnings: list[HealthIssue] = []

        OperationAbortedError.raise_if_set(abort_signal, self.OPERATION)

        try:
            history = await self.health_check_repository.find_in_range(
                site_id, checked_at - HISTORY_WINDOW, checked_at
            )
        except DataStoreError as e:
            logger.warning(f"Could not load 24h history for site {site_id}: {e}")
            history = []
            history_warnings.append(HealthIssue("history_unavailable", "24h check history could not be loaded", "low"))

        context = SiteCheckContext(
            site=site,
            checked_at=checked_at,
            uptime_24h=uptime_percentage(sum(1 for r in history if r.is_up), len(history)),
            error_count_24h=sum(1 for r in history if r.is_critical),
        )

        OperationAbortedError.raise_if_set(abort_signal, self.OPERATION)

        results = await asyncio.gather(*[self._run_check(check, context) for check in self.checks])
        record = self._build_record(
            context,
            dict(zip((c.component for c in self.checks), results)),
            history_warnings,
        )

        OperationAbortedError.raise_if_set(abort_signal, self.OPERATION)

        try:
            stored = await self.health_check_repository.add(record)
        except DataStoreError as e:
            logger.error(f"Failed to persist health check for site {site_id}: {e}")
            raise HealthCheckPersistenceError(record, e) from e

        logger.info(
            f"Health check site={site_id} status={stored.overall_status.value} "
            f"score={stored.health_score} response_time={stored.response_time_ms}ms"
        )

        return stored

    async def _run_check(self, check: ComponentCheck, context: SiteCheckContext) -> ComponentCheckResult:
        try:
            return await check.run(context)
        except Exception as e:
            name = check.component.value
            logger.exception(f"{name} check failed for site {context.site.id}: {e}")

            return ComponentCheckResult(
                HealthStatus.UNKNOWN,
                warnings=[HealthIssue(f"{name}_check_failed", f"{name} check failed: {e}")],
            )

    def _build_record(
        self,
        context: SiteCheckContext,
        results: dict,
        extra_warnings: list[HealthIssue],
    ) -> HealthCheckRecord:
        components = ComponentStatuses(
            **{component.value: result.status for component, result in results.items()}
        )

        issues: list[HealthIssue] = []
        warnings: list[HealthIssue] = []
        response_time_ms = None
        content_count = 0
        product_count = 0

        for result in results.values():
            issues.extend(result.issues)
            warnings.extend(result.warnings)

            if result.response_time_ms is not None:
                response_time_ms = result.response_time_ms
            if result.content_count is not None:
                content_count = result.content_count
            if result.product_count is not None:
                product_count = result.product_count

        return HealthCheckRecord(
            site_id=context.site.id,
            checked_at=context.checked_at,
            overall_status=derive_overall_status(components),
            health_score=self.scoring_policy.score(components),
            components=components,
            response_time_ms=response_time_ms,
            uptime_24h=context.uptime_24h,
            issues=issues,
            warnings=warnings + extra_warnings,
            metrics=HealthMetrics(
                content_count=content_count,
                product_count=product_count,
                error_count_24h=context.error_count_24h,
            ),
            scoring_version=self.scoring_policy.version,
        )
