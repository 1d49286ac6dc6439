import asyncio
from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from statistics import fmean
from typing import Callable, Optional

from core.domain.health_check_record import HealthCheckRecord
from core.domain.uptime_trend_point import (
    UptimeStats,
    UptimeTrendPoint,
    round_metric,
    uptime_percentage,
)
from core.exceptions.invalid_trend_window_error import InvalidTrendWindowError
from core.exceptions.operation_aborted_error import OperationAbortedError
from core.exceptions.site_not_found_error import SiteNotFoundError
from core.port.health_check_repository import HealthCheckRepository
from core.port.site_repository import SiteRepository
from use_cases.health.health_checker import utc_now

MAX_TREND_DAYS = 365


def _bucket_date(record: HealthCheckRecord) -> date:
    return record.checked_at.astimezone(timezone.utc).date()


def summarize_bucket(day: date, records: list[HealthCheckRecord]) -> UptimeTrendPoint:
    if not records:
        return UptimeTrendPoint(date=day)

    response_times = [r.response_time_ms for r in records if r.response_time_ms is not None]

    return UptimeTrendPoint(
        date=day,
        uptime_percentage=uptime_percentage(sum(1 for r in records if r.is_up), len(records)),
        avg_response_time=round_metric(fmean(response_times)) if response_times else None,
        error_count=sum(1 for r in records if r.is_critical),
        total_checks=len(records),
    )


class TrendComputer:
    """Buckets check history into UTC calendar days.

    A day without checks reports 100% uptime, no average response time and
    zero errors, so charts show "no evidence of downtime" rather than a gap.
    """

    OPERATION = "uptime_trend"

    def __init__(
        self,
        site_repository: SiteRepository,
        health_check_repository: HealthCheckRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.site_repository = site_repository
        self.health_check_repository = health_check_repository
        self._clock = clock

    async def execute(
        self,
        site_id: Optional[int] = None,
        days: int = 7,
        abort_signal: Optional[asyncio.Event] = None,
    ) -> list[UptimeTrendPoint]:
        self._validate_window(days)

        if site_id is not None:
            await self._ensure_site(site_id, abort_signal)

        now = self._clock()
        today = now.astimezone(timezone.utc).date()
        first_day = today - timedelta(days=days - 1)
        start = datetime.combine(first_day, time.min, tzinfo=timezone.utc)

        OperationAbortedError.raise_if_set(abort_signal, self.OPERATION)

        records = await self.health_check_repository.find_in_range(site_id, start, now)

        buckets: dict[date, list[HealthCheckRecord]] = defaultdict(list)
        for record in records:
            buckets[_bucket_date(record)].append(record)

        window = [first_day + timedelta(days=offset) for offset in range(days)]

        return [summarize_bucket(day, buckets.get(day, [])) for day in window]

    async def get_site_uptime_stats(
        self,
        site_id: int,
        days: int = 30,
        abort_signal: Optional[asyncio.Event] = None,
    ) -> UptimeStats:
        self._validate_window(days)
        await self._ensure_site(site_id, abort_signal)

        now = self._clock()

        OperationAbortedError.raise_if_set(abort_signal, "site_uptime_stats")

        records = await self.health_check_repository.find_in_range(site_id, now - timedelta(days=days), now)

        successful = sum(1 for r in records if r.is_up)
        response_times = [r.response_time_ms for r in records if r.response_time_ms is not None]

        return UptimeStats(
            uptime_percentage=uptime_percentage(successful, len(records)),
            total_checks=len(records),
            successful_checks=successful,
            avg_response_time=round_metric(fmean(response_times)) if response_times else None,
            max_downtime_minutes=self._max_downtime_minutes(records, now),
        )

    def _max_downtime_minutes(self, records: list[HealthCheckRecord], now: datetime) -> int:
        """Longest run of consecutive critical checks, measured until the next non-critical one.

        A run still open at the end of the window lasts until ``now``.
        """
        longest = timedelta(0)
        down_since: Optional[datetime] = None

        for record in records:
            if record.is_critical:
                if down_since is None:
                    down_since = record.checked_at
            elif down_since is not None:
                longest = max(longest, record.checked_at - down_since)
                down_since = None

        if down_since is not None:
            longest = max(longest, now - down_since)

        return int(longest.total_seconds() // 60)

    def _validate_window(self, days: int) -> None:
        if days < 1 or days > MAX_TREND_DAYS:
            raise InvalidTrendWindowError(days, MAX_TREND_DAYS)

    async def _ensure_site(self, site_id: int, abort_signal: Optional[asyncio.Event]) -> None:
        OperationAbortedError.raise_if_set(abort_signal, self.OPERATION)

        site = await self.site_repository.find_by_id(site_id)

        if site is None or site.is_deleted:
            raise SiteNotFoundError(site_id)
