from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from core.exceptions.data_store_error import DataStoreError
from core.exceptions.health_check_persistence_error import HealthCheckPersistenceError
from core.exceptions.invalid_history_limit_error import InvalidHistoryLimitError
from core.exceptions.invalid_trend_window_error import InvalidTrendWindowError
from core.exceptions.site_not_found_error import SiteNotFoundError
from infra.web.deps import (
    get_health_aggregator,
    get_health_checker,
    get_run_platform_checks,
    get_site_health_history,
    get_trend_computer,
)
from infra.web.routers.schemas.health import (
    HealthCheckRecordDTO,
    PlatformCheckRunDTO,
    PlatformHealthOverviewDTO,
    SiteAttentionDTO,
    UptimeStatsDTO,
    UptimeTrendPointDTO,
)
from use_cases.health.health_aggregator import HealthAggregator
from use_cases.health.health_checker import HealthChecker
from use_cases.health.run_platform_health_checks_use_case import RunPlatformHealthChecksUseCase
from use_cases.health.site_health_history import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT, SiteHealthHistory
from use_cases.health.trend_computer import MAX_TREND_DAYS, TrendComputer

router = APIRouter(prefix="/health", tags=["Health"])


def _store_unavailable(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=f"Failed to load {what}")


def _site_not_found(error: SiteNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Site {error.site_id} not found")


@router.post(
    "/sites/{site_id}/checks",
    response_model=HealthCheckRecordDTO,
    status_code=status.HTTP_201_CREATED,
)
async def run_site_health_check(
    site_id: int,
    health_checker: HealthChecker = Depends(get_health_checker),
) -> HealthCheckRecordDTO:
    try:
        record = await health_checker.execute(site_id)
    except SiteNotFoundError as e:
        raise _site_not_found(e)
    except HealthCheckPersistenceError as e:
        unsaved = HealthCheckRecordDTO.model_validate(e.record).model_copy(update={"persisted": False})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "message": "Health check completed but could not be saved",
                "record": unsaved.model_dump(mode="json", by_alias=True),
            },
        )
    except DataStoreError:
        raise _store_unavailable("site")

    return HealthCheckRecordDTO.model_validate(record)


@router.post(
    "/checks/run",
    response_model=PlatformCheckRunDTO,
    status_code=status.HTTP_200_OK,
)
async def run_platform_health_checks(
    use_case: RunPlatformHealthChecksUseCase = Depends(get_run_platform_checks),
) -> PlatformCheckRunDTO:
    try:
        run = await use_case.execute()
    except DataStoreError:
        raise _store_unavailable("sites")

    return PlatformCheckRunDTO.model_validate(run)


@router.get(
    "/overview",
    response_model=PlatformHealthOverviewDTO,
    status_code=status.HTTP_200_OK,
)
async def get_platform_overview(
    aggregator: HealthAggregator = Depends(get_health_aggregator),
) -> PlatformHealthOverviewDTO:
    try:
        overview = await aggregator.get_platform_overview()
    except DataStoreError:
        raise _store_unavailable("platform health overview")

    return PlatformHealthOverviewDTO.model_validate(overview)


@router.get(
    "/attention",
    response_model=list[SiteAttentionDTO],
    status_code=status.HTTP_200_OK,
)
async def get_sites_needing_attention(
    aggregator: HealthAggregator = Depends(get_health_aggregator),
) -> list[SiteAttentionDTO]:
    try:
        sites = await aggregator.get_sites_needing_attention()
    except DataStoreError:
        raise _store_unavailable("sites needing attention")

    return [SiteAttentionDTO.model_validate(site) for site in sites]


@router.get(
    "/trend",
    response_model=list[UptimeTrendPointDTO],
    status_code=status.HTTP_200_OK,
)
async def get_uptime_trend(
    site_id: Optional[int] = Query(default=None, alias="siteId"),
    days: int = Query(default=7, ge=1, le=MAX_TREND_DAYS),
    trend_computer: TrendComputer = Depends(get_trend_computer),
) -> list[UptimeTrendPointDTO]:
    try:
        points = await trend_computer.execute(site_id=site_id, days=days)
    except SiteNotFoundError as e:
        raise _site_not_found(e)
    except InvalidTrendWindowError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except DataStoreError:
        raise _store_unavailable("uptime trend")

    return [UptimeTrendPointDTO.model_validate(point) for point in points]


@router.get(
    "/sites/{site_id}/uptime",
    response_model=UptimeStatsDTO,
    status_code=status.HTTP_200_OK,
)
async def get_site_uptime_stats(
    site_id: int,
    days: int = Query(default=30, ge=1, le=MAX_TREND_DAYS),
    trend_computer: TrendComputer = Depends(get_trend_computer),
) -> UptimeStatsDTO:
    try:
        stats = await trend_computer.get_site_uptime_stats(site_id, days=days)
    except SiteNotFoundError as e:
        raise _site_not_found(e)
    except DataStoreError:
        raise _store_unavailable("uptime statistics")

    return UptimeStatsDTO.model_validate(stats)


@router.get(
    "/sites/{site_id}/checks",
    response_model=list[HealthCheckRecordDTO],
    status_code=status.HTTP_200_OK,
)
async def get_site_health_checks(
    site_id: int,
    limit: int = Query(default=DEFAULT_HISTORY_LIMIT, ge=1, le=MAX_HISTORY_LIMIT),
    history: SiteHealthHistory = Depends(get_site_health_history),
) -> list[HealthCheckRecordDTO]:
    try:
        records = await history.get_recent_checks(site_id, limit=limit)
    except SiteNotFoundError as e:
        raise _site_not_found(e)
    except InvalidHistoryLimitError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except DataStoreError:
        raise _store_unavailable("health checks")

    return [HealthCheckRecordDTO.model_validate(record) for record in records]


@router.get(
    "/sites/{site_id}/checks/latest",
    response_model=HealthCheckRecordDTO,
    status_code=status.HTTP_200_OK,
)
async def get_latest_site_health_check(
    site_id: int,
    history: SiteHealthHistory = Depends(get_site_health_history),
) -> HealthCheckRecordDTO:
    try:
        record = await history.get_latest_check(site_id)
    except SiteNotFoundError as e:
        raise _site_not_found(e)
    except DataStoreError:
        raise _store_unavailable("latest health check")

    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No health checks recorded for site {site_id}",
        )

    return HealthCheckRecordDTO.model_validate(record)
