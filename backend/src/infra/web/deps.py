"""Request-scoped wiring of use cases to their adapters.

Routers depend on these providers so tests can swap any adapter through
``app.dependency_overrides``.
"""

from fastapi import Depends, Request

from core.domain.health_score import HealthScoringPolicy
from core.domain.health_thresholds import HealthThresholds
from core.domain.retry_policy import RetryPolicy
from core.port.health_check_repository import HealthCheckRepository
from core.port.product_repository import ProductRepository
from core.port.site_probe import SiteProbe
from core.port.site_repository import SiteRepository
from infra.adapter.postgres_health_check_repository import get_health_check_repository
from infra.adapter.postgres_product_repository import get_product_repository
from infra.adapter.postgres_site_repository import get_site_repository
from infra.config.config import BulkConfig, Config, HealthConfig, get_config
from use_cases.bulk.bulk_operation_processor import BulkOperationProcessor
from use_cases.health.component_checks import ContentCheck, DomainCheck, PerformanceCheck, SslCheck
from use_cases.health.health_aggregator import HealthAggregator
from use_cases.health.health_checker import HealthChecker
from use_cases.health.run_platform_health_checks_use_case import RunPlatformHealthChecksUseCase
from use_cases.health.site_health_history import SiteHealthHistory
from use_cases.health.trend_computer import TrendComputer


def build_health_thresholds(health_config: HealthConfig) -> HealthThresholds:
    return HealthThresholds(
        response_time_warning_ms=health_config.RESPONSE_TIME_WARNING_MS,
        response_time_critical_ms=health_config.RESPONSE_TIME_CRITICAL_MS,
        min_uptime_percent=health_config.MIN_UPTIME_PERCENT,
        error_critical_threshold=health_config.ERROR_CRITICAL_THRESHOLD,
        ssl_warning_days=health_config.SSL_WARNING_DAYS,
        ssl_critical_days=health_config.SSL_CRITICAL_DAYS,
        probe_timeout_seconds=health_config.PROBE_TIMEOUT_SECONDS,
        platform_domain=health_config.PLATFORM_DOMAIN,
    )


def build_scoring_policy(health_config: HealthConfig) -> HealthScoringPolicy:
    return HealthScoringPolicy.from_mapping(
        dict(health_config.COMPONENT_WEIGHTS),
        version=health_config.SCORING_VERSION,
    )


def build_bulk_processor(bulk_config: BulkConfig) -> BulkOperationProcessor:
    return BulkOperationProcessor(
        chunk_size=bulk_config.CHUNK_SIZE,
        retry_policy=RetryPolicy(
            max_attempts=bulk_config.MAX_ATTEMPTS,
            base_delay_ms=bulk_config.RETRY_BASE_DELAY_MS,
            backoff=bulk_config.RETRY_BACKOFF,
            max_delay_ms=bulk_config.RETRY_MAX_DELAY_MS,
        ),
        inter_chunk_delay_seconds=bulk_config.INTER_CHUNK_DELAY_MS / 1_000,
    )


def build_health_checker(
    config: Config,
    site_repository: SiteRepository,
    health_check_repository: HealthCheckRepository,
    probe: SiteProbe,
) -> HealthChecker:
    thresholds = build_health_thresholds(config.HEALTH_CONFIG)

    return HealthChecker(
        site_repository=site_repository,
        health_check_repository=health_check_repository,
        checks=[
            DomainCheck(probe),
            SslCheck(probe, thresholds),
            ContentCheck(site_repository),
            PerformanceCheck(probe, thresholds),
        ],
        scoring_policy=build_scoring_policy(config.HEALTH_CONFIG),
    )


def get_app_config() -> Config:
    return get_config()


def get_site_repo() -> SiteRepository:
    return get_site_repository()


def get_health_check_repo() -> HealthCheckRepository:
    return get_health_check_repository()


def get_product_repo() -> ProductRepository:
    return get_product_repository()


def get_site_probe(request: Request) -> SiteProbe:
    return request.app.state.site_probe


def get_health_checker(
    config: Config = Depends(get_app_config),
    site_repository: SiteRepository = Depends(get_site_repo),
    health_check_repository: HealthCheckRepository = Depends(get_health_check_repo),
    probe: SiteProbe = Depends(get_site_probe),
) -> HealthChecker:
    return build_health_checker(config, site_repository, health_check_repository, probe)


def get_run_platform_checks(
    site_repository: SiteRepository = Depends(get_site_repo),
    health_checker: HealthChecker = Depends(get_health_checker),
) -> RunPlatformHealthChecksUseCase:
    return RunPlatformHealthChecksUseCase(site_repository, health_checker)


def get_health_aggregator(
    config: Config = Depends(get_app_config),
    site_repository: SiteRepository = Depends(get_site_repo),
    health_check_repository: HealthCheckRepository = Depends(get_health_check_repo),
) -> HealthAggregator:
    return HealthAggregator(
        site_repository,
        health_check_repository,
        recent_issues_limit=config.HEALTH_CONFIG.RECENT_ISSUES_LIMIT,
        attention_issues_limit=config.HEALTH_CONFIG.ATTENTION_ISSUES_LIMIT,
    )


def get_trend_computer(
    site_repository: SiteRepository = Depends(get_site_repo),
    health_check_repository: HealthCheckRepository = Depends(get_health_check_repo),
) -> TrendComputer:
    return TrendComputer(site_repository, health_check_repository)


def get_site_health_history(
    site_repository: SiteRepository = Depends(get_site_repo),
    health_check_repository: HealthCheckRepository = Depends(get_health_check_repo),
) -> SiteHealthHistory:
    return SiteHealthHistory(site_repository, health_check_repository)


def get_bulk_processor(config: Config = Depends(get_app_config)) -> BulkOperationProcessor:
    return build_bulk_processor(config.BULK_CONFIG)
