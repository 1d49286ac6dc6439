from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from infra.adapter.httpx_site_probe import HttpxSiteProbe
from infra.adapter.local_scheduler import get_local_scheduler
from infra.adapter.postgres_health_check_repository import get_health_check_repository
from infra.adapter.postgres_site_repository import get_site_repository
from infra.config.config import get_config
from infra.db.session import close_engine, create_database_schema
from infra.logging.config import configure_logging
from infra.services.health_monitor_service import HealthMonitorService
from infra.web.deps import build_health_checker
from infra.web.middleware.request_event_log_middleware import RequestEventLogMiddleware
from infra.web.routers.health_router import router as health_router
from infra.web.routers.product_bulk_router import router as product_bulk_router
from infra.web.routers.stats_router import router as stats_router
from use_cases.health.run_platform_health_checks_use_case import RunPlatformHealthChecksUseCase


def create_app() -> FastAPI:
    config = get_config()
    health_config = config.HEALTH_CONFIG

    configure_logging(
        log_level=config.LOGGING_CONFIG.LEVEL,
        json_logs=config.LOGGING_CONFIG.JSON_FORMAT,
        service_name=config.APP_NAME,
        environment=config.ENVIRONMENT,
        library_log_levels=config.LOGGING_CONFIG.LIBRARY_LOG_LEVELS,
    )

    scheduler = get_local_scheduler()

    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(health_config.PROBE_TIMEOUT_SECONDS),
        limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
        follow_redirects=True,
    )
    site_probe = HttpxSiteProbe(http_client)

    site_repository = get_site_repository()

    health_monitor_service = HealthMonitorService(
        check_interval_seconds=health_config.CHECK_INTERVAL_SECONDS,
        scheduler=scheduler,
        run_checks_use_case=RunPlatformHealthChecksUseCase(
            site_repository,
            build_health_checker(config, site_repository, get_health_check_repository(), site_probe),
        ),
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if config.ENVIRONMENT in ("loc", "dev"):
            await create_database_schema()

        scheduler.start()

        if health_config.ENABLE_SCHEDULED_CHECKS:
            health_monitor_service.start()

        yield

        health_monitor_service.stop()
        scheduler.stop()

        await http_client.aclose()
        await close_engine()

    app = FastAPI(
        title=config.APP_NAME,
        version=config.VERSION,
        root_path=config.ROOT_PATH,
        docs_url="/apidocs",
        lifespan=lifespan,
    )

    app.state.host = config.HOST
    app.state.port = config.PORT
    app.state.site_probe = site_probe

    app.add_middleware(RequestEventLogMiddleware, excluded_path_suffixes={"/stats/health"})

    app.include_router(stats_router)
    app.include_router(health_router)
    app.include_router(product_bulk_router)

    return app
