from types import SimpleNamespace

import pytest

import infra.web.app as app_module
from infra.adapter.httpx_site_probe import HttpxSiteProbe
from infra.config.config import BulkConfig, HealthConfig
from infra.services.health_monitor_service import HEALTH_CHECK_JOB_KEY
from infra.web.middleware.request_event_log_middleware import RequestEventLogMiddleware
from tests.support.fakes import FakeHealthCheckRepository, FakeScheduler, FakeSiteRepository


class FakeHttpClient:
    instances: list["FakeHttpClient"] = []

    def __init__(self, *args, **kwargs) -> None:
        self.kwargs = kwargs
        self.closed = False
        FakeHttpClient.instances.append(self)

    async def aclose(self) -> None:
        self.closed = True


def _config(environment: str = "dev", scheduled_checks: bool = True) -> SimpleNamespace:
    return SimpleNamespace(
        APP_NAME="py-site-admin",
        VERSION="9.9.9",
        ENVIRONMENT=environment,
        ROOT_PATH="/py-site-admin",
        HOST="127.0.0.1",
        PORT=9999,
        LOGGING_CONFIG=SimpleNamespace(LEVEL="INFO", JSON_FORMAT=False, LIBRARY_LOG_LEVELS={"httpx": "ERROR"}),
        HEALTH_CONFIG=HealthConfig(ENABLE_SCHEDULED_CHECKS=scheduled_checks, CHECK_INTERVAL_SECONDS=120),
        BULK_CONFIG=BulkConfig(),
    )


@pytest.fixture
def wired(monkeypatch: pytest.MonkeyPatch):
    FakeHttpClient.instances.clear()
    calls = {"close_engine": 0, "create_schema": 0, "configure_logging": []}
    scheduler = FakeScheduler()

    async def fake_close_engine() -> None:
        calls["close_engine"] += 1

    async def fake_create_database_schema() -> None:
        calls["create_schema"] += 1

    monkeypatch.setattr(app_module, "configure_logging", lambda **kwargs: calls["configure_logging"].append(kwargs))
    monkeypatch.setattr(app_module, "get_local_scheduler", lambda: scheduler)
    monkeypatch.setattr(app_module, "get_site_repository", lambda: FakeSiteRepository())
    monkeypatch.setattr(app_module, "get_health_check_repository", lambda: FakeHealthCheckRepository())
    monkeypatch.setattr(app_module.httpx, "AsyncClient", FakeHttpClient)
    monkeypatch.setattr(app_module, "close_engine", fake_close_engine)
    monkeypatch.setattr(app_module, "create_database_schema", fake_create_database_schema)

    def _create(config: SimpleNamespace):
        monkeypatch.setattr(app_module, "get_config", lambda: config)
        return app_module.create_app()

    return SimpleNamespace(create=_create, calls=calls, scheduler=scheduler)


@pytest.mark.asyncio
async def test_create_app_wires_routers_middleware_and_lifespan(wired) -> None:
    app = wired.create(_config())

    assert app.title == "py-site-admin"
    assert app.version == "9.9.9"
    assert app.root_path == "/py-site-admin"
    assert app.state.host == "127.0.0.1"
    assert app.state.port == 9999
    assert isinstance(app.state.site_probe, HttpxSiteProbe)

    route_paths = {route.path for route in app.routes}
    assert {
        "/stats/health",
        "/health/overview",
        "/health/sites/{site_id}/checks",
        "/health/sites/{site_id}/checks/latest",
        "/sites/{site_id}/products/bulk/price",
        "/sites/{site_id}/products/export",
    } <= route_paths

    assert any(m.cls is RequestEventLogMiddleware for m in app.user_middleware)
    assert wired.calls["configure_logging"] == [
        {
            "log_level": "INFO",
            "json_logs": False,
            "service_name": "py-site-admin",
            "environment": "dev",
            "library_log_levels": {"httpx": "ERROR"},
        }
    ]

    async with app.router.lifespan_context(app):
        assert wired.scheduler.started is True
        assert wired.scheduler.jobs[HEALTH_CHECK_JOB_KEY]["interval_seconds"] == 120

    assert wired.calls["create_schema"] == 1
    assert wired.scheduler.stopped is True
    assert wired.scheduler.has_job(HEALTH_CHECK_JOB_KEY) is False
    assert wired.calls["close_engine"] == 1
    assert FakeHttpClient.instances[0].closed is True


@pytest.mark.asyncio
async def test_scheduled_checks_can_be_disabled(wired) -> None:
    app = wired.create(_config(scheduled_checks=False))

    async with app.router.lifespan_context(app):
        assert wired.scheduler.get_all_jobs() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("environment", ["pre", "pro"])
async def test_create_app_does_not_create_schema_outside_dev_or_loc(wired, environment: str) -> None:
    app = wired.create(_config(environment=environment))

    async with app.router.lifespan_context(app):
        pass

    assert wired.calls["create_schema"] == 0
