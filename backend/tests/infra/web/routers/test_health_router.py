from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI

from core.domain.health_status import HealthStatus
from core.exceptions.data_store_error import DataStoreError
from infra.web.deps import get_health_check_repo, get_site_probe, get_site_repo
from infra.web.routers.health_router import router as health_router
from tests.support.fakes import (
    FakeHealthCheckRepository,
    FakeSiteProbe,
    FakeSiteRepository,
    make_record,
    make_site,
)


@pytest.fixture
def site_repository() -> FakeSiteRepository:
    return FakeSiteRepository([make_site(1), make_site(2), make_site(3, is_active=False)])


@pytest.fixture
def health_check_repository() -> FakeHealthCheckRepository:
    now = datetime.now(timezone.utc)

    return FakeHealthCheckRepository(
        [
            make_record(1, now - timedelta(hours=2)),
            make_record(2, now - timedelta(hours=1), status=HealthStatus.CRITICAL, response_time_ms=None),
        ]
    )


@pytest.fixture
def probe() -> FakeSiteProbe:
    return FakeSiteProbe()


@pytest.fixture
def health_app(site_repository, health_check_repository, probe) -> FastAPI:
    app = FastAPI()
    app.include_router(health_router)
    app.dependency_overrides[get_site_repo] = lambda: site_repository
    app.dependency_overrides[get_health_check_repo] = lambda: health_check_repository
    app.dependency_overrides[get_site_probe] = lambda: probe
    return app


@pytest.mark.asyncio
async def test_run_site_check_returns_created_record(health_app, health_check_repository, async_client_factory) -> None:
    client = await async_client_factory(health_app)

    response = await client.post("/health/sites/1/checks")

    assert response.status_code == 201
    payload = response.json()
    assert payload["siteId"] == 1
    assert payload["overallStatus"] == "healthy"
    assert payload["healthScore"] == 100
    assert payload["components"] == {
        "domain": "healthy",
        "ssl": "healthy",
        "content": "healthy",
        "performance": "healthy",
    }
    assert payload["persisted"] is True
    assert payload["id"] == health_check_repository.records[-1].id


@pytest.mark.asyncio
@pytest.mark.parametrize("site_id", [3, 404])
async def test_run_site_check_for_unknown_or_inactive_site_is_404(health_app, async_client_factory, site_id) -> None:
    client = await async_client_factory(health_app)

    response = await client.post(f"/health/sites/{site_id}/checks")

    assert response.status_code == 404
    assert response.json() == {"detail": f"Site {site_id} not found"}


@pytest.mark.asyncio
async def test_unsaved_check_is_returned_with_503(health_app, health_check_repository, async_client_factory) -> None:
    health_check_repository.fail_on_add = True
    client = await async_client_factory(health_app)

    response = await client.post("/health/sites/1/checks")

    assert response.status_code == 503
    detail = response.json()["detail"]
    assert detail["message"] == "Health check completed but could not be saved"
    assert detail["record"]["persisted"] is False
    assert detail["record"]["id"] is None
    assert detail["record"]["siteId"] == 1


@pytest.mark.asyncio
async def test_run_platform_checks_covers_every_active_site(health_app, async_client_factory) -> None:
    client = await async_client_factory(health_app)

    response = await client.post("/health/checks/run")

    assert response.status_code == 200
    payload = response.json()
    assert payload["sitesChecked"] == 2
    assert payload["sitesFailed"] == 0
    assert [record["siteId"] for record in payload["records"]] == [1, 2]


@pytest.mark.asyncio
async def test_overview_counts_latest_status_per_site(health_app, async_client_factory) -> None:
    client = await async_client_factory(health_app)

    response = await client.get("/health/overview")

    assert response.status_code == 200
    payload = response.json()
    assert payload["totalSites"] == 2
    assert payload["healthySites"] == 1
    assert payload["criticalSites"] == 1
    assert payload["warningSites"] == 0
    assert payload["uncheckedSites"] == 0


@pytest.mark.asyncio
async def test_attention_lists_only_unhealthy_sites(health_app, async_client_factory) -> None:
    client = await async_client_factory(health_app)

    response = await client.get("/health/attention")

    assert response.status_code == 200
    payload = response.json()
    assert [site["siteId"] for site in payload] == [2]
    assert payload[0]["status"] == "critical"


@pytest.mark.asyncio
async def test_store_outage_maps_to_503(health_app, site_repository, async_client_factory) -> None:
    site_repository.fail_with = DataStoreError("find_active_sites", "database unavailable")
    client = await async_client_factory(health_app)

    response = await client.get("/health/overview")

    assert response.status_code == 503
    assert response.json() == {"detail": "Failed to load platform health overview"}


@pytest.mark.asyncio
async def test_trend_returns_one_point_per_day(health_app, async_client_factory) -> None:
    client = await async_client_factory(health_app)

    response = await client.get("/health/trend", params={"siteId": 1, "days": 3})

    assert response.status_code == 200
    points = response.json()
    assert len(points) == 3
    assert points[-1]["totalChecks"] + points[-2]["totalChecks"] == 1
    assert {"date", "uptimePercentage", "avgResponseTime", "errorCount", "totalChecks"} <= points[0].keys()


@pytest.mark.asyncio
@pytest.mark.parametrize("days", [0, 366])
async def test_trend_window_out_of_bounds_is_422(health_app, async_client_factory, days) -> None:
    client = await async_client_factory(health_app)

    response = await client.get("/health/trend", params={"days": days})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_trend_for_unknown_site_is_404(health_app, async_client_factory) -> None:
    client = await async_client_factory(health_app)

    response = await client.get("/health/trend", params={"siteId": 99})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_site_uptime_stats(health_app, async_client_factory) -> None:
    client = await async_client_factory(health_app)

    response = await client.get("/health/sites/2/uptime", params={"days": 7})

    assert response.status_code == 200
    payload = response.json()
    assert payload["totalChecks"] == 1
    assert payload["successfulChecks"] == 0
    assert payload["uptimePercentage"] == 0
    assert payload["avgResponseTime"] is None
    assert payload["maxDowntimeMinutes"] >= 60


@pytest.mark.asyncio
async def test_site_check_history_is_newest_first(health_app, health_check_repository, async_client_factory) -> None:
    client = await async_client_factory(health_app)
    await client.post("/health/sites/1/checks")

    response = await client.get("/health/sites/1/checks", params={"limit": 5})

    assert response.status_code == 200
    payload = response.json()
    assert len(payload) == 2
    assert payload[0]["id"] == health_check_repository.records[-1].id
    assert all(record["siteId"] == 1 for record in payload)


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", [0, 501])
async def test_site_check_history_limit_out_of_bounds_is_422(health_app, async_client_factory, limit) -> None:
    client = await async_client_factory(health_app)

    response = await client.get("/health/sites/1/checks", params={"limit": limit})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_latest_site_check(health_app, async_client_factory) -> None:
    client = await async_client_factory(health_app)

    response = await client.get("/health/sites/2/checks/latest")

    assert response.status_code == 200
    assert response.json()["overallStatus"] == "critical"


@pytest.mark.asyncio
async def test_latest_site_check_without_history_is_404(health_app, async_client_factory) -> None:
    client = await async_client_factory(health_app)

    inactive = await client.get("/health/sites/3/checks/latest")
    unknown = await client.get("/health/sites/99/checks/latest")

    assert inactive.status_code == 404
    assert inactive.json() == {"detail": "No health checks recorded for site 3"}
    assert unknown.json() == {"detail": "Site 99 not found"}
