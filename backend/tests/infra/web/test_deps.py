from core.domain.health_component import HealthComponent
from infra.config.config import BulkConfig, HealthConfig, get_config
from infra.web.deps import (
    build_bulk_processor,
    build_health_checker,
    build_health_thresholds,
    build_scoring_policy,
)
from tests.support.fakes import FakeHealthCheckRepository, FakeSiteProbe, FakeSiteRepository
from use_cases.health.component_checks import ContentCheck, DomainCheck, PerformanceCheck, SslCheck


def test_build_health_thresholds_copies_health_config() -> None:
    thresholds = build_health_thresholds(
        HealthConfig(RESPONSE_TIME_WARNING_MS=800, SSL_WARNING_DAYS=14, PLATFORM_DOMAIN="shops.test")
    )

    assert thresholds.response_time_warning_ms == 800
    assert thresholds.response_time_critical_ms == 3_000
    assert thresholds.ssl_warning_days == 14
    assert thresholds.platform_domain == "shops.test"


def test_build_scoring_policy_uses_configured_weights_and_version() -> None:
    policy = build_scoring_policy(
        HealthConfig(
            COMPONENT_WEIGHTS={"domain": 2, "ssl": 1, "content": 1, "performance": 0},
            SCORING_VERSION=3,
        )
    )

    assert policy.version == 3
    assert policy.weights[HealthComponent.DOMAIN] == 2.0
    assert policy.weights[HealthComponent.PERFORMANCE] == 0.0


def test_build_bulk_processor_converts_milliseconds() -> None:
    processor = build_bulk_processor(
        BulkConfig(CHUNK_SIZE=25, MAX_ATTEMPTS=4, RETRY_BACKOFF="fixed", INTER_CHUNK_DELAY_MS=250)
    )

    assert processor.chunk_size == 25
    assert processor.retry_policy.max_attempts == 4
    assert processor.retry_policy.backoff == "fixed"
    assert processor.inter_chunk_delay_seconds == 0.25


def test_build_health_checker_runs_every_component_check() -> None:
    checker = build_health_checker(
        get_config(),
        FakeSiteRepository(),
        FakeHealthCheckRepository(),
        FakeSiteProbe(),
    )

    assert [type(check) for check in checker.checks] == [DomainCheck, SslCheck, ContentCheck, PerformanceCheck]
