from dataclasses import dataclass


@dataclass(frozen=True)
class HealthThresholds:
    response_time_warning_ms: int = 1_500
    response_time_critical_ms: int = 3_000
    min_uptime_percent: float = 95.0
    error_critical_threshold: int = 5
    ssl_warning_days: int = 30
    ssl_critical_days: int = 7
    probe_timeout_seconds: float = 10.0
    platform_domain: str = "sites.example.com"
