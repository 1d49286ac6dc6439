from use_cases.health.health_aggregator import HealthAggregator
from use_cases.health.health_checker import HealthChecker
from use_cases.health.run_platform_health_checks_use_case import RunPlatformHealthChecksUseCase
from use_cases.health.site_health_history import SiteHealthHistory
from use_cases.health.trend_computer import TrendComputer

__all__ = [
    "HealthAggregator",
    "HealthChecker",
    "RunPlatformHealthChecksUseCase",
    "SiteHealthHistory",
    "TrendComputer",
]
