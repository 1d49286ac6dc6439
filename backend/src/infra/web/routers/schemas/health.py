import datetime
from typing import Optional

from core.domain.health_status import HealthStatus
from infra.web.routers.schemas import CamelModel


class HealthIssueDTO(CamelModel):
    type: str
    message: str
    severity: str


class ComponentStatusesDTO(CamelModel):
    domain: HealthStatus
    ssl: HealthStatus
    content: HealthStatus
    performance: HealthStatus


class HealthMetricsDTO(CamelModel):
    content_count: int
    product_count: int
    error_count_24h: int


class HealthCheckRecordDTO(CamelModel):
    id: Optional[int] = None
    site_id: int
    checked_at: datetime.datetime
    overall_status: HealthStatus
    health_score: int
    components: ComponentStatusesDTO
    response_time_ms: Optional[int] = None
    uptime_24h: float
    issues: list[HealthIssueDTO]
    warnings: list[HealthIssueDTO]
    metrics: HealthMetricsDTO
    scoring_version: int
    persisted: bool = True


class PlatformCheckRunDTO(CamelModel):
    sites_checked: int
    sites_failed: int
    records: list[HealthCheckRecordDTO]


class PlatformIssueDTO(CamelModel):
    site_id: int
    site_name: str
    issue_type: str
    severity: str
    message: str
    occurred_at: datetime.datetime


class PlatformHealthOverviewDTO(CamelModel):
    total_sites: int
    healthy_sites: int
    warning_sites: int
    critical_sites: int
    unchecked_sites: int
    avg_platform_uptime: float
    avg_response_time: float
    total_errors_24h: int
    recent_issues: list[PlatformIssueDTO]


class SiteAttentionDTO(CamelModel):
    site_id: int
    site_name: str
    health_score: int
    status: HealthStatus
    last_checked: datetime.datetime
    issues: list[str]


class UptimeTrendPointDTO(CamelModel):
    date: datetime.date
    uptime_percentage: float
    avg_response_time: Optional[float] = None
    error_count: int
    total_checks: int


class UptimeStatsDTO(CamelModel):
    uptime_percentage: float
    total_checks: int
    successful_checks: int
    avg_response_time: Optional[float] = None
    max_downtime_minutes: int
