from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, Optional

from core.domain.health_component import HealthComponent
from core.domain.health_status import HealthStatus


@dataclass(frozen=True)
class HealthIssue:
    type: str
    message: str
    severity: str = "medium"


@dataclass(frozen=True)
class ComponentStatuses:
    domain: HealthStatus = HealthStatus.HEALTHY
    ssl: HealthStatus = HealthStatus.HEALTHY
    content: HealthStatus = HealthStatus.HEALTHY
    performance: HealthStatus = HealthStatus.HEALTHY

    def get(self, component: HealthComponent) -> HealthStatus:
        return getattr(self, component.value)

    def items(self) -> Iterator[tuple[HealthComponent, HealthStatus]]:
        for component in HealthComponent:
            yield component, self.get(component)


@dataclass(frozen=True)
class HealthMetrics:
    content_count: int = 0
    product_count: int = 0
    error_count_24h: int = 0


@dataclass(frozen=True)
class HealthCheckRecord:
    site_id: int
    checked_at: datetime

    overall_status: HealthStatus
    health_score: int
    components: ComponentStatuses

    response_time_ms: Optional[int] = None
    uptime_24h: float = 100.0

    issues: list[HealthIssue] = field(default_factory=list)
    warnings: list[HealthIssue] = field(default_factory=list)
    metrics: HealthMetrics = field(default_factory=HealthMetrics)

    scoring_version: int = 1
    id: Optional[int] = None

    @property
    def is_up(self) -> bool:
        return self.overall_status is not HealthStatus.CRITICAL

    @property
    def is_critical(self) -> bool:
        return self.overall_status is HealthStatus.CRITICAL
