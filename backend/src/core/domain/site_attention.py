from dataclasses import dataclass, field
from datetime import datetime

from core.domain.health_status import HealthStatus


@dataclass(frozen=True)
class SiteAttention:
    site_id: int
    site_name: str
    health_score: int
    status: HealthStatus
    last_checked: datetime
    issues: list[str] = field(default_factory=list)
