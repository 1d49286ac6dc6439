from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class PlatformIssue:
    site_id: int
    site_name: str
    issue_type: str
    severity: str
    message: str
    occurred_at: datetime


@dataclass
class PlatformHealthOverview:
    total_sites: int = 0
    healthy_sites: int = 0
    warning_sites: int = 0
    critical_sites: int = 0
    unchecked_sites: int = 0

    avg_platform_uptime: float = 0.0
    avg_response_time: float = 0.0
    total_errors_24h: int = 0

    recent_issues: list[PlatformIssue] = field(default_factory=list)

    @property
    def checked_sites(self) -> int:
        return self.healthy_sites + self.warning_sites + self.critical_sites
