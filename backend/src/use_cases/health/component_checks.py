from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from core.domain.health_check_record import HealthIssue
from core.domain.health_component import HealthComponent
from core.domain.health_score import worst_status
from core.domain.health_status import HealthStatus
from core.domain.health_thresholds import HealthThresholds
from core.domain.site import Site
from core.exceptions.site_unreachable_error import SiteUnreachableError
from core.port.site_probe import SiteProbe
from core.port.site_repository import SiteRepository

SECONDS_PER_DAY = 86_400


@dataclass(frozen=True)
class SiteCheckContext:
    site: Site
    checked_at: datetime
    uptime_24h: float
    error_count_24h: int


@dataclass
class ComponentCheckResult:
    status: HealthStatus
    issues: list[HealthIssue] = field(default_factory=list)
    warnings: list[HealthIssue] = field(default_factory=list)

    response_time_ms: Optional[int] = None
    content_count: Optional[int] = None
    product_count: Optional[int] = None


class ComponentCheck(ABC):
    component: HealthComponent

    @abstractmethod
    async def run(self, context: SiteCheckContext) -> ComponentCheckResult:
        raise NotImplementedError


class DomainCheck(ComponentCheck):
    component = HealthComponent.DOMAIN

    def __init__(self, probe: SiteProbe) -> None:
        self.probe = probe

    async def run(self, context: SiteCheckContext) -> ComponentCheckResult:
        domain = context.site.custom_domain

        if not domain:
            return ComponentCheckResult(HealthStatus.HEALTHY)

        result = ComponentCheckResult(HealthStatus.HEALTHY)

        if not context.site.domain_verified:
            result.status = HealthStatus.WARNING
            result.warnings.append(HealthIssue("domain", f"Custom domain {domain} is not verified"))

        try:
            addresses = await self.probe.resolve(domain)
        except OSError as e:
            addresses = []
            reason = str(e)
        else:
            reason = "no addresses returned"

        if not addresses:
            result.status = HealthStatus.CRITICAL
            result.issues.append(
                HealthIssue("domain_unresolvable", f"Custom domain {domain} does not resolve: {reason}", "high")
            )

        return result


class SslCheck(ComponentCheck):
    component = HealthComponent.SSL

    def __init__(self, probe: SiteProbe, thresholds: HealthThresholds) -> None:
        self.probe = probe
        self.thresholds = thresholds

    async def run(self, context: SiteCheckContext) -> ComponentCheckResult:
        host = context.site.public_host(self.thresholds.platform_domain)

        try:
            expires_at = await self.probe.certificate_expiry(host, self.thresholds.probe_timeout_seconds)
        except (SiteUnreachableError, OSError) as e:
            return self._unavailable(f"Could not read SSL certificate for {host}: {e}")

        if expires_at is None:
            return self._unavailable(f"No SSL certificate presented by {host}")

        days_left = (expires_at - context.checked_at).total_seconds() / SECONDS_PER_DAY

        if days_left < 0:
            return ComponentCheckResult(
                HealthStatus.CRITICAL,
                issues=[HealthIssue("ssl", f"SSL certificate for {host} has expired", "high")],
            )

        if days_left <= self.thresholds.ssl_critical_days:
            return ComponentCheckResult(
                HealthStatus.CRITICAL,
                issues=[HealthIssue("ssl", f"SSL certificate for {host} expires in {int(days_left)} days", "high")],
            )

        if days_left <= self.thresholds.ssl_warning_days:
            return ComponentCheckResult(
                HealthStatus.WARNING,
                warnings=[HealthIssue("ssl", f"SSL certificate for {host} expires in {int(days_left)} days")],
            )

        return ComponentCheckResult(HealthStatus.HEALTHY)

    def _unavailable(self, message: str) -> ComponentCheckResult:
        return ComponentCheckResult(
            HealthStatus.UNKNOWN,
            warnings=[HealthIssue("ssl_unavailable", message, "low")],
        )


class ContentCheck(ComponentCheck):
    component = HealthComponent.CONTENT

    def __init__(self, site_repository: SiteRepository) -> None:
        self.site_repository = site_repository

    async def run(self, context: SiteCheckContext) -> ComponentCheckResult:
        content_count = await self.site_repository.count_published_content(context.site.id)
        product_count = await self.site_repository.count_active_products(context.site.id)

        result = ComponentCheckResult(
            HealthStatus.HEALTHY,
            content_count=content_count,
            product_count=product_count,
        )

        if content_count == 0:
            result.status = HealthStatus.WARNING
            result.warnings.append(HealthIssue("content", "No published content", "low"))

        if product_count == 0:
            result.status = HealthStatus.WARNING
            result.warnings.append(HealthIssue("products", "No active products", "low"))

        return result


class PerformanceCheck(ComponentCheck):
    component = HealthComponent.PERFORMANCE

    def __init__(self, probe: SiteProbe, thresholds: HealthThresholds) -> None:
        self.probe = probe
        self.thresholds = thresholds

    async def run(self, context: SiteCheckContext) -> ComponentCheckResult:
        thresholds = self.thresholds
        url = context.site.public_url(thresholds.platform_domain)

        statuses: list[HealthStatus] = [HealthStatus.HEALTHY]
        result = ComponentCheckResult(HealthStatus.HEALTHY)

        try:
            response = await self.probe.fetch(url, thresholds.probe_timeout_seconds)
        except SiteUnreachableError as e:
            statuses.append(HealthStatus.CRITICAL)
            result.issues.append(HealthIssue("site_unreachable", f"Site is unreachable: {e.reason}", "high"))
        else:
            response_time = response.response_time_ms
            result.response_time_ms = response_time

            if response.status_code >= 400:
                statuses.append(HealthStatus.CRITICAL)
                result.issues.append(
                    HealthIssue("http_status", f"Site responded with HTTP {response.status_code}", "high")
                )

            if response_time > thresholds.response_time_critical_ms:
                statuses.append(HealthStatus.CRITICAL)
                result.issues.append(HealthIssue("performance", f"High response time: {response_time}ms", "high"))
            elif response_time > thresholds.response_time_warning_ms:
                statuses.append(HealthStatus.WARNING)
                result.warnings.append(HealthIssue("performance", f"Elevated response time: {response_time}ms"))

        if context.uptime_24h < thresholds.min_uptime_percent:
            statuses.append(HealthStatus.CRITICAL)
            result.issues.append(HealthIssue("uptime", f"Low uptime: {context.uptime_24h}%", "high"))

        if context.error_count_24h > thresholds.error_critical_threshold:
            statuses.append(HealthStatus.CRITICAL)
            result.issues.append(
                HealthIssue("errors", f"High error count: {context.error_count_24h} in last 24h", "high")
            )
        elif context.error_count_24h > 0:
            statuses.append(HealthStatus.WARNING)
            result.warnings.append(HealthIssue("errors", f"{context.error_count_24h} errors in last 24h"))

        result.status = worst_status(*statuses)

        return result
