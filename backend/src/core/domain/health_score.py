"""Composite health scoring.

A record's score depends only on its component statuses and the weighting
scheme, so two records carrying the same ``scoring_version`` are comparable
in trends.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from core.domain.health_check_record import ComponentStatuses
from core.domain.health_component import HealthComponent
from core.domain.health_status import HealthStatus

COMPONENT_SUB_SCORES: dict[HealthStatus, int] = {
    HealthStatus.HEALTHY: 100,
    HealthStatus.WARNING: 60,
    HealthStatus.UNKNOWN: 50,
    HealthStatus.CRITICAL: 0,
}


def _equal_weights() -> dict[HealthComponent, float]:
    return {component: 1.0 for component in HealthComponent}


@dataclass(frozen=True)
class HealthScoringPolicy:
    weights: dict[HealthComponent, float] = field(default_factory=_equal_weights)
    version: int = 1

    def __post_init__(self):
        unknown = set(self.weights) - set(HealthComponent)
        if unknown:
            raise ValueError(f"Unknown health components in weights: {sorted(str(c) for c in unknown)}")

        if any(weight < 0 for weight in self.weights.values()):
            raise ValueError("Component weights must be non-negative")

        if sum(self.weights.values()) <= 0:
            raise ValueError("At least one component weight must be positive")

    @classmethod
    def from_mapping(cls, weights: dict[str, float], version: int = 1) -> "HealthScoringPolicy":
        return cls(
            weights={HealthComponent(name): float(weight) for name, weight in weights.items()},
            version=version,
        )

    def score(self, components: ComponentStatuses) -> int:
        total_weight = 0.0
        weighted_sum = 0.0

        for component, status in components.items():
            weight = self.weights.get(component, 0.0)
            total_weight += weight
            weighted_sum += weight * COMPONENT_SUB_SCORES[status]

        raw_score = Decimal(str(weighted_sum / total_weight)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)

        return max(0, min(100, int(raw_score)))


def derive_overall_status(components: ComponentStatuses) -> HealthStatus:
    statuses = [status for _, status in components.items()]

    if HealthStatus.CRITICAL in statuses:
        return HealthStatus.CRITICAL

    if any(status in (HealthStatus.WARNING, HealthStatus.UNKNOWN) for status in statuses):
        return HealthStatus.WARNING

    return HealthStatus.HEALTHY


def worst_status(*statuses: HealthStatus) -> HealthStatus:
    if not statuses:
        return HealthStatus.HEALTHY

    return max(statuses, key=lambda status: status.severity)
