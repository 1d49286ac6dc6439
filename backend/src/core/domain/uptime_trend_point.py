from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

# A window without checks carries no evidence of downtime.
NO_DATA_UPTIME = 100.0


def round_metric(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def uptime_percentage(successful_checks: int, total_checks: int) -> float:
    if total_checks == 0:
        return NO_DATA_UPTIME

    return round_metric(successful_checks / total_checks * 100)


@dataclass(frozen=True)
class UptimeTrendPoint:
    date: date
    uptime_percentage: float = NO_DATA_UPTIME
    avg_response_time: Optional[float] = None
    error_count: int = 0
    total_checks: int = 0

    @property
    def has_data(self) -> bool:
        return self.total_checks > 0


@dataclass(frozen=True)
class UptimeStats:
    uptime_percentage: float
    total_checks: int
    successful_checks: int
    avg_response_time: Optional[float]
    max_downtime_minutes: int
