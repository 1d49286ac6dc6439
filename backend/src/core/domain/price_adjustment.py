from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Union

from core.exceptions.invalid_price_adjustment_error import InvalidPriceAdjustmentError

Number = Union[int, float, Decimal, str]

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


class AdjustmentType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class AdjustmentOperation(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value

    # str() keeps 19.99 as 19.99 instead of its binary float expansion
    return Decimal(str(value))


def round2(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceAdjustmentRule:
    type: AdjustmentType
    value: Decimal
    operation: AdjustmentOperation

    def __post_init__(self):
        try:
            object.__setattr__(self, "type", AdjustmentType(self.type))
        except ValueError:
            raise InvalidPriceAdjustmentError("type", self.type)

        try:
            object.__setattr__(self, "operation", AdjustmentOperation(self.operation))
        except ValueError:
            raise InvalidPriceAdjustmentError("operation", self.operation)

        try:
            value = to_decimal(self.value)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidPriceAdjustmentError("value", self.value)

        if not value.is_finite() or value < ZERO:
            raise InvalidPriceAdjustmentError("value", self.value)

        object.__setattr__(self, "value", value)

    def apply(self, current_price: Number) -> Decimal:
        current = to_decimal(current_price)

        if self.type is AdjustmentType.PERCENTAGE:
            factor = self.value / HUNDRED
            multiplier = 1 + factor if self.operation is AdjustmentOperation.INCREASE else 1 - factor
            new_price = round2(current * multiplier)
        elif self.operation is AdjustmentOperation.INCREASE:
            new_price = round2(current + self.value)
        else:
            new_price = round2(current - self.value)

        return max(ZERO, new_price)


def adjust_price(current_price: Number, rule: PriceAdjustmentRule) -> Decimal:
    return rule.apply(current_price)
