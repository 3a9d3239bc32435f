"""Money / rounding helpers.

Centralized so budgets, valuations and display formatting use identical
rounding semantics. Computations keep full float precision; rounding happens
only when a value is presented.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP


def round_to(value: float, digits: int) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
