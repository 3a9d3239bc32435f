from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ledgerlens.models.currency import RateSnapshot

"""Pivot conversion through the reporting currency.

Every conversion goes source -> reporting -> target using one RateSnapshot, so
a whole batch of conversions shares the same "as of" day. A missing rate is a
value (Unavailable), not an exception: the display layer decides how to fall
back, typically to the native amount plus its currency code.
"""


@dataclass(frozen=True)
class Unavailable:
    amount: float
    currency: str
    target: str
    missing_currency: str


ConversionOutcome = Union[float, Unavailable]


def convert(
    amount: float, source: str, target: str, snapshot: RateSnapshot
) -> ConversionOutcome:
    source = source.strip().upper()
    target = target.strip().upper()
    if source == target:
        return amount
    source_rate = snapshot.rate_to_reporting(source)
    if source_rate is None:
        return Unavailable(amount, source, target, missing_currency=source)
    target_rate = snapshot.rate_to_reporting(target)
    if target_rate is None:
        return Unavailable(amount, source, target, missing_currency=target)
    amount_reporting = amount * source_rate
    return amount_reporting / target_rate


def to_reporting(amount: float, currency: str, snapshot: RateSnapshot) -> ConversionOutcome:
    return convert(amount, currency, snapshot.reporting_currency, snapshot)
