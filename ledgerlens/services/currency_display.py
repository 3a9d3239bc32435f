"""Currency metadata lookup and display formatting.

The lookup is total: every code resolves to either ``Found`` (with metadata) or
``Unknown`` (just the code), so callers branch in one place instead of checking
for missing entries everywhere.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Union

from ledgerlens.models.constants import DEFAULT_CURRENCIES
from ledgerlens.models.currency import Currency, RateSnapshot
from ledgerlens.services.money import round_to
from ledgerlens.services.rates.conversion import Unavailable, convert

logger = logging.getLogger("ledgerlens.currency")


@dataclass(frozen=True)
class Found:
    currency: Currency


@dataclass(frozen=True)
class Unknown:
    code: str


LookupResult = Union[Found, Unknown]


class CurrencyDirectory:
    def __init__(self, currencies: Iterable[Currency]):
        self._by_code: Dict[str, Currency] = {c.code: c for c in currencies}

    @classmethod
    def default(cls) -> "CurrencyDirectory":
        return cls(
            Currency(code=code, name=name, symbol=symbol, decimal_digits=digits)
            for code, (name, symbol, digits) in DEFAULT_CURRENCIES.items()
        )

    def lookup(self, code: str) -> LookupResult:
        code = code.strip().upper()
        found = self._by_code.get(code)
        if found is None:
            return Unknown(code)
        return Found(found)

    def codes(self) -> list[str]:
        return sorted(self._by_code)


def format_amount(amount: float, lookup: LookupResult) -> str:
    if isinstance(lookup, Unknown):
        return f"{amount:,.2f} {lookup.code}"
    cur = lookup.currency
    digits = cur.decimal_digits
    value = round_to(amount, digits)
    sign = "-" if value < 0 else ""
    return f"{sign}{cur.symbol or cur.code + ' '}{abs(value):,.{digits}f}"


@dataclass(frozen=True)
class DisplayAmount:
    """An amount prepared for display.

    ``converted`` is False when the preferred-currency rate was unavailable; in
    that case ``amount`` / ``currency`` hold the fallback (native) figure.
    """

    amount: float
    currency: str
    text: str
    converted: bool


def display_amount(
    amount: float,
    source: str,
    target: str,
    snapshot: RateSnapshot,
    directory: CurrencyDirectory,
    *,
    fallback_amount: Optional[float] = None,
    fallback_currency: Optional[str] = None,
) -> DisplayAmount:
    """Convert ``amount`` for display, falling back to a native figure.

    When no explicit fallback is given the unconverted source amount is shown.
    """
    outcome = convert(amount, source, target, snapshot)
    if isinstance(outcome, Unavailable):
        logger.debug(
            "no rate for %s, showing native amount", outcome.missing_currency
        )
        fb_amount = amount if fallback_amount is None else fallback_amount
        fb_currency = (fallback_currency or source).upper()
        return DisplayAmount(
            amount=fb_amount,
            currency=fb_currency,
            text=format_amount(fb_amount, directory.lookup(fb_currency)),
            converted=False,
        )
    target = target.upper()
    return DisplayAmount(
        amount=outcome,
        currency=target,
        text=format_amount(outcome, directory.lookup(target)),
        converted=True,
    )
