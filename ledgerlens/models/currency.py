from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_code(value: str) -> str:
    code = value.strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValueError("currency must be a 3-letter ISO 4217 code")
    return code


class Currency(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str = ""
    symbol: str = ""
    decimal_digits: int = Field(2, ge=0, le=8)
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def valid_code(cls, v: str) -> str:
        return normalize_code(v)


class ExchangeRate(BaseModel):
    model_config = ConfigDict(frozen=True)

    rate_date: date
    currency_code: str
    rate_to_reporting: float = Field(..., gt=0)

    @field_validator("currency_code")
    @classmethod
    def valid_code(cls, v: str) -> str:
        return normalize_code(v)


class RateSnapshot(BaseModel):
    """Exchange rates valid on one calendar day.

    ``rates`` maps a currency code to units of reporting currency per one unit
    of that currency. The reporting currency always resolves to 1.0, whatever
    the map says.
    """

    model_config = ConfigDict(frozen=True)

    as_of: date
    reporting_currency: str = "USD"
    rates: Dict[str, float] = Field(default_factory=dict)

    @field_validator("reporting_currency")
    @classmethod
    def valid_reporting(cls, v: str) -> str:
        return normalize_code(v)

    @field_validator("rates")
    @classmethod
    def upper_keys(cls, v: Mapping[str, float]) -> Dict[str, float]:
        return {k.strip().upper(): float(r) for k, r in v.items()}

    def rate_to_reporting(self, code: str) -> Optional[float]:
        code = code.strip().upper()
        if code == self.reporting_currency:
            return 1.0
        rate = self.rates.get(code)
        if rate is None or rate <= 0:
            return None
        return rate

    def codes(self) -> set[str]:
        return set(self.rates) | {self.reporting_currency}

    @classmethod
    def from_rates(
        cls, as_of: date, reporting_currency: str, rates: Iterable[ExchangeRate]
    ) -> "RateSnapshot":
        """Snapshot of the rates recorded for ``as_of``; other days are ignored."""
        return cls(
            as_of=as_of,
            reporting_currency=reporting_currency,
            rates={r.currency_code: r.rate_to_reporting for r in rates if r.rate_date == as_of},
        )
