from __future__ import annotations

"""Concrete rate providers and factory.

'static' serves a built-in table of USD-denominated placeholder rates, rebased
onto whichever reporting currency is configured. 'external-http' fetches daily
reference rates from the Frankfurter API and falls back to the static table
when the API is unreachable.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Dict, Optional

from .base import RateProvider
from ledgerlens.services.http_client import get_json, HttpError

logger = logging.getLogger("ledgerlens.rates")

# USD per 1 unit of currency
_STATIC_USD_RATES: Dict[str, float] = {
    "USD": 1.0,
    "EUR": 1.08,
    "GBP": 1.27,
    "JPY": 0.0067,
    "CAD": 0.73,
    "AUD": 0.66,
    "BRL": 0.18,
    "GEL": 0.37,
}


class StaticRateProvider(RateProvider):
    def __init__(
        self,
        reporting_currency: str = "USD",
        usd_rates: Optional[Dict[str, float]] = None,
    ):
        self.reporting_currency = reporting_currency.upper()
        self._usd_rates = {
            k.upper(): v for k, v in (usd_rates or _STATIC_USD_RATES).items()
        }

    def get_rate(self, currency: str, on: Optional[date] = None) -> Optional[float]:  # type: ignore[override]
        code = currency.upper()
        if code == self.reporting_currency:
            return 1.0
        usd_per_unit = self._usd_rates.get(code)
        usd_per_reporting = self._usd_rates.get(self.reporting_currency)
        if not usd_per_unit or not usd_per_reporting:
            return None
        return usd_per_unit / usd_per_reporting


class ExternalHTTPRateProvider(RateProvider):
    """Frankfurter (ECB reference rates) provider with a small per-day cache.

    The API answers "units of X per 1 unit of the base", so with base set to the
    reporting currency each rate is inverted to get reporting units per 1 X.
    Historical days never change and are cached indefinitely; 'latest' expires.
    """

    _LATEST_TTL = timedelta(minutes=30)

    def __init__(
        self,
        reporting_currency: str = "USD",
        base_url: str = "https://api.frankfurter.app",
        timeout: float = 8.0,
        fallback: Optional[RateProvider] = None,
    ):
        self.reporting_currency = reporting_currency.upper()
        self._base_url = str(base_url).rstrip("/")
        self._timeout = timeout
        self._fallback = fallback or StaticRateProvider(reporting_currency)
        self._rates: Dict[str, Dict[str, float]] = {}
        self._latest_expires: Optional[datetime] = None

    def _fetch(self, day_key: str) -> Dict[str, float]:
        url = f"{self._base_url}/{day_key}?from={self.reporting_currency}"
        data = get_json(url, timeout=self._timeout, retries=2)
        raw = data.get("rates") or {}
        rates: Dict[str, float] = {self.reporting_currency: 1.0}
        for code, per_reporting in raw.items():
            try:
                value = float(per_reporting)
            except (TypeError, ValueError):
                continue
            if value > 0:
                rates[code.upper()] = 1 / value
        return rates

    def _rates_for(self, on: Optional[date]) -> Optional[Dict[str, float]]:
        now = datetime.utcnow()
        day_key = "latest" if on is None or on >= date.today() else on.isoformat()
        cached = self._rates.get(day_key)
        if cached is not None and (
            day_key != "latest"
            or (self._latest_expires is not None and now < self._latest_expires)
        ):
            return cached
        try:
            rates = self._fetch(day_key)
        except HttpError as exc:
            logger.warning("rate API unavailable for %s, using fallback: %s", day_key, exc)
            return None
        self._rates[day_key] = rates
        if day_key == "latest":
            self._latest_expires = now + self._LATEST_TTL
        return rates

    def get_rate(self, currency: str, on: Optional[date] = None) -> Optional[float]:  # type: ignore[override]
        code = currency.upper()
        if code == self.reporting_currency:
            return 1.0
        rates = self._rates_for(on)
        if rates is None:
            return self._fallback.get_rate(code, on)
        return rates.get(code)


_PROVIDER_REGISTRY = {
    "static": StaticRateProvider,
    "external-http": ExternalHTTPRateProvider,
}


def make_rate_provider(
    kind: str,
    reporting_currency: str = "USD",
    *,
    base_url: Optional[str] = None,
    timeout: float = 8.0,
) -> RateProvider:
    cls = _PROVIDER_REGISTRY.get(kind)
    if not cls:
        raise ValueError(f"Unknown rate provider kind '{kind}'")
    if cls is ExternalHTTPRateProvider:
        return ExternalHTTPRateProvider(
            reporting_currency,
            base_url=base_url or "https://api.frankfurter.app",
            timeout=timeout,
        )
    return cls(reporting_currency)
