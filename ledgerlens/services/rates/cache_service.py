from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, Optional

from ledgerlens.core.config import Settings, get_settings
from ledgerlens.models.currency import ExchangeRate, RateSnapshot
from .base import RateProvider
from .providers import make_rate_provider

"""Central rate cache service.

Purpose:
    One place that answers rate lookups for the whole process, caching
    (day, currency) entries so a batch of conversions never hits the provider
    twice for the same pair.

Design:
    - Wraps the provider selected by settings.exchange_rate_provider.
    - Entries for past days never expire (reference rates are final); entries
      for today expire after settings.rates_cache_ttl_seconds.
    - Manual overrides (rate + TTL) win over cached and provider rates.
    - A missing rate is cached as None too, so repeated misses stay cheap
      until the entry expires.
    - snapshot() freezes one day's rates into an immutable RateSnapshot that
      the pure computations consume.
"""


@dataclass
class _CacheEntry:
    rate: Optional[float]
    fetched_at: datetime


@dataclass
class _OverrideEntry:
    rate: float
    expires_at: datetime


class CentralRateCacheService:
    """Cached rate lookups with TTL-bound entries and manual overrides."""

    def __init__(
        self,
        settings: Settings | None = None,
        provider: RateProvider | None = None,
    ):
        self._settings = settings or get_settings()
        self.reporting_currency = self._settings.reporting_currency
        self._provider = provider or make_rate_provider(
            self._settings.exchange_rate_provider,
            self.reporting_currency,
            base_url=str(self._settings.exchange_api_base_url),
            timeout=self._settings.http_timeout_seconds,
        )
        self._ttl = timedelta(seconds=self._settings.rates_cache_ttl_seconds)
        self._cache: Dict[tuple[date, str], _CacheEntry] = {}
        # Keyed by currency upper.
        self._overrides: Dict[str, _OverrideEntry] = {}

    # Internal --------------------------------------------------
    def _is_entry_valid(self, day: date, entry: _CacheEntry) -> bool:
        if day < date.today():
            return True
        return datetime.utcnow() - entry.fetched_at < self._ttl

    def _get_cached_or_refresh(self, currency: str, day: date) -> Optional[float]:
        key = (day, currency)
        entry = self._cache.get(key)
        if entry and self._is_entry_valid(day, entry):
            return entry.rate
        rate = self._provider.get_rate(currency, day)
        self._cache[key] = _CacheEntry(rate=rate, fetched_at=datetime.utcnow())
        return rate

    def _purge_expired_overrides(self) -> None:
        now = datetime.utcnow()
        expired = [k for k, v in self._overrides.items() if v.expires_at <= now]
        for k in expired:
            self._overrides.pop(k, None)

    # Manual override API -------------------------------------
    def set_override(self, currency: str, rate: float, ttl_seconds: int) -> None:
        currency = currency.upper()
        if currency == self.reporting_currency:
            raise ValueError("reporting currency rate is fixed at 1.0")
        if rate <= 0:
            raise ValueError("override rate must be positive")
        if ttl_seconds <= 0:
            raise ValueError("override ttl must be positive seconds")
        self._overrides[currency] = _OverrideEntry(
            rate=rate, expires_at=datetime.utcnow() + timedelta(seconds=ttl_seconds)
        )

    def clear_override(self, currency: str) -> bool:
        currency = currency.upper()
        return self._overrides.pop(currency, None) is not None

    def list_overrides(self) -> Dict[str, Dict[str, str | float]]:
        self._purge_expired_overrides()
        return {
            c: {"rate": v.rate, "expires_at": v.expires_at.isoformat()}
            for c, v in self._overrides.items()
        }

    # Public API -----------------------------------------------
    def get_rate(self, currency: str, on: Optional[date] = None) -> Optional[float]:
        currency = currency.upper()
        if currency == self.reporting_currency:
            return 1.0
        day = on or date.today()
        # Overrides describe "right now", so they never rewrite history.
        if day >= date.today():
            self._purge_expired_overrides()
            ov = self._overrides.get(currency)
            if ov:
                return ov.rate
        return self._get_cached_or_refresh(currency, day)

    def get_rates(
        self, currencies: Iterable[str], on: Optional[date] = None
    ) -> Dict[str, float]:
        rates: Dict[str, float] = {}
        for code in currencies:
            rate = self.get_rate(code, on)
            if rate is not None:
                rates[code.upper()] = rate
        return rates

    def snapshot(
        self, currencies: Iterable[str], as_of: Optional[date] = None
    ) -> RateSnapshot:
        day = as_of or date.today()
        entries = [
            ExchangeRate(rate_date=day, currency_code=code, rate_to_reporting=rate)
            for code, rate in self.get_rates(currencies, day).items()
        ]
        return RateSnapshot.from_rates(day, self.reporting_currency, entries)
