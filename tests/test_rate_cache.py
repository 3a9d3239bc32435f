from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from ledgerlens.services.http_client import HttpError
from ledgerlens.services.rates import providers
from ledgerlens.services.rates.base import RateProvider
from ledgerlens.services.rates.cache_service import CentralRateCacheService
from ledgerlens.services.rates.providers import (
    ExternalHTTPRateProvider,
    StaticRateProvider,
    make_rate_provider,
)


class CountingProvider(RateProvider):
    def __init__(self, rates):
        self.rates = rates
        self.calls = []

    def get_rate(self, currency: str, on: Optional[date] = None) -> Optional[float]:
        self.calls.append((currency, on))
        return self.rates.get(currency)


@pytest.fixture
def provider():
    return CountingProvider({"EUR": 1.1, "GBP": 1.25})


@pytest.fixture
def svc(settings, provider):
    return CentralRateCacheService(settings, provider=provider)


def test_reporting_currency_is_always_one(svc, provider):
    assert svc.get_rate("usd") == 1.0
    assert provider.calls == []


def test_entries_are_cached_per_day(svc, provider):
    past = date(2024, 5, 1)
    assert svc.get_rate("EUR", past) == 1.1
    assert svc.get_rate("eur", past) == 1.1
    assert svc.get_rate("BRL", past) is None
    assert svc.get_rate("BRL", past) is None
    assert provider.calls == [("EUR", past), ("BRL", past)]


def test_todays_entries_expire_after_ttl(svc, provider):
    today = date.today()
    svc.get_rate("EUR", today)
    key = (today, "EUR")
    svc._cache[key].fetched_at = datetime.utcnow() - timedelta(days=2)
    svc.get_rate("EUR", today)
    assert len(provider.calls) == 2


def test_override_wins_for_today_only(svc):
    svc.set_override("eur", 2.0, ttl_seconds=60)
    assert svc.get_rate("EUR") == 2.0
    assert svc.get_rate("EUR", date(2024, 5, 1)) == 1.1
    assert set(svc.list_overrides()) == {"EUR"}
    assert svc.clear_override("EUR")
    assert not svc.clear_override("EUR")
    assert svc.get_rate("EUR") == 1.1


def test_expired_override_is_purged(svc):
    svc.set_override("GBP", 3.0, ttl_seconds=60)
    svc._overrides["GBP"].expires_at = datetime.utcnow() - timedelta(seconds=1)
    assert svc.list_overrides() == {}
    assert svc.get_rate("GBP") == 1.25


@pytest.mark.parametrize(
    "currency, rate, ttl",
    [("USD", 1.2, 60), ("EUR", 0.0, 60), ("EUR", 1.0, 0)],
)
def test_invalid_overrides_are_rejected(svc, currency, rate, ttl):
    with pytest.raises(ValueError):
        svc.set_override(currency, rate, ttl)


def test_snapshot_omits_missing_rates(svc):
    snap = svc.snapshot(["EUR", "BRL", "USD"], date(2024, 5, 1))
    assert snap.as_of == date(2024, 5, 1)
    assert snap.rates == {"EUR": 1.1, "USD": 1.0}
    assert snap.rate_to_reporting("BRL") is None


def test_static_provider_rebases_on_reporting_currency():
    p = StaticRateProvider("EUR", {"USD": 1.0, "EUR": 1.25, "GBP": 1.5})
    assert p.get_rate("EUR") == 1.0
    assert p.get_rate("USD") == pytest.approx(0.8)
    assert p.get_rate("GBP") == pytest.approx(1.2)
    assert p.get_rate("XYZ") is None
    assert p.get_rates(["USD", "XYZ"]) == {"USD": pytest.approx(0.8)}


def test_external_provider_inverts_api_rates(monkeypatch):
    seen = []

    def fake_get_json(url, **kwargs):
        seen.append(url)
        return {"base": "USD", "rates": {"EUR": 0.8, "GBP": "bad", "JPY": 0}}

    monkeypatch.setattr(providers, "get_json", fake_get_json)
    p = ExternalHTTPRateProvider("USD", base_url="https://rates.test/")
    assert p.get_rate("EUR", date(2024, 5, 1)) == pytest.approx(1.25)
    assert p.get_rate("GBP", date(2024, 5, 1)) is None
    assert p.get_rate("JPY", date(2024, 5, 1)) is None
    assert seen == ["https://rates.test/2024-05-01?from=USD"]


def test_external_provider_falls_back_when_api_fails(monkeypatch):
    def boom(url, **kwargs):
        raise HttpError("down")

    monkeypatch.setattr(providers, "get_json", boom)
    p = ExternalHTTPRateProvider("USD", fallback=StaticRateProvider("USD", {"EUR": 1.05}))
    assert p.get_rate("EUR") == 1.05


def test_factory_rejects_unknown_kind():
    assert isinstance(make_rate_provider("static"), StaticRateProvider)
    assert isinstance(make_rate_provider("external-http"), ExternalHTTPRateProvider)
    with pytest.raises(ValueError):
        make_rate_provider("carrier-pigeon")
