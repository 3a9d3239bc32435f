from datetime import date

import pytest
from pydantic import ValidationError

from builders import snapshot
from ledgerlens.models import ExchangeRate, RateSnapshot
from ledgerlens.services.rates.conversion import (
    Unavailable,
    convert,
    to_reporting,
)


@pytest.mark.parametrize("code", ["USD", "EUR", "BRL", "XYZ"])
def test_same_currency_is_identity_even_without_rate(code):
    assert convert(123.45, code, code, snapshot()) == 123.45


def test_pivots_through_reporting_currency():
    snap = snapshot({"EUR": 1.1, "GBP": 1.25})
    # 100 EUR -> 110 USD -> 88 GBP
    assert convert(100, "EUR", "GBP", snap) == pytest.approx(88.0)
    assert convert(100, "EUR", "USD", snap) == pytest.approx(110.0)
    assert convert(110, "USD", "EUR", snap) == pytest.approx(100.0)


def test_round_trip_returns_original_amount():
    snap = snapshot()
    there = convert(250.0, "GBP", "JPY", snap)
    assert convert(there, "JPY", "GBP", snap) == pytest.approx(250.0)


def test_codes_are_normalised():
    assert convert(10, " eur", "usd ", snapshot({"EUR": 1.5})) == pytest.approx(15.0)


def test_missing_source_rate_is_a_value_not_an_error():
    out = convert(42.0, "BRL", "EUR", snapshot())
    assert isinstance(out, Unavailable)
    assert out.missing_currency == "BRL"
    assert (out.amount, out.currency, out.target) == (42.0, "BRL", "EUR")


def test_missing_target_rate_names_target():
    out = convert(1500.0, "EUR", "BRL", snapshot())
    assert isinstance(out, Unavailable)
    assert out.missing_currency == "BRL"
    assert out.amount == 1500.0


def test_non_positive_rate_counts_as_missing():
    assert isinstance(convert(1, "EUR", "USD", snapshot({"EUR": 0.0})), Unavailable)


def test_to_reporting_uses_snapshot_reporting_currency():
    snap = snapshot({"USD": 0.9}, reporting="EUR")
    assert to_reporting(10, "USD", snap) == pytest.approx(9.0)
    assert to_reporting(10, "EUR", snap) == 10


def test_snapshot_from_exchange_rates_keeps_one_day():
    day = date(2025, 3, 1)
    snap = RateSnapshot.from_rates(
        day,
        "USD",
        [
            ExchangeRate(rate_date=day, currency_code="eur", rate_to_reporting=1.1),
            ExchangeRate(rate_date=date(2025, 2, 28), currency_code="GBP", rate_to_reporting=1.2),
            ExchangeRate(rate_date=day, currency_code="USD", rate_to_reporting=3.0),
        ],
    )
    assert snap.rate_to_reporting("EUR") == 1.1
    assert snap.rate_to_reporting("GBP") is None
    assert snap.rate_to_reporting("USD") == 1.0


def test_exchange_rate_must_be_positive():
    with pytest.raises(ValidationError):
        ExchangeRate(rate_date=date(2025, 3, 1), currency_code="EUR", rate_to_reporting=0)
