import pytest

from ledgerlens.core.config import Settings


def test_currencies_are_normalised():
    s = Settings(reporting_currency=" usd", preferred_currency="eur ")
    s.init_post_load()
    assert (s.reporting_currency, s.preferred_currency) == ("USD", "EUR")


@pytest.mark.parametrize(
    "overrides",
    [
        {"exchange_rate_provider": "carrier-pigeon"},
        {"budget_warn_pct": 90, "budget_danger_pct": 85},
        {"budget_warn_pct": 0},
        {"ledger_data_file": "/nonexistent/ledger.json"},
    ],
)
def test_invalid_settings_are_rejected(overrides):
    s = Settings(**overrides)
    with pytest.raises(ValueError):
        s.init_post_load()
