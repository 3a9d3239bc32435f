import logging
from datetime import date

import pytest

from builders import investment, snapshot, tx
from ledgerlens.services.investment_engine import (
    EMPTY_HOLDING,
    HoldingState,
    apply_transaction,
    final_state,
    performance_series,
    replay,
    value_holding,
    value_portfolio,
)


def test_average_cost_buys_and_sells():
    steps = replay(
        [
            tx("buy", "2025-01-02", 10, 10.0),
            tx("buy", "2025-01-03", 10, 20.0),
            tx("sell", "2025-01-04", 15, 30.0),
            tx("sell", "2025-01-05", 5, 30.0),
        ]
    )
    after_buys = steps[1].state
    assert after_buys.quantity == 20
    assert after_buys.cost_reporting == pytest.approx(300.0)
    assert after_buys.avg_cost_per_unit == pytest.approx(15.0)

    partial = steps[2]
    assert partial.cost_change_reporting == pytest.approx(-225.0)
    assert partial.state.quantity == 5
    assert partial.state.cost_reporting == pytest.approx(75.0)
    assert partial.state.avg_cost_per_unit == pytest.approx(15.0)

    closed = steps[3].state
    assert closed == EMPTY_HOLDING
    assert closed.avg_cost_per_unit == 0.0


def test_transactions_replay_in_date_order():
    state = final_state(
        [
            tx("sell", "2025-02-01", 5, 30.0),
            tx("buy", "2025-01-01", 10, 10.0),
        ]
    )
    assert state.quantity == 5
    assert state.cost_reporting == pytest.approx(50.0)


def test_fees_are_part_of_cost_and_reinvest_counts_as_buy():
    state = final_state(
        [
            tx("buy", "2025-01-01", 10, 10.0, fees=5.0),
            tx("reinvest", "2025-01-02", 1, 12.0),
        ]
    )
    assert state.quantity == 11
    assert state.cost_reporting == pytest.approx(117.0)


def test_dividend_changes_nothing():
    before = HoldingState(quantity=3, cost_reporting=30.0)
    after, change = apply_transaction(before, tx("dividend", "2025-01-01", 0, 4.0))
    assert after == before
    assert change == 0.0


def test_oversell_clamps_to_zero(caplog):
    with caplog.at_level(logging.INFO, logger="ledgerlens.investments"):
        state = final_state(
            [tx("buy", "2025-01-01", 2, 10.0), tx("sell", "2025-01-02", 5, 10.0)]
        )
    assert state == EMPTY_HOLDING
    assert "exceeds held quantity" in caplog.text


def test_transaction_type_is_case_insensitive():
    assert tx("BUY", "2025-01-01", 1, 1.0).transaction_type == "buy"


def test_missing_reporting_price_is_derived_from_snapshot():
    state = final_state(
        [tx("buy", "2025-01-01", 10, 100.0, fees=10.0, currency="EUR", reporting=False)],
        snapshot({"EUR": 1.1}),
    )
    assert state.cost_reporting == pytest.approx(1111.0)


def test_unavailable_rate_counts_zero_cost():
    state = final_state(
        [tx("buy", "2025-01-01", 10, 100.0, currency="BRL", reporting=False)],
        snapshot({"EUR": 1.1}),
    )
    assert state.quantity == 10
    assert state.cost_reporting == 0.0


def test_undated_transaction_is_dropped():
    state = final_state(
        [tx("buy", "2025-01-01", 1, 10.0), tx("buy", "someday", 100, 10.0)]
    )
    assert state.quantity == 1


def test_performance_series_points():
    inv = investment(price=20.0, current_value=100.0, initial_cost=75.0, start_date="2024-12-31")
    points = performance_series(
        inv,
        [
            tx("buy", "2025-01-02", 10, 10.0),
            tx("buy", "2025-01-02", 10, 20.0),
            tx("sell", "2025-02-01", 15, 25.0),
        ],
        today=date(2025, 3, 20),
    )
    assert [p.date for p in points] == [
        date(2024, 12, 31),
        date(2025, 1, 2),
        date(2025, 2, 1),
        date(2025, 3, 20),
    ]
    start, same_day, after_sell, today = points
    assert (start.value_reporting, start.cost_reporting) == (0.0, 0.0)
    # last transaction of the day wins
    assert same_day.value_reporting == pytest.approx(400.0)
    assert same_day.cost_reporting == pytest.approx(300.0)
    assert after_sell.value_reporting == pytest.approx(100.0)
    assert after_sell.cost_reporting == pytest.approx(75.0)
    assert today.label == "Mar 20, 25"
    assert today.value_reporting == 100.0
    assert today.cost_reporting == 75.0


def test_performance_series_without_transactions_is_empty():
    assert performance_series(investment(price=1.0), [], today=date(2025, 1, 1)) == []


def test_valuation_and_portfolio_order():
    fund = investment("inv-1", name="Zeta Fund", price=20.0)
    bonds = investment("inv-2", name="alpha bonds", price=5.0)
    transactions = [
        tx("buy", "2025-01-02", 10, 10.0, inv_id="inv-1"),
        tx("buy", "2025-01-02", 4, 5.0, inv_id="inv-2"),
    ]
    v = value_holding(fund, transactions[:1])
    assert v.market_value_reporting == pytest.approx(200.0)
    assert v.unrealized_gain_reporting == pytest.approx(100.0)
    assert v.gain_percent == pytest.approx(100.0)

    portfolio = value_portfolio([fund, bonds], transactions)
    assert [h.name for h in portfolio] == ["alpha bonds", "Zeta Fund"]
    assert portfolio[0].gain_percent == 0.0
