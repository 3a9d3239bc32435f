import pytest

from builders import budget, expense
from ledgerlens.services.budget_summary import aggregate
from ledgerlens.services.budget_utils import process_budgets


def _processed():
    return process_budgets(
        [budget("food_and_drink", 200.0), budget("housing", 800.0)],
        [expense("food_and_drink", "2025-03-03", 150.0), expense("housing", "2025-03-01", 800.0)],
    )


def test_against_recorded_income():
    summary = aggregate(_processed(), period_income_reporting=2000.0)
    assert summary.income_available
    assert summary.total_limit_reporting == pytest.approx(1000.0)
    assert summary.total_actual_reporting == pytest.approx(950.0)
    assert summary.total_remaining_vs_income == pytest.approx(1050.0)
    assert summary.percent_of_income_spent == pytest.approx(47.5)
    assert summary.actual_income_reporting == 2000.0


def test_falls_back_to_total_limit_without_income():
    summary = aggregate(_processed())
    assert not summary.income_available
    assert summary.total_remaining_vs_income == pytest.approx(50.0)
    assert summary.percent_of_income_spent == pytest.approx(95.0)


def test_empty_period():
    summary = aggregate([])
    assert summary.total_limit_reporting == 0
    assert summary.percent_of_income_spent == 0.0
    assert summary.total_remaining_vs_income == 0
