from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ledgerlens.services.budget_utils import ProcessedBudget


@dataclass(frozen=True)
class BudgetSummary:
    total_limit_reporting: float
    total_actual_reporting: float
    total_remaining_vs_income: float
    percent_of_income_spent: float
    actual_income_reporting: float
    income_available: bool


def aggregate(
    processed_budgets: Iterable[ProcessedBudget], period_income_reporting: float = 0.0
) -> BudgetSummary:
    """Roll all budgets of a period up against the period's income.

    When no income was recorded the total limit stands in as the divisor so the
    ratio stays defined; ``income_available`` tells the caller which was used.
    """
    items = list(processed_budgets)
    total_limit = sum(p.limit_reporting for p in items)
    total_actual = sum(p.actual_reporting for p in items)

    income_available = period_income_reporting > 0
    divisor = period_income_reporting if income_available else total_limit
    percent = total_actual / divisor * 100 if divisor > 0 else 0.0

    return BudgetSummary(
        total_limit_reporting=total_limit,
        total_actual_reporting=total_actual,
        total_remaining_vs_income=divisor - total_actual,
        percent_of_income_spent=percent,
        actual_income_reporting=period_income_reporting,
        income_available=income_available,
    )
