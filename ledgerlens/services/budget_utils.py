"""Budget actuals: per-budget spend, remaining amount and progress.

A budget covers the calendar month starting at its ``period_start_date``.
Actual spend is the sum of the precomputed reporting amounts of the expenses
in that window whose category matches case-insensitively. Everything here is
pure; a malformed budget or expense degrades to a neutral value and is logged
so that one bad row never aborts a page of budgets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from ledgerlens.models.currency import RateSnapshot
from ledgerlens.models.ledger import Budget, Expense
from ledgerlens.services.currency_display import (
    CurrencyDirectory,
    DisplayAmount,
    display_amount,
)
from ledgerlens.services.dates import end_of_month, parse_iso_date
from ledgerlens.services.money import clamp

logger = logging.getLogger("ledgerlens.budgets")

DEFAULT_WARN_PCT = 60
DEFAULT_DANGER_PCT = 85


@dataclass(frozen=True)
class BudgetActuals:
    actual_reporting: float
    remaining_reporting: float
    progress_percent: float


@dataclass(frozen=True)
class ProcessedBudget:
    budget: Budget
    actual_reporting: float
    remaining_reporting: float
    progress_percent: float
    warn: bool
    danger: bool
    limit_display: Optional[DisplayAmount] = None
    actual_display: Optional[DisplayAmount] = None
    remaining_display: Optional[DisplayAmount] = None

    @property
    def category(self) -> str:
        return self.budget.category

    @property
    def limit_reporting(self) -> float:
        return self.budget.amount_limit_reporting


def progress_percent(actual: float, limit: float) -> float:
    if limit > 0:
        return clamp(actual / limit * 100, 0.0, 100.0)
    if actual > 0:
        return 100.0
    return 0.0


def compute_actuals(budget: Budget, expenses: Iterable[Expense]) -> BudgetActuals:
    limit = budget.amount_limit_reporting
    start = parse_iso_date(budget.period_start_date, context=f"budget {budget.id}")
    if start is None:
        logger.error(
            "budget %s has invalid period_start_date %r; reporting zero actuals",
            budget.id,
            budget.period_start_date,
        )
        return BudgetActuals(
            actual_reporting=0.0, remaining_reporting=limit, progress_percent=0.0
        )
    end = end_of_month(start)
    category = budget.category.lower()

    actual = 0.0
    for expense in expenses:
        if expense.category.lower() != category:
            continue
        spent_on = parse_iso_date(expense.date, context=f"expense {expense.id}")
        if spent_on is None:
            continue
        if start <= spent_on <= end:
            actual += expense.amount_reporting

    return BudgetActuals(
        actual_reporting=actual,
        remaining_reporting=limit - actual,
        progress_percent=progress_percent(actual, limit),
    )


def process_budget(
    budget: Budget,
    expenses: Sequence[Expense],
    *,
    warn_pct: int = DEFAULT_WARN_PCT,
    danger_pct: int = DEFAULT_DANGER_PCT,
    snapshot: Optional[RateSnapshot] = None,
    preferred_currency: Optional[str] = None,
    directory: Optional[CurrencyDirectory] = None,
) -> ProcessedBudget:
    actuals = compute_actuals(budget, expenses)
    pct = actuals.progress_percent
    limit_display = actual_display = remaining_display = None
    if snapshot is not None and preferred_currency:
        directory = directory or CurrencyDirectory.default()
        reporting = snapshot.reporting_currency
        # Limit falls back to what the user typed; spend figures only exist in
        # the reporting currency, so they fall back to that.
        limit_display = display_amount(
            budget.amount_limit_reporting,
            reporting,
            preferred_currency,
            snapshot,
            directory,
            fallback_amount=budget.amount_limit_native,
            fallback_currency=budget.currency_code,
        )
        actual_display = display_amount(
            actuals.actual_reporting, reporting, preferred_currency, snapshot, directory
        )
        remaining_display = display_amount(
            actuals.remaining_reporting, reporting, preferred_currency, snapshot, directory
        )
    return ProcessedBudget(
        budget=budget,
        actual_reporting=actuals.actual_reporting,
        remaining_reporting=actuals.remaining_reporting,
        progress_percent=pct,
        warn=pct >= warn_pct,
        danger=pct >= danger_pct,
        limit_display=limit_display,
        actual_display=actual_display,
        remaining_display=remaining_display,
    )


def process_budgets(
    budgets: Iterable[Budget],
    expenses: Iterable[Expense],
    *,
    warn_pct: int = DEFAULT_WARN_PCT,
    danger_pct: int = DEFAULT_DANGER_PCT,
    snapshot: Optional[RateSnapshot] = None,
    preferred_currency: Optional[str] = None,
    directory: Optional[CurrencyDirectory] = None,
) -> List[ProcessedBudget]:
    expense_list = list(expenses)
    return [
        process_budget(
            b,
            expense_list,
            warn_pct=warn_pct,
            danger_pct=danger_pct,
            snapshot=snapshot,
            preferred_currency=preferred_currency,
            directory=directory,
        )
        for b in budgets
    ]


def quick_view(processed: Iterable[ProcessedBudget], limit: int = 5) -> List[ProcessedBudget]:
    """Most consumed budgets first, as shown on the dashboard."""
    return sorted(processed, key=lambda p: p.progress_percent, reverse=True)[:limit]
