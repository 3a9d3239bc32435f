from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List

from ledgerlens.models.constants import display_category_name
from ledgerlens.models.investment import Investment
from ledgerlens.models.ledger import Account, Debt, Expense, FinancialGoal, Income
from ledgerlens.services.dates import parse_iso_date, start_of_month
from ledgerlens.services.money import clamp

"""Dashboard analytics helpers.

Scopes implemented:
    - Headline aggregates (income, spending, net savings, net worth)
    - Spending distribution by category
    - Investment allocation by type
    - Income distribution by source and monthly income trend
    - Savings goal progress

Design notes:
    All sums use the precomputed reporting-currency amounts; nothing is
    reconverted here. Inputs are already fetched collections, so every function
    is pure and trivially testable.
"""


@dataclass(frozen=True)
class DashboardAggregates:
    total_income_reporting: float
    total_spending_reporting: float
    net_savings_reporting: float
    total_account_balance_reporting: float
    total_investment_value_reporting: float
    total_outstanding_debt_reporting: float
    net_worth_reporting: float


def compute_dashboard_aggregates(
    incomes: Iterable[Income],
    expenses: Iterable[Expense],
    accounts: Iterable[Account],
    investments: Iterable[Investment],
    debts: Iterable[Debt],
) -> DashboardAggregates:
    """Headline figures for the dashboard.

    Net worth = account balances + current investment values - unpaid debts.
    Investments without a stored current value count as zero.
    """
    total_income = sum(i.amount_reporting for i in incomes)
    total_spending = sum(e.amount_reporting for e in expenses)
    balances = sum(a.balance_reporting for a in accounts)
    invested = sum(inv.total_current_value_reporting or 0.0 for inv in investments)
    owed = sum(d.current_balance_reporting for d in debts if not d.is_paid)
    return DashboardAggregates(
        total_income_reporting=total_income,
        total_spending_reporting=total_spending,
        net_savings_reporting=total_income - total_spending,
        total_account_balance_reporting=balances,
        total_investment_value_reporting=invested,
        total_outstanding_debt_reporting=owed,
        net_worth_reporting=balances + invested - owed,
    )


# ---------------- Distributions -----------------
@dataclass(frozen=True)
class DistributionSlice:
    name: str
    value_reporting: float
    percent: float


def _slices(grouped: Dict[str, float]) -> List[DistributionSlice]:
    total = sum(grouped.values())
    items = sorted(grouped.items(), key=lambda kv: kv[1], reverse=True)
    return [
        DistributionSlice(
            name=name,
            value_reporting=value,
            percent=(value / total * 100) if total > 0 else 0.0,
        )
        for name, value in items
    ]


def compute_spending_distribution(expenses: Iterable[Expense]) -> List[DistributionSlice]:
    """Reporting-currency spend per category, largest first."""
    grouped: Dict[str, float] = {}
    for e in expenses:
        name = display_category_name(e.category) if e.category else "Uncategorized"
        grouped[name] = grouped.get(name, 0.0) + e.amount_reporting
    return _slices(grouped)


def compute_investment_allocation(
    investments: Iterable[Investment],
) -> List[DistributionSlice]:
    """Current value per investment type; types worth nothing are left out."""
    grouped: Dict[str, float] = {}
    for inv in investments:
        kind = inv.type or "Uncategorized"
        grouped[kind] = grouped.get(kind, 0.0) + (inv.total_current_value_reporting or 0.0)
    return _slices({k: v for k, v in grouped.items() if v > 0})


def total_income(incomes: Iterable[Income]) -> float:
    return sum(i.amount_reporting for i in incomes)


def compute_income_distribution(incomes: Iterable[Income]) -> List[DistributionSlice]:
    """Reporting-currency income per source, largest first."""
    grouped: Dict[str, float] = {}
    for i in incomes:
        name = i.source_name.strip() or "Uncategorized"
        grouped[name] = grouped.get(name, 0.0) + i.amount_reporting
    return _slices(grouped)


# ---------------- Income trend -----------------
@dataclass(frozen=True)
class MonthlyTotal:
    month: date
    label: str
    total_reporting: float


def compute_income_trend(incomes: Iterable[Income]) -> List[MonthlyTotal]:
    """Income per calendar month, oldest first. Rows with bad dates are skipped."""
    grouped: Dict[date, float] = {}
    for i in incomes:
        d = parse_iso_date(i.date, context=f"income {i.id}")
        if d is None:
            continue
        month = start_of_month(d)
        grouped[month] = grouped.get(month, 0.0) + i.amount_reporting
    return [
        MonthlyTotal(month=month, label=month.strftime("%b %Y"), total_reporting=total)
        for month, total in sorted(grouped.items())
    ]


# ---------------- Goals -----------------
@dataclass(frozen=True)
class GoalProgress:
    goal: FinancialGoal
    progress_percent: float
    remaining_reporting: float


def goal_progress(goal: FinancialGoal) -> float:
    """Saved share of the target in percent, 0..100; a goal without target is 0."""
    target = goal.target_amount_reporting
    if target <= 0:
        return 0.0
    return clamp(goal.current_amount_saved_reporting / target * 100, 0.0, 100.0)


def compute_goal_progress(goals: Iterable[FinancialGoal]) -> List[GoalProgress]:
    return [
        GoalProgress(
            goal=g,
            progress_percent=goal_progress(g),
            remaining_reporting=max(
                0.0, g.target_amount_reporting - g.current_amount_saved_reporting
            ),
        )
        for g in goals
    ]
