"""Fetch -> compute -> publish cycles for the budget page and the dashboard.

Each cycle fetches its independent collections in parallel, runs the pure
computations, and publishes the resulting view. Every cycle takes a token from
one monotonically increasing counter; when a cycle finishes after a newer cycle
of the same view has started, its result is discarded rather than overwriting
the newer one. Failed fetches degrade to empty collections with a warning.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Protocol, Sequence, TypeVar

from ledgerlens.db.repository import LedgerRepository, fetch_or_empty
from ledgerlens.models.currency import RateSnapshot
from ledgerlens.services.analytics_utils import (
    DashboardAggregates,
    DistributionSlice,
    GoalProgress,
    MonthlyTotal,
    compute_dashboard_aggregates,
    compute_goal_progress,
    compute_income_distribution,
    compute_income_trend,
    compute_investment_allocation,
    compute_spending_distribution,
    total_income,
)
from ledgerlens.services.balance_history import BalancePoint, DateRange, balance_history
from ledgerlens.services.budget_summary import BudgetSummary, aggregate
from ledgerlens.services.budget_utils import (
    DEFAULT_DANGER_PCT,
    DEFAULT_WARN_PCT,
    ProcessedBudget,
    process_budgets,
    quick_view,
)
from ledgerlens.services.currency_display import CurrencyDirectory
from ledgerlens.services.dates import end_of_month, parse_iso_date, start_of_month

logger = logging.getLogger("ledgerlens.refresh")

T = TypeVar("T")


def _within(value: str, date_range: DateRange) -> bool:
    d = parse_iso_date(value)
    return d is not None and date_range.start <= d <= date_range.end


class SupportsSnapshot(Protocol):
    def snapshot(
        self, currencies: Sequence[str], as_of: Optional[date] = None
    ) -> RateSnapshot: ...


@dataclass(frozen=True)
class BudgetPageView:
    token: int
    period_start: date
    snapshot: RateSnapshot
    budgets: List[ProcessedBudget]
    summary: BudgetSummary


@dataclass(frozen=True)
class DashboardView:
    token: int
    date_range: DateRange
    snapshot: RateSnapshot
    aggregates: DashboardAggregates
    spending_distribution: List[DistributionSlice]
    investment_allocation: List[DistributionSlice]
    balance_series: List[BalancePoint]
    budget_quick_view: List[ProcessedBudget] = field(default_factory=list)
    income_distribution: List[DistributionSlice] = field(default_factory=list)
    income_trend: List[MonthlyTotal] = field(default_factory=list)
    goals: List[GoalProgress] = field(default_factory=list)


class RefreshCoordinator:
    def __init__(
        self,
        repository: LedgerRepository,
        rates: SupportsSnapshot,
        *,
        preferred_currency: str = "USD",
        warn_pct: int = DEFAULT_WARN_PCT,
        danger_pct: int = DEFAULT_DANGER_PCT,
    ):
        self._repo = repository
        self._rates = rates
        self._preferred = preferred_currency.upper()
        self._warn = warn_pct
        self._danger = danger_pct
        self._counter = itertools.count(1)
        self._latest: Dict[str, int] = {}
        self._published: Dict[str, Any] = {}

    # Tokens ----------------------------------------------------
    def issue_token(self, view: str) -> int:
        token = next(self._counter)
        self._latest[view] = token
        return token

    def is_current(self, view: str, token: int) -> bool:
        return self._latest.get(view) == token

    def published(self, view: str) -> Any:
        return self._published.get(view)

    def _publish(self, view: str, token: int, result: T) -> Optional[T]:
        if not self.is_current(view, token):
            logger.info(
                "discarding stale %s result (token %d, latest %d)",
                view,
                token,
                self._latest.get(view, 0),
            )
            return None
        self._published[view] = result
        return result

    async def _snapshot(self, codes: Sequence[str]) -> RateSnapshot:
        # Providers may block on HTTP; keep the event loop free.
        return await asyncio.to_thread(self._rates.snapshot, sorted(set(codes)))

    async def _directory(self) -> CurrencyDirectory:
        currencies = await fetch_or_empty(self._repo.list_currencies(), "currencies")
        if not currencies:
            return CurrencyDirectory.default()
        return CurrencyDirectory(currencies)

    # Budget page --------------------------------------------------
    async def refresh_budgets(
        self, user_id: str, period: Optional[date] = None, *, view: str = "budgets"
    ) -> Optional[BudgetPageView]:
        """Budgets of one month with actuals.

        ``view`` names the consumer; only cycles sharing it supersede each other,
        so the quick view never invalidates a page load still in flight.
        """
        view_key = f"{view}:{user_id}"
        token = self.issue_token(view_key)
        period_start = start_of_month(period or date.today())
        period_end = end_of_month(period_start)

        budgets, expenses, incomes, directory = await asyncio.gather(
            fetch_or_empty(
                self._repo.list_budgets(user_id, period_start.isoformat()), "budgets"
            ),
            fetch_or_empty(
                self._repo.list_expenses(user_id, period_start, period_end), "expenses"
            ),
            fetch_or_empty(
                self._repo.list_incomes(user_id, period_start, period_end), "incomes"
            ),
            self._directory(),
        )
        codes = directory.codes() + [self._preferred] + [b.currency_code for b in budgets]
        snapshot = await self._snapshot(codes)

        processed = process_budgets(
            budgets,
            expenses,
            warn_pct=self._warn,
            danger_pct=self._danger,
            snapshot=snapshot,
            preferred_currency=self._preferred,
            directory=directory,
        )
        page = BudgetPageView(
            token=token,
            period_start=period_start,
            snapshot=snapshot,
            budgets=processed,
            summary=aggregate(processed, total_income(incomes)),
        )
        return self._publish(view_key, token, page)

    # Dashboard ------------------------------------------------------
    async def refresh_dashboard(
        self,
        user_id: str,
        date_range: Optional[DateRange] = None,
        today: Optional[date] = None,
    ) -> Optional[DashboardView]:
        view_key = f"dashboard:{user_id}"
        token = self.issue_token(view_key)
        today = today or date.today()
        if date_range is None:
            date_range = DateRange(start_of_month(today), end_of_month(today))
        month_start = start_of_month(today)
        month_end = end_of_month(today)
        # Balances are rebuilt by undoing events up to today, which may lie past the range.
        fetch_end = max(date_range.end, today)

        (
            fetched_incomes,
            fetched_expenses,
            accounts,
            investments,
            debts,
            month_budgets,
            month_expenses,
            goals,
            directory,
        ) = await asyncio.gather(
            fetch_or_empty(
                self._repo.list_incomes(user_id, date_range.start, fetch_end),
                "incomes",
            ),
            fetch_or_empty(
                self._repo.list_expenses(user_id, date_range.start, fetch_end),
                "expenses",
            ),
            fetch_or_empty(self._repo.list_accounts(user_id), "accounts"),
            fetch_or_empty(self._repo.list_investments(user_id), "investments"),
            fetch_or_empty(self._repo.list_debts(user_id), "debts"),
            fetch_or_empty(
                self._repo.list_budgets(user_id, month_start.isoformat()), "budgets"
            ),
            fetch_or_empty(
                self._repo.list_expenses(user_id, month_start, month_end), "expenses"
            ),
            fetch_or_empty(self._repo.list_goals(user_id), "goals"),
            self._directory(),
        )
        snapshot = await self._snapshot(directory.codes() + [self._preferred])
        incomes = [i for i in fetched_incomes if _within(i.date, date_range)]
        expenses = [e for e in fetched_expenses if _within(e.date, date_range)]

        view = DashboardView(
            token=token,
            date_range=date_range,
            snapshot=snapshot,
            aggregates=compute_dashboard_aggregates(
                incomes, expenses, accounts, investments, debts
            ),
            spending_distribution=compute_spending_distribution(expenses),
            investment_allocation=compute_investment_allocation(investments),
            balance_series=balance_history(
                accounts, fetched_incomes, fetched_expenses, date_range, today
            ),
            budget_quick_view=quick_view(
                process_budgets(
                    month_budgets,
                    month_expenses,
                    warn_pct=self._warn,
                    danger_pct=self._danger,
                )
            ),
            income_distribution=compute_income_distribution(incomes),
            income_trend=compute_income_trend(incomes),
            goals=compute_goal_progress(goals),
        )
        return self._publish(view_key, token, view)
