from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ledgerlens.routers.balance import BalancePointOut, point_out
from ledgerlens.routers.budgets import BudgetOut
from ledgerlens.routers.deps import get_coordinator, superseded
from ledgerlens.services.analytics_utils import DistributionSlice, GoalProgress
from ledgerlens.services.balance_history import DateRange, choose_granularity
from ledgerlens.services.dates import end_of_month, start_of_month
from ledgerlens.services.refresh import RefreshCoordinator

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class AggregatesOut(BaseModel):
    total_income_reporting: float
    total_spending_reporting: float
    net_savings_reporting: float
    total_account_balance_reporting: float
    total_investment_value_reporting: float
    total_outstanding_debt_reporting: float
    net_worth_reporting: float


class SliceOut(BaseModel):
    name: str
    value_reporting: float
    percent: float


class MonthlyTotalOut(BaseModel):
    month: date
    label: str
    total_reporting: float


class GoalOut(BaseModel):
    id: str
    name: str
    status: str
    currency_code: str
    target_amount_reporting: float
    current_amount_saved_reporting: float
    remaining_reporting: float
    progress_percent: float
    target_date: Optional[str] = None

    @classmethod
    def from_progress(cls, p: GoalProgress) -> "GoalOut":
        g = p.goal
        return cls(
            id=g.id,
            name=g.name,
            status=g.status,
            currency_code=g.currency_code,
            target_amount_reporting=g.target_amount_reporting,
            current_amount_saved_reporting=g.current_amount_saved_reporting,
            remaining_reporting=p.remaining_reporting,
            progress_percent=p.progress_percent,
            target_date=g.target_date,
        )


class DashboardOut(BaseModel):
    start: date
    end: date
    rates_as_of: date
    aggregates: AggregatesOut
    spending_distribution: List[SliceOut]
    investment_allocation: List[SliceOut]
    granularity: Optional[str] = None
    balance_series: List[BalancePointOut]
    budget_quick_view: List[BudgetOut]
    income_distribution: List[SliceOut]
    income_trend: List[MonthlyTotalOut]
    goals: List[GoalOut]


def _slices(items: List[DistributionSlice]) -> List[SliceOut]:
    return [SliceOut(**s.__dict__) for s in items]


@router.get("", response_model=DashboardOut, summary="Dashboard aggregates and charts")
async def dashboard(
    user_id: str = Query("default"),
    start_date: Optional[date] = Query(
        None, description="Range start (default: first day of the end date's month)"
    ),
    end_date: Optional[date] = Query(
        None, description="Range end inclusive (default: last day of the start date's month)"
    ),
    today: Optional[date] = Query(None, description="Override 'today'"),
    coordinator: RefreshCoordinator = Depends(get_coordinator),
):
    """Without a range the current month is shown; a single bound fills the
    other side with the edge of its month.
    """
    date_range = None
    if end_date is not None:
        date_range = DateRange(start_date or start_of_month(end_date), end_date)
    elif start_date is not None:
        date_range = DateRange(start_date, end_of_month(start_date))
    view = await coordinator.refresh_dashboard(user_id, date_range, today)
    if view is None:
        raise superseded("dashboard")
    return DashboardOut(
        start=view.date_range.start,
        end=view.date_range.end,
        rates_as_of=view.snapshot.as_of,
        aggregates=AggregatesOut(**view.aggregates.__dict__),
        spending_distribution=_slices(view.spending_distribution),
        investment_allocation=_slices(view.investment_allocation),
        granularity=(
            choose_granularity(view.date_range) if view.balance_series else None
        ),
        balance_series=[point_out(p) for p in view.balance_series],
        budget_quick_view=[BudgetOut.from_processed(p) for p in view.budget_quick_view],
        income_distribution=_slices(view.income_distribution),
        income_trend=[MonthlyTotalOut(**t.__dict__) for t in view.income_trend],
        goals=[GoalOut.from_progress(p) for p in view.goals],
    )
