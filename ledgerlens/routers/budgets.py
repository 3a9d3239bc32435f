from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ledgerlens.models.constants import DEFAULT_BUDGET_CATEGORIES, display_category_name
from ledgerlens.routers.deps import DisplayOut, get_coordinator, superseded
from ledgerlens.services.budget_summary import BudgetSummary
from ledgerlens.services.budget_utils import ProcessedBudget, quick_view
from ledgerlens.services.refresh import RefreshCoordinator

router = APIRouter(prefix="/budgets", tags=["budgets"])


class BudgetOut(BaseModel):
    id: str
    category: str
    category_name: str
    currency_code: str
    period_start_date: str
    amount_limit_native: float
    amount_limit_reporting: float
    actual_reporting: float
    remaining_reporting: float
    progress_percent: float
    warn: bool
    danger: bool
    limit_display: Optional[DisplayOut] = None
    actual_display: Optional[DisplayOut] = None
    remaining_display: Optional[DisplayOut] = None

    @classmethod
    def from_processed(cls, p: ProcessedBudget) -> "BudgetOut":
        b = p.budget
        return cls(
            id=b.id,
            category=b.category,
            category_name=display_category_name(b.category),
            currency_code=b.currency_code,
            period_start_date=b.period_start_date,
            amount_limit_native=b.amount_limit_native,
            amount_limit_reporting=b.amount_limit_reporting,
            actual_reporting=p.actual_reporting,
            remaining_reporting=p.remaining_reporting,
            progress_percent=p.progress_percent,
            warn=p.warn,
            danger=p.danger,
            limit_display=DisplayOut.from_display(p.limit_display),
            actual_display=DisplayOut.from_display(p.actual_display),
            remaining_display=DisplayOut.from_display(p.remaining_display),
        )


class SummaryOut(BaseModel):
    total_limit_reporting: float
    total_actual_reporting: float
    total_remaining_vs_income: float
    percent_of_income_spent: float
    actual_income_reporting: float
    income_available: bool

    @classmethod
    def from_summary(cls, s: BudgetSummary) -> "SummaryOut":
        return cls(**s.__dict__)


class BudgetPageOut(BaseModel):
    period_start: date
    rates_as_of: date
    budgets: List[BudgetOut]
    summary: SummaryOut


class CategoryOut(BaseModel):
    slug: str
    name: str


@router.get("", response_model=BudgetPageOut, summary="Budgets of a month with actuals")
async def budget_page(
    user_id: str = Query("default", description="Ledger owner"),
    period: Optional[date] = Query(
        None, description="Any day of the month to show (defaults to today)"
    ),
    coordinator: RefreshCoordinator = Depends(get_coordinator),
):
    view = await coordinator.refresh_budgets(user_id, period)
    if view is None:
        raise superseded("budgets")
    return BudgetPageOut(
        period_start=view.period_start,
        rates_as_of=view.snapshot.as_of,
        budgets=[BudgetOut.from_processed(p) for p in view.budgets],
        summary=SummaryOut.from_summary(view.summary),
    )


@router.get(
    "/quick-view",
    response_model=List[BudgetOut],
    summary="Most consumed budgets of the current month",
)
async def budget_quick_view(
    user_id: str = Query("default"),
    limit: int = Query(5, ge=1, le=50),
    coordinator: RefreshCoordinator = Depends(get_coordinator),
):
    view = await coordinator.refresh_budgets(user_id, view="budgets-quick")
    if view is None:
        raise superseded("budgets")
    return [BudgetOut.from_processed(p) for p in quick_view(view.budgets, limit)]


@router.get("/categories", response_model=List[CategoryOut], summary="Default categories")
async def budget_categories():
    return [
        CategoryOut(slug=slug, name=display_category_name(slug))
        for slug in DEFAULT_BUDGET_CATEGORIES
    ]
