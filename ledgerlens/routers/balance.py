from __future__ import annotations

import asyncio
from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ledgerlens.db.repository import LedgerRepository, fetch_or_empty
from ledgerlens.routers.deps import get_repository
from ledgerlens.services.balance_history import (
    BalancePoint,
    DateRange,
    balance_history,
    choose_granularity,
)

router = APIRouter(prefix="/balance", tags=["balance"])


class BalancePointOut(BaseModel):
    label: str
    bucket_start: date
    bucket_end: date
    balance: float
    period_spend: float


class BalanceHistoryOut(BaseModel):
    start: date
    end: date
    granularity: Optional[str] = None
    points: List[BalancePointOut]


def point_out(p: BalancePoint) -> BalancePointOut:
    return BalancePointOut(**p.__dict__)


@router.get(
    "/history",
    response_model=BalanceHistoryOut,
    summary="Reconstructed balance and spend per bucket",
)
async def history(
    user_id: str = Query("default"),
    start_date: Optional[date] = Query(None, description="Range start (default: 30 days ago)"),
    end_date: Optional[date] = Query(None, description="Range end inclusive (default: today)"),
    today: Optional[date] = Query(None, description="Override 'today'"),
    repo: LedgerRepository = Depends(get_repository),
):
    """An inverted range yields an empty series rather than an error."""
    today = today or date.today()
    end = end_date or today
    start = start_date or end - timedelta(days=30)
    date_range = DateRange(start, end)

    accounts, incomes, expenses = await asyncio.gather(
        fetch_or_empty(repo.list_accounts(user_id), "accounts"),
        fetch_or_empty(repo.list_incomes(user_id, start, max(end, today)), "incomes"),
        fetch_or_empty(repo.list_expenses(user_id, start, max(end, today)), "expenses"),
    )
    points = balance_history(accounts, incomes, expenses, date_range, today)
    return BalanceHistoryOut(
        start=start,
        end=end,
        granularity=choose_granularity(date_range) if points else None,
        points=[point_out(p) for p in points],
    )
