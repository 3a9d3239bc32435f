from __future__ import annotations

import asyncio
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ledgerlens.db.repository import LedgerRepository, fetch_or_empty
from ledgerlens.models.investment import Investment, InvestmentTransaction
from ledgerlens.routers.deps import get_cache_service, get_repository
from ledgerlens.services.investment_engine import (
    HoldingValuation,
    performance_series,
    value_holding,
    value_portfolio,
)
from ledgerlens.services.rates.cache_service import CentralRateCacheService

router = APIRouter(prefix="/investments", tags=["investments"])


class HoldingOut(BaseModel):
    investment_id: str
    name: str
    type: str
    currency_code: str
    quantity: float
    cost_reporting: float
    avg_cost_per_unit_reporting: float
    price_per_unit_reporting: float
    market_value_reporting: float
    unrealized_gain_reporting: float
    gain_percent: float
    transaction_count: int

    @classmethod
    def from_valuation(cls, v: HoldingValuation) -> "HoldingOut":
        return cls(**v.__dict__)


class PortfolioOut(BaseModel):
    holdings: List[HoldingOut]
    total_cost_reporting: float
    total_market_value_reporting: float
    total_unrealized_gain_reporting: float


class PerformancePointOut(BaseModel):
    date: date
    label: str
    value_reporting: float
    cost_reporting: float


async def _load_investment(
    repo: LedgerRepository, user_id: str, investment_id: str
) -> Investment:
    inv = await fetch_or_empty(
        repo.get_investment(user_id, investment_id), "investment", default=None
    )
    if inv is None:
        raise HTTPException(status_code=404, detail="investment not found")
    return inv


def _snapshot_codes(inv: Investment, transactions: List[InvestmentTransaction]) -> List[str]:
    return sorted({inv.currency_code} | {t.currency_code for t in transactions})


@router.get("", response_model=PortfolioOut, summary="Replayed valuation of every holding")
async def portfolio(
    user_id: str = Query("default"),
    repo: LedgerRepository = Depends(get_repository),
    rates: CentralRateCacheService = Depends(get_cache_service),
):
    investments, transactions = await asyncio.gather(
        fetch_or_empty(repo.list_investments(user_id), "investments"),
        fetch_or_empty(repo.list_investment_transactions(user_id), "investment transactions"),
    )
    codes = {t.currency_code for t in transactions}
    snapshot = await asyncio.to_thread(rates.snapshot, sorted(codes))
    holdings = [
        HoldingOut.from_valuation(v)
        for v in value_portfolio(investments, transactions, snapshot)
    ]
    cost = sum(h.cost_reporting for h in holdings)
    value = sum(h.market_value_reporting for h in holdings)
    return PortfolioOut(
        holdings=holdings,
        total_cost_reporting=cost,
        total_market_value_reporting=value,
        total_unrealized_gain_reporting=value - cost,
    )


@router.get("/{investment_id}", response_model=HoldingOut, summary="Valuation of one holding")
async def holding(
    investment_id: str,
    user_id: str = Query("default"),
    repo: LedgerRepository = Depends(get_repository),
    rates: CentralRateCacheService = Depends(get_cache_service),
):
    inv = await _load_investment(repo, user_id, investment_id)
    transactions = await fetch_or_empty(
        repo.list_investment_transactions(user_id, investment_id), "investment transactions"
    )
    snapshot = await asyncio.to_thread(rates.snapshot, _snapshot_codes(inv, transactions))
    return HoldingOut.from_valuation(value_holding(inv, transactions, snapshot))


@router.get(
    "/{investment_id}/performance",
    response_model=List[PerformancePointOut],
    summary="Value and cost after each transaction day, ending today",
)
async def performance(
    investment_id: str,
    user_id: str = Query("default"),
    today: Optional[date] = Query(None, description="Override 'today' for the final point"),
    repo: LedgerRepository = Depends(get_repository),
    rates: CentralRateCacheService = Depends(get_cache_service),
):
    inv = await _load_investment(repo, user_id, investment_id)
    transactions = await fetch_or_empty(
        repo.list_investment_transactions(user_id, investment_id), "investment transactions"
    )
    snapshot = await asyncio.to_thread(rates.snapshot, _snapshot_codes(inv, transactions))
    points = performance_series(inv, transactions, today=today, snapshot=snapshot)
    return [PerformancePointOut(**p.__dict__) for p in points]
