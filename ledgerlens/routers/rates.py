from __future__ import annotations

import asyncio
from datetime import date
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from ledgerlens.core.config import Settings
from ledgerlens.db.repository import LedgerRepository, fetch_or_empty
from ledgerlens.models.currency import normalize_code
from ledgerlens.routers.deps import (
    DisplayOut,
    get_app_settings,
    get_cache_service,
    get_repository,
)
from ledgerlens.services.currency_display import CurrencyDirectory, display_amount
from ledgerlens.services.rates.cache_service import CentralRateCacheService

"""Rates router.

Endpoints:
    - GET /rates                  -> snapshot of rate-to-reporting for a day
    - GET /rates/convert          -> pivot conversion with display fallback
    - GET /rates/overrides        -> list active overrides
    - POST /rates/overrides       -> set override {currency, rate, ttl_seconds}
    - DELETE /rates/overrides/{currency} -> clear override

Override endpoints are guarded by settings.enable_rate_override. Overrides live
in memory only; a restart clears them.
"""

router = APIRouter(prefix="/rates", tags=["rates"])


def require_override_enabled(settings: Settings = Depends(get_app_settings)):
    if not settings.enable_rate_override:
        raise HTTPException(status_code=403, detail="rate override feature disabled")
    return True


def _code(value: str) -> str:
    try:
        return normalize_code(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


class SnapshotOut(BaseModel):
    as_of: date
    reporting_currency: str
    rates: Dict[str, float]
    missing: list[str]


class ConversionOut(BaseModel):
    amount: float
    source: str
    target: str
    as_of: date
    display: DisplayOut


class OverrideSetPayload(BaseModel):
    currency: str = Field(..., description="Currency code (e.g. EUR, GBP)")
    rate: float = Field(..., gt=0, description="Reporting-currency units per 1 unit")
    ttl_seconds: int = Field(
        900,
        gt=0,
        le=86400,
        description="Override TTL seconds (default 900 = 15m, max 24h)",
    )


@router.get("", response_model=SnapshotOut, summary="Rates to the reporting currency")
async def rate_snapshot(
    currencies: Optional[str] = Query(
        None, description="Comma separated codes (default: all active currencies)"
    ),
    on: Optional[date] = Query(None, description="Rate day (default: today)"),
    svc: CentralRateCacheService = Depends(get_cache_service),
    repo: LedgerRepository = Depends(get_repository),
):
    if currencies:
        codes = [_code(c) for c in currencies.split(",") if c.strip()]
    else:
        currencies = await fetch_or_empty(repo.list_currencies(), "currencies")
        codes = [c.code for c in currencies] or CurrencyDirectory.default().codes()
    snap = await asyncio.to_thread(svc.snapshot, codes, on)
    missing = sorted(c for c in codes if snap.rate_to_reporting(c) is None)
    return SnapshotOut(
        as_of=snap.as_of,
        reporting_currency=snap.reporting_currency,
        rates=dict(snap.rates),
        missing=missing,
    )


@router.get("/convert", response_model=ConversionOut, summary="Convert an amount")
async def convert_amount(
    amount: float = Query(..., description="Amount in the source currency"),
    source: str = Query(..., alias="from", description="Source currency code"),
    target: str = Query(..., alias="to", description="Target currency code"),
    on: Optional[date] = Query(None, description="Rate day (default: today)"),
    svc: CentralRateCacheService = Depends(get_cache_service),
    repo: LedgerRepository = Depends(get_repository),
):
    """A missing rate is not an error: the display falls back to the source amount."""
    source, target = _code(source), _code(target)
    snap = await asyncio.to_thread(svc.snapshot, [source, target], on)
    currencies = await fetch_or_empty(repo.list_currencies(active_only=False), "currencies")
    directory = CurrencyDirectory(currencies) if currencies else CurrencyDirectory.default()
    shown = display_amount(amount, source, target, snap, directory)
    return ConversionOut(
        amount=amount,
        source=source,
        target=target,
        as_of=snap.as_of,
        display=DisplayOut.from_display(shown),
    )


@router.get("/overrides", summary="List active manual rate overrides")
async def list_overrides(
    _: bool = Depends(require_override_enabled),
    svc: CentralRateCacheService = Depends(get_cache_service),
) -> Dict[str, Dict[str, str | float]]:
    return svc.list_overrides()


@router.post("/overrides", summary="Set a manual rate override")
async def set_override(
    payload: OverrideSetPayload,
    _: bool = Depends(require_override_enabled),
    svc: CentralRateCacheService = Depends(get_cache_service),
):
    try:
        svc.set_override(payload.currency, payload.rate, payload.ttl_seconds)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {
        "status": "ok",
        "override": svc.list_overrides().get(payload.currency.upper()),
    }


@router.delete("/overrides/{currency}", summary="Clear a manual rate override")
async def clear_override(
    currency: str,
    _: bool = Depends(require_override_enabled),
    svc: CentralRateCacheService = Depends(get_cache_service),
):
    removed = svc.clear_override(currency)
    if not removed:
        raise HTTPException(status_code=404, detail="override not found")
    return {"status": "deleted", "currency": currency.upper()}
