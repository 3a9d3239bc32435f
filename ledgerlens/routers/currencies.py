from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from ledgerlens.db.repository import LedgerRepository, fetch_or_empty
from ledgerlens.models.currency import Currency
from ledgerlens.routers.deps import get_repository
from ledgerlens.services.currency_display import CurrencyDirectory, Unknown

router = APIRouter(prefix="/currencies", tags=["currencies"])


@router.get("", response_model=List[Currency], summary="Known currencies by name")
async def list_currencies(
    active_only: bool = Query(True),
    repo: LedgerRepository = Depends(get_repository),
):
    return await fetch_or_empty(repo.list_currencies(active_only=active_only), "currencies")


@router.get("/{code}", response_model=Currency, summary="Currency metadata by code")
async def get_currency(code: str, repo: LedgerRepository = Depends(get_repository)):
    currencies = await fetch_or_empty(repo.list_currencies(active_only=False), "currencies")
    directory = CurrencyDirectory(currencies) if currencies else CurrencyDirectory.default()
    found = directory.lookup(code)
    if isinstance(found, Unknown):
        raise HTTPException(status_code=404, detail=f"unknown currency {found.code}")
    return found.currency
