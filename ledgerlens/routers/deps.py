from __future__ import annotations

from fastapi import HTTPException, Request
from pydantic import BaseModel

from ledgerlens.core.config import Settings
from ledgerlens.db.repository import LedgerRepository
from ledgerlens.services.currency_display import DisplayAmount
from ledgerlens.services.rates.cache_service import CentralRateCacheService
from ledgerlens.services.refresh import RefreshCoordinator

"""Shared FastAPI dependencies.

create_app() wires one repository, one rate cache and one refresh coordinator
onto app.state; routers reach them through these helpers so tests can swap any
of them with app.dependency_overrides.
"""


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> LedgerRepository:
    return request.app.state.repository


def get_cache_service(request: Request) -> CentralRateCacheService:
    return request.app.state.rates


def get_coordinator(request: Request) -> RefreshCoordinator:
    return request.app.state.coordinator


def superseded(view: str) -> HTTPException:
    return HTTPException(
        status_code=409, detail=f"{view} refresh superseded by a newer request"
    )


class DisplayOut(BaseModel):
    amount: float
    currency: str
    text: str
    converted: bool

    @classmethod
    def from_display(cls, d: DisplayAmount | None) -> "DisplayOut | None":
        if d is None:
            return None
        return cls(amount=d.amount, currency=d.currency, text=d.text, converted=d.converted)
