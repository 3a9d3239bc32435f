"""In-memory ledger repository.

Holds an immutable ``LedgerData`` snapshot, typically loaded from a JSON export
of the ledger (``settings.ledger_data_file``), and answers the read queries of
``LedgerRepository`` with the same user / date-range filtering the ledger API
applies.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ledgerlens.models.constants import DEFAULT_CURRENCIES
from ledgerlens.models.currency import Currency
from ledgerlens.models.investment import Investment, InvestmentTransaction
from ledgerlens.models.ledger import Account, Budget, Debt, Expense, FinancialGoal, Income
from ledgerlens.services.dates import parse_iso_date

logger = logging.getLogger("ledgerlens.db")

T = TypeVar("T")


def _default_currencies() -> List[Currency]:
    return [
        Currency(code=code, name=name, symbol=symbol, decimal_digits=digits)
        for code, (name, symbol, digits) in DEFAULT_CURRENCIES.items()
    ]


class LedgerData(BaseModel):
    model_config = ConfigDict(frozen=True)

    currencies: List[Currency] = Field(default_factory=_default_currencies)
    accounts: List[Account] = Field(default_factory=list)
    budgets: List[Budget] = Field(default_factory=list)
    expenses: List[Expense] = Field(default_factory=list)
    incomes: List[Income] = Field(default_factory=list)
    investments: List[Investment] = Field(default_factory=list)
    investment_transactions: List[InvestmentTransaction] = Field(default_factory=list)
    debts: List[Debt] = Field(default_factory=list)
    goals: List[FinancialGoal] = Field(default_factory=list)


def _in_range(value: str, start: Optional[date], end: Optional[date]) -> bool:
    if start is None and end is None:
        return True
    d = parse_iso_date(value)
    if d is None:
        return False
    if start is not None and d < start:
        return False
    if end is not None and d > end:
        return False
    return True


def _owned(items: Iterable[T], user_id: str) -> List[T]:
    return [i for i in items if i.user_id == user_id]  # type: ignore[attr-defined]


class InMemoryLedgerRepository:
    def __init__(self, data: Optional[LedgerData] = None):
        self._data = data or LedgerData()

    @classmethod
    def from_file(cls, path: Path) -> "InMemoryLedgerRepository":
        with open(path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
        data = LedgerData.model_validate(payload)
        logger.info(
            "loaded ledger from %s: %d accounts, %d expenses, %d budgets",
            path,
            len(data.accounts),
            len(data.expenses),
            len(data.budgets),
        )
        return cls(data)

    @property
    def data(self) -> LedgerData:
        return self._data

    async def list_budgets(
        self, user_id: str, period_start: Optional[str] = None
    ) -> List[Budget]:
        rows = _owned(self._data.budgets, user_id)
        if period_start is not None:
            rows = [b for b in rows if b.period_start_date == period_start]
        return rows

    async def list_expenses(
        self,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Expense]:
        return [
            e for e in _owned(self._data.expenses, user_id) if _in_range(e.date, start, end)
        ]

    async def list_incomes(
        self,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Income]:
        return [
            i for i in _owned(self._data.incomes, user_id) if _in_range(i.date, start, end)
        ]

    async def list_accounts(self, user_id: str) -> List[Account]:
        return _owned(self._data.accounts, user_id)

    async def list_investments(self, user_id: str) -> List[Investment]:
        return _owned(self._data.investments, user_id)

    async def get_investment(
        self, user_id: str, investment_id: str
    ) -> Optional[Investment]:
        for inv in _owned(self._data.investments, user_id):
            if inv.id == investment_id:
                return inv
        return None

    async def list_investment_transactions(
        self, user_id: str, investment_id: Optional[str] = None
    ) -> List[InvestmentTransaction]:
        rows = _owned(self._data.investment_transactions, user_id)
        if investment_id is not None:
            rows = [t for t in rows if t.investment_id == investment_id]
        return rows

    async def list_debts(self, user_id: str) -> List[Debt]:
        return _owned(self._data.debts, user_id)

    async def list_currencies(self, active_only: bool = True) -> List[Currency]:
        rows = list(self._data.currencies)
        if active_only:
            rows = [c for c in rows if c.is_active]
        return sorted(rows, key=lambda c: c.name)

    async def list_goals(self, user_id: str) -> List[FinancialGoal]:
        return _owned(self._data.goals, user_id)
