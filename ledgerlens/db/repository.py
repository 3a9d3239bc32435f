"""Read-side ledger interface.

Computations never reach a concrete client; every entry point receives an
object implementing ``LedgerRepository``. Methods are async because the real
ledger sits behind a network API; implementations raise ``LedgerFetchError``
for transient failures, which ``fetch_or_empty`` turns into empty collections.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Awaitable, List, Optional, Protocol, TypeVar, runtime_checkable

from ledgerlens.models.currency import Currency
from ledgerlens.models.investment import Investment, InvestmentTransaction
from ledgerlens.models.ledger import Account, Budget, Debt, Expense, FinancialGoal, Income

logger = logging.getLogger("ledgerlens.db")

T = TypeVar("T")

_EMPTY: Any = object()


class LedgerFetchError(Exception):
    """A ledger read failed; the caller may degrade to an empty result."""

    def __init__(self, collection: str, reason: str):
        super().__init__(f"failed to fetch {collection}: {reason}")
        self.collection = collection
        self.reason = reason


async def fetch_or_empty(call: Awaitable[T], collection: str, default: Any = _EMPTY) -> T:
    """Await a repository read; on ``LedgerFetchError`` log a warning and return
    ``default`` (an empty list unless given).
    """
    try:
        return await call
    except LedgerFetchError as exc:
        logger.warning("%s; continuing with no %s", exc, collection)
        return [] if default is _EMPTY else default  # type: ignore[return-value]


@runtime_checkable
class LedgerRepository(Protocol):
    async def list_budgets(
        self, user_id: str, period_start: Optional[str] = None
    ) -> List[Budget]: ...

    async def list_expenses(
        self,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Expense]: ...

    async def list_incomes(
        self,
        user_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Income]: ...

    async def list_accounts(self, user_id: str) -> List[Account]: ...

    async def list_investments(self, user_id: str) -> List[Investment]: ...

    async def get_investment(
        self, user_id: str, investment_id: str
    ) -> Optional[Investment]: ...

    async def list_investment_transactions(
        self, user_id: str, investment_id: Optional[str] = None
    ) -> List[InvestmentTransaction]: ...

    async def list_debts(self, user_id: str) -> List[Debt]: ...

    async def list_currencies(self, active_only: bool = True) -> List[Currency]: ...

    async def list_goals(self, user_id: str) -> List[FinancialGoal]: ...
