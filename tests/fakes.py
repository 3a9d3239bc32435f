"""Repository doubles shared by the refresh and API tests."""

from __future__ import annotations

import asyncio

from ledgerlens.db.memory import InMemoryLedgerRepository
from ledgerlens.db.repository import LedgerFetchError


class GatedRepository(InMemoryLedgerRepository):
    """Blocks budget reads for selected periods until released."""

    def __init__(self, data):
        super().__init__(data)
        self.gates = {}
        self.blocked = set()

    async def list_budgets(self, user_id, period_start=None):
        gate = self.gates.get(period_start)
        if gate is not None:
            self.blocked.add(period_start)
            await gate.wait()
        return await super().list_budgets(user_id, period_start)

    async def wait_until_blocked(self, period_start):
        while period_start not in self.blocked:
            await asyncio.sleep(0)


class FailingRepository(InMemoryLedgerRepository):
    """Raises ``LedgerFetchError`` for the named collections."""

    def __init__(self, data, *failing):
        super().__init__(data)
        self.failing = set(failing)

    def _check(self, collection):
        if collection in self.failing:
            raise LedgerFetchError(collection, "connection reset")

    async def list_incomes(self, user_id, start=None, end=None):
        self._check("incomes")
        return await super().list_incomes(user_id, start, end)

    async def list_accounts(self, user_id):
        self._check("accounts")
        return await super().list_accounts(user_id)

    async def get_investment(self, user_id, investment_id):
        self._check("investment")
        return await super().get_investment(user_id, investment_id)

    async def list_investment_transactions(self, user_id, investment_id=None):
        self._check("investment transactions")
        return await super().list_investment_transactions(user_id, investment_id)

    async def list_currencies(self, active_only=True):
        self._check("currencies")
        return await super().list_currencies(active_only)

    async def list_goals(self, user_id):
        self._check("goals")
        return await super().list_goals(user_id)


class ExplodingRepository(InMemoryLedgerRepository):
    """Fails account reads with an unexpected error."""

    async def list_accounts(self, user_id):
        raise RuntimeError("ledger exploded")
