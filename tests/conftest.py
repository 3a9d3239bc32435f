from datetime import date

import pytest
from fastapi.testclient import TestClient

from builders import account, budget, debt, expense, goal, income, investment, tx
from ledgerlens.core.config import Settings
from ledgerlens.db.memory import InMemoryLedgerRepository, LedgerData
from ledgerlens.main import create_app
from ledgerlens.services.rates.cache_service import CentralRateCacheService
from ledgerlens.services.rates.providers import StaticRateProvider

TODAY = date(2025, 3, 20)

# USD per unit; BRL deliberately has no rate.
TEST_USD_RATES = {"USD": 1.0, "EUR": 1.1, "GBP": 1.25, "JPY": 0.0067}


@pytest.fixture
def settings() -> Settings:
    s = Settings(
        exchange_rate_provider="static",
        enable_rate_override=True,
        reporting_currency="USD",
        preferred_currency="EUR",
        ledger_data_file=None,
    )
    s.init_post_load()
    return s


@pytest.fixture
def rate_service(settings) -> CentralRateCacheService:
    return CentralRateCacheService(
        settings, provider=StaticRateProvider("USD", TEST_USD_RATES)
    )


@pytest.fixture
def ledger() -> LedgerData:
    checking = account(1000.0, name="Checking")
    return LedgerData(
        accounts=[checking],
        budgets=[
            budget("food_and_drink", 200.0),
            budget("housing", 800.0),
            budget("food_and_drink", 150.0, "2025-02-01"),
        ],
        expenses=[
            expense("Food_And_Drink", "2025-03-05", 60.0, account_id=checking.id),
            expense("food_and_drink", "2025-03-18", 40.0, account_id=checking.id),
            expense("housing", "2025-03-01", 800.0, account_id=checking.id),
            expense("food_and_drink", "2025-02-27", 99.0, account_id=checking.id),
            expense("pets", "2025-03-19", 25.0, account_id=None),
        ],
        incomes=[income("2025-03-01", 2000.0, account_id=checking.id)],
        investments=[
            investment(
                "inv-1",
                name="Index Fund",
                price=20.0,
                current_value=100.0,
                initial_cost=75.0,
                start_date="2025-01-02",
            ),
            investment("inv-2", name="Bond Fund", kind="Bond", price=50.0, current_value=500.0),
        ],
        investment_transactions=[
            tx("buy", "2025-01-02", 10, 10.0),
            tx("buy", "2025-01-15", 10, 20.0),
            tx("sell", "2025-02-01", 15, 25.0),
            tx("buy", "2025-01-10", 10, 50.0, inv_id="inv-2"),
        ],
        debts=[debt(300.0), debt(1000.0, is_paid=True)],
        goals=[goal(1000.0, 250.0), goal(0.0, 10.0, name="Vacation", status="paused")],
    )


@pytest.fixture
def repository(ledger) -> InMemoryLedgerRepository:
    return InMemoryLedgerRepository(ledger)


@pytest.fixture
def client(settings, repository, rate_service):
    app = create_app(settings, repository=repository, rate_service=rate_service)
    with TestClient(app) as c:
        yield c
