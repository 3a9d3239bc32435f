"""Pydantic domain models for the ledgerlens valuation engine."""

from .constants import (
    BASE_REPORTING_CURRENCY,
    DEFAULT_BUDGET_CATEGORIES,
    DEFAULT_CURRENCIES,
)  # re-export
from .currency import Currency, ExchangeRate, RateSnapshot
from .ledger import Account, Budget, Debt, Expense, FinancialGoal, Income
from .investment import Investment, InvestmentTransaction

__all__ = [
    "BASE_REPORTING_CURRENCY",
    "DEFAULT_BUDGET_CATEGORIES",
    "DEFAULT_CURRENCIES",
    "Currency",
    "ExchangeRate",
    "RateSnapshot",
    "Account",
    "Budget",
    "Debt",
    "Expense",
    "FinancialGoal",
    "Income",
    "Investment",
    "InvestmentTransaction",
]
