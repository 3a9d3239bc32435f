"""Small record builders shared by the test modules."""

from __future__ import annotations

from datetime import date
from typing import Optional

from ledgerlens.models import (
    Account,
    Budget,
    Debt,
    Expense,
    FinancialGoal,
    Income,
    Investment,
    InvestmentTransaction,
    RateSnapshot,
)

_seq = {"n": 0}


def _id(prefix: str) -> str:
    _seq["n"] += 1
    return f"{prefix}-{_seq['n']}"


def snapshot(rates=None, as_of: date = date(2025, 3, 1), reporting: str = "USD") -> RateSnapshot:
    return RateSnapshot(
        as_of=as_of,
        reporting_currency=reporting,
        rates=rates if rates is not None else {"EUR": 1.1, "GBP": 1.25, "JPY": 0.0067},
    )


def expense(
    category: str,
    on: str,
    amount: float,
    *,
    account_id: Optional[str] = "acc-1",
    currency: str = "USD",
    native: Optional[float] = None,
    user_id: str = "default",
) -> Expense:
    return Expense(
        id=_id("exp"),
        user_id=user_id,
        account_id=account_id,
        category=category,
        date=on,
        amount_native=native if native is not None else amount,
        currency_code=currency,
        amount_reporting=amount,
    )


def income(
    on: str,
    amount: float,
    *,
    account_id: Optional[str] = "acc-1",
    user_id: str = "default",
    source: str = "Salary",
) -> Income:
    return Income(
        id=_id("inc"),
        user_id=user_id,
        account_id=account_id,
        source_name=source,
        date=on,
        amount_native=amount,
        currency_code="USD",
        amount_reporting=amount,
    )


def budget(
    category: str,
    limit: float,
    period_start: str = "2025-03-01",
    *,
    currency: str = "USD",
    native: Optional[float] = None,
    user_id: str = "default",
) -> Budget:
    return Budget(
        id=_id("bud"),
        user_id=user_id,
        category=category,
        currency_code=currency,
        amount_limit_native=native if native is not None else limit,
        amount_limit_reporting=limit,
        period_start_date=period_start,
    )


def account(balance: float, *, name: str = "Checking", user_id: str = "default") -> Account:
    return Account(
        id=_id("acc"),
        user_id=user_id,
        name=name,
        native_currency_code="USD",
        balance_native=balance,
        balance_reporting=balance,
    )


def debt(balance: float, *, is_paid: bool = False) -> Debt:
    return Debt(
        id=_id("debt"),
        creditor="Bank",
        currency_code="USD",
        current_balance_native=balance,
        current_balance_reporting=balance,
        is_paid=is_paid,
    )


def investment(
    inv_id: str = "inv-1",
    *,
    name: str = "Index Fund",
    kind: str = "ETF",
    currency: str = "USD",
    price: Optional[float] = None,
    current_value: Optional[float] = None,
    initial_cost: Optional[float] = None,
    start_date: Optional[str] = None,
) -> Investment:
    return Investment(
        id=inv_id,
        name=name,
        type=kind,
        currency_code=currency,
        current_price_per_unit_reporting=price,
        total_current_value_reporting=current_value,
        total_initial_cost_reporting=initial_cost,
        start_date=start_date,
    )


def tx(
    kind: str,
    on: str,
    quantity: float,
    price: float,
    *,
    inv_id: str = "inv-1",
    fees: Optional[float] = None,
    currency: str = "USD",
    reporting: bool = True,
) -> InvestmentTransaction:
    """Transaction; ``reporting=False`` leaves the reporting fields unset."""
    return InvestmentTransaction(
        id=_id("tx"),
        investment_id=inv_id,
        transaction_type=kind,
        date=on,
        quantity=quantity,
        price_per_unit_native=price,
        fees_native=fees,
        currency_code=currency,
        price_per_unit_reporting=price if reporting else None,
        fees_reporting=fees if reporting else None,
    )


def goal(
    target: float,
    saved: float = 0.0,
    *,
    name: str = "Emergency Fund",
    status: str = "active",
) -> FinancialGoal:
    return FinancialGoal(
        id=_id("goal"),
        name=name,
        currency_code="USD",
        target_amount_native=target,
        target_amount_reporting=target,
        current_amount_saved_native=saved,
        current_amount_saved_reporting=saved,
        status=status,
    )
