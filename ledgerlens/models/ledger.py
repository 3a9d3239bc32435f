"""Read-side ledger records as delivered by the ledger read APIs.

Every monetary record carries a dual amount: the native amount in the currency it
was entered in plus a reporting-currency value precomputed at write time. Dates
stay ISO strings here; the computations parse them per record so one malformed
row cannot fail a whole batch.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .currency import normalize_code


class LedgerRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str = "default"


class Expense(LedgerRecord):
    account_id: Optional[str] = None
    category: str
    date: str
    amount_native: float = Field(..., gt=0)
    currency_code: str
    amount_reporting: float = Field(..., ge=0)
    description: Optional[str] = None

    @field_validator("currency_code")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return normalize_code(v)

    @field_validator("category")
    @classmethod
    def category_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("category cannot be empty")
        return v.strip()


class Income(LedgerRecord):
    account_id: Optional[str] = None
    source_name: str = ""
    date: str
    amount_native: float = Field(..., gt=0)
    currency_code: str
    amount_reporting: float = Field(..., ge=0)
    is_recurring: bool = False

    @field_validator("currency_code")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return normalize_code(v)


class Budget(LedgerRecord):
    category: str
    currency_code: str
    amount_limit_native: float = Field(..., ge=0)
    amount_limit_reporting: float = Field(..., ge=0)
    period_start_date: str

    @field_validator("currency_code")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return normalize_code(v)


class Account(LedgerRecord):
    name: str
    type: str = "bank_account"
    balance_native: float = 0.0
    native_currency_code: str
    balance_reporting: float = 0.0

    @field_validator("native_currency_code")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return normalize_code(v)


class Debt(LedgerRecord):
    creditor: str
    currency_code: str
    current_balance_native: float = Field(0.0, ge=0)
    current_balance_reporting: float = Field(0.0, ge=0)
    due_date: Optional[str] = None
    is_paid: bool = False

    @field_validator("currency_code")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return normalize_code(v)


GoalStatus = Literal["active", "achieved", "paused", "cancelled"]


class FinancialGoal(LedgerRecord):
    name: str
    currency_code: str
    target_amount_native: float = Field(..., ge=0)
    target_amount_reporting: float = Field(..., ge=0)
    current_amount_saved_native: float = Field(0.0, ge=0)
    current_amount_saved_reporting: float = Field(0.0, ge=0)
    monthly_contribution_target_native: Optional[float] = Field(None, ge=0)
    monthly_contribution_target_reporting: Optional[float] = Field(None, ge=0)
    target_date: Optional[str] = None
    status: GoalStatus = "active"
    description: Optional[str] = None

    @field_validator("currency_code")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return normalize_code(v)
