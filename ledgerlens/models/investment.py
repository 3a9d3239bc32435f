from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .currency import normalize_code

TransactionType = Literal["buy", "sell", "dividend", "reinvest"]


class Investment(BaseModel):
    """Holding metadata plus the stored totals maintained by the ledger.

    ``quantity`` and ``total_initial_cost_reporting`` are derived state; the
    valuation engine recomputes them by replaying the holding's transactions.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str = "default"
    account_id: Optional[str] = None
    name: str
    type: str = "Uncategorized"
    currency_code: str
    quantity: Optional[float] = None
    current_price_per_unit_native: Optional[float] = None
    current_price_per_unit_reporting: Optional[float] = None
    total_initial_cost_reporting: Optional[float] = None
    total_current_value_reporting: Optional[float] = None
    start_date: Optional[str] = None

    @field_validator("currency_code")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return normalize_code(v)


class InvestmentTransaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    investment_id: str
    user_id: str = "default"
    account_id: Optional[str] = None
    transaction_type: TransactionType
    date: str
    quantity: float = Field(..., ge=0)
    price_per_unit_native: float = Field(0.0, ge=0)
    fees_native: Optional[float] = Field(None, ge=0)
    currency_code: str
    price_per_unit_reporting: Optional[float] = Field(None, ge=0)
    fees_reporting: Optional[float] = Field(None, ge=0)

    @field_validator("currency_code")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return normalize_code(v)

    @field_validator("transaction_type", mode="before")
    @classmethod
    def lower_type(cls, v):  # type: ignore[override]
        return v.strip().lower() if isinstance(v, str) else v
