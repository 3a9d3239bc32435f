"""Investment replay and valuation.

A holding's quantity and cost basis are never edited directly: they are the
result of folding its transactions, oldest first, into an immutable
``HoldingState``. Cost basis uses the average-cost method (every held unit
shares one blended price), all amounts in the reporting currency.

Transitions:
    buy / reinvest  cost += qty * price + fees, quantity += qty
    sell            cost -= avg_cost * qty,     quantity -= qty
                    (selling everything, or more than is held, resets to zero)
    dividend        no change; cash income lives outside the holding

Valuation applies the single latest known price to the historical quantity.
There is no historical price series, so chart points before today show what
the units held at that time would be worth now.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ledgerlens.models.currency import RateSnapshot
from ledgerlens.models.investment import Investment, InvestmentTransaction
from ledgerlens.services.dates import parse_iso_date
from ledgerlens.services.rates.conversion import Unavailable, to_reporting

logger = logging.getLogger("ledgerlens.investments")


@dataclass(frozen=True)
class HoldingState:
    quantity: float = 0.0
    cost_reporting: float = 0.0

    @property
    def avg_cost_per_unit(self) -> float:
        if self.quantity <= 0:
            return 0.0
        return self.cost_reporting / self.quantity

    def value_at(self, price_per_unit_reporting: Optional[float]) -> float:
        return self.quantity * (price_per_unit_reporting or 0.0)


EMPTY_HOLDING = HoldingState()


@dataclass(frozen=True)
class ReplayStep:
    date: date
    transaction: InvestmentTransaction
    state: HoldingState
    cost_change_reporting: float


@dataclass(frozen=True)
class PerformancePoint:
    date: date
    label: str
    value_reporting: float
    cost_reporting: float


@dataclass(frozen=True)
class HoldingValuation:
    investment_id: str
    name: str
    type: str
    currency_code: str
    quantity: float
    cost_reporting: float
    avg_cost_per_unit_reporting: float
    price_per_unit_reporting: float
    market_value_reporting: float
    unrealized_gain_reporting: float
    gain_percent: float
    transaction_count: int


def _reporting_amounts(
    tx: InvestmentTransaction, snapshot: Optional[RateSnapshot]
) -> Tuple[float, float]:
    """Price per unit and fees in reporting currency for one transaction.

    Precomputed reporting fields win. Missing ones are derived from the native
    values with the snapshot; an unavailable rate counts as zero.
    """
    price = tx.price_per_unit_reporting
    fees = tx.fees_reporting
    if price is None:
        price = _derive(tx.price_per_unit_native, tx, snapshot, "price")
    if fees is None:
        fees = _derive(tx.fees_native, tx, snapshot, "fees") if tx.fees_native else 0.0
    return price, fees


def _derive(
    amount: float,
    tx: InvestmentTransaction,
    snapshot: Optional[RateSnapshot],
    what: str,
) -> float:
    if snapshot is None:
        logger.warning(
            "transaction %s has no reporting %s and no rate snapshot; counting 0",
            tx.id,
            what,
        )
        return 0.0
    outcome = to_reporting(amount, tx.currency_code, snapshot)
    if isinstance(outcome, Unavailable):
        logger.warning(
            "transaction %s: no %s rate for reporting %s; counting 0",
            tx.id,
            outcome.missing_currency,
            what,
        )
        return 0.0
    return outcome


def apply_transaction(
    state: HoldingState,
    tx: InvestmentTransaction,
    snapshot: Optional[RateSnapshot] = None,
) -> Tuple[HoldingState, float]:
    """Return the next state and the cost change caused by ``tx``."""
    kind = tx.transaction_type
    if kind in ("buy", "reinvest"):
        price, fees = _reporting_amounts(tx, snapshot)
        delta = tx.quantity * price + fees
        return (
            HoldingState(
                quantity=state.quantity + tx.quantity,
                cost_reporting=state.cost_reporting + delta,
            ),
            delta,
        )
    if kind == "sell":
        cost_removed = state.avg_cost_per_unit * tx.quantity
        quantity = state.quantity - tx.quantity
        if quantity <= 0:
            if quantity < 0:
                logger.info(
                    "sell %s exceeds held quantity by %s; clamping to zero",
                    tx.id,
                    -quantity,
                )
            return EMPTY_HOLDING, -state.cost_reporting
        return (
            HoldingState(
                quantity=quantity, cost_reporting=state.cost_reporting - cost_removed
            ),
            -cost_removed,
        )
    # dividend: income outside the holding
    return state, 0.0


def sort_transactions(
    transactions: Iterable[InvestmentTransaction],
) -> List[Tuple[date, InvestmentTransaction]]:
    """Dated transactions in ascending order; undated ones are dropped."""
    dated: List[Tuple[date, InvestmentTransaction]] = []
    for tx in transactions:
        d = parse_iso_date(tx.date, context=f"investment transaction {tx.id}")
        if d is None:
            continue
        dated.append((d, tx))
    # sorted() is stable, so same-day transactions keep ledger order
    return sorted(dated, key=lambda pair: pair[0])


def replay(
    transactions: Iterable[InvestmentTransaction],
    snapshot: Optional[RateSnapshot] = None,
    initial: HoldingState = EMPTY_HOLDING,
) -> List[ReplayStep]:
    steps: List[ReplayStep] = []
    state = initial
    for d, tx in sort_transactions(transactions):
        state, change = apply_transaction(state, tx, snapshot)
        steps.append(
            ReplayStep(date=d, transaction=tx, state=state, cost_change_reporting=change)
        )
    return steps


def final_state(
    transactions: Iterable[InvestmentTransaction],
    snapshot: Optional[RateSnapshot] = None,
) -> HoldingState:
    steps = replay(transactions, snapshot)
    return steps[-1].state if steps else EMPTY_HOLDING


def _label(d: date) -> str:
    return f"{d.strftime('%b')} {d.day}, {d.strftime('%y')}"


def performance_series(
    investment: Investment,
    transactions: Sequence[InvestmentTransaction],
    *,
    today: Optional[date] = None,
    snapshot: Optional[RateSnapshot] = None,
) -> List[PerformancePoint]:
    """Market value and cumulative cost after each transaction day."""
    steps = replay(transactions, snapshot)
    if not steps:
        return []
    today = today or date.today()
    price = investment.current_price_per_unit_reporting

    start = None
    if investment.start_date:
        start = parse_iso_date(investment.start_date, context=f"investment {investment.id}")
    start = start or steps[0].date

    points: Dict[date, PerformancePoint] = {
        start: PerformancePoint(start, _label(start), 0.0, 0.0)
    }
    for step in steps:
        points[step.date] = PerformancePoint(
            date=step.date,
            label=_label(step.date),
            value_reporting=step.state.value_at(price),
            cost_reporting=step.state.cost_reporting,
        )

    last_tx_date = steps[-1].date
    if (
        investment.total_current_value_reporting is not None
        and last_tx_date <= today
        and today not in points
    ):
        cost = investment.total_initial_cost_reporting
        points[today] = PerformancePoint(
            date=today,
            label=_label(today),
            value_reporting=investment.total_current_value_reporting,
            cost_reporting=cost if cost is not None else steps[-1].state.cost_reporting,
        )
    return [points[d] for d in sorted(points)]


def value_holding(
    investment: Investment,
    transactions: Sequence[InvestmentTransaction],
    snapshot: Optional[RateSnapshot] = None,
) -> HoldingValuation:
    state = final_state(transactions, snapshot)
    price = investment.current_price_per_unit_reporting or 0.0
    market_value = state.value_at(price)
    gain = market_value - state.cost_reporting
    gain_pct = gain / state.cost_reporting * 100 if state.cost_reporting > 0 else 0.0
    return HoldingValuation(
        investment_id=investment.id,
        name=investment.name,
        type=investment.type,
        currency_code=investment.currency_code,
        quantity=state.quantity,
        cost_reporting=state.cost_reporting,
        avg_cost_per_unit_reporting=state.avg_cost_per_unit,
        price_per_unit_reporting=price,
        market_value_reporting=market_value,
        unrealized_gain_reporting=gain,
        gain_percent=gain_pct,
        transaction_count=len(transactions),
    )


def value_portfolio(
    investments: Iterable[Investment],
    transactions: Iterable[InvestmentTransaction],
    snapshot: Optional[RateSnapshot] = None,
) -> List[HoldingValuation]:
    """Valuation per investment; holdings are independent, so order is by name."""
    by_investment: Dict[str, List[InvestmentTransaction]] = {}
    for tx in transactions:
        by_investment.setdefault(tx.investment_id, []).append(tx)
    return [
        value_holding(inv, by_investment.get(inv.id, []), snapshot)
        for inv in sorted(investments, key=lambda i: i.name.lower())
    ]
