"""Historical balance and spending series for the dashboard trend chart.

Balances are never stored historically. The balance at the end of a bucket is
reconstructed from today's total by undoing every account-linked event dated
after that boundary (up to and including today): income that arrived later is
subtracted, expenses paid later are added back.

Bucket size adapts to the requested span:
    <= 31 days   daily
    <= 90 days   weekly (ISO weeks, Monday start)
    otherwise    monthly
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Literal, Optional, Sequence, Tuple

from ledgerlens.models.ledger import Account, Expense, Income
from ledgerlens.services.dates import (
    add_months,
    end_of_month,
    parse_iso_date,
    start_of_month,
    start_of_week,
)

logger = logging.getLogger("ledgerlens.balance")

Granularity = Literal["daily", "weekly", "monthly"]


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days

    def is_degenerate(self) -> bool:
        return self.end < self.start


@dataclass(frozen=True)
class BalancePoint:
    label: str
    bucket_start: date
    bucket_end: date
    balance: float
    period_spend: float


def choose_granularity(date_range: DateRange) -> Granularity:
    if date_range.days <= 31:
        return "daily"
    if date_range.days <= 90:
        return "weekly"
    return "monthly"


def _unit_start(d: date, granularity: Granularity) -> date:
    if granularity == "weekly":
        return start_of_week(d)
    if granularity == "monthly":
        return start_of_month(d)
    return d


def _unit_end(unit_start: date, granularity: Granularity) -> date:
    if granularity == "weekly":
        return unit_start + timedelta(days=6)
    if granularity == "monthly":
        return end_of_month(unit_start)
    return unit_start


def _next_unit(unit_start: date, granularity: Granularity) -> date:
    if granularity == "weekly":
        return unit_start + timedelta(days=7)
    if granularity == "monthly":
        return add_months(unit_start, 1)
    return unit_start + timedelta(days=1)


def buckets(date_range: DateRange, granularity: Granularity) -> List[Tuple[date, date]]:
    """(start, end) spans covering the range; edge buckets are trimmed to it."""
    spans: List[Tuple[date, date]] = []
    unit = _unit_start(date_range.start, granularity)
    while unit <= date_range.end:
        spans.append(
            (
                max(unit, date_range.start),
                min(_unit_end(unit, granularity), date_range.end),
            )
        )
        unit = _next_unit(unit, granularity)
    return spans


def bucket_label(start: date, end: date, granularity: Granularity) -> str:
    if granularity == "daily":
        return f"{start.day} {start.strftime('%b')}"
    if granularity == "weekly":
        week = start.isocalendar()[1]
        return f"W{week} ({start.day}-{end.day} {end.strftime('%b')})"
    return start.strftime("%b %Y")


def _dated(
    items: Iterable[Expense | Income], *, linked_only: bool, kind: str
) -> List[Tuple[date, float]]:
    out: List[Tuple[date, float]] = []
    for item in items:
        if linked_only and not item.account_id:
            continue
        d = parse_iso_date(item.date, context=f"{kind} {item.id}")
        if d is None:
            continue
        out.append((d, item.amount_reporting))
    return out


def reconstruct(
    current_total_reporting: float,
    incomes: Sequence[Income],
    expenses: Sequence[Expense],
    date_range: Optional[DateRange],
    today: Optional[date] = None,
) -> List[BalancePoint]:
    if date_range is None or date_range.is_degenerate():
        return []
    today = today or date.today()
    granularity = choose_granularity(date_range)

    linked_incomes = _dated(incomes, linked_only=True, kind="income")
    linked_expenses = _dated(expenses, linked_only=True, kind="expense")
    all_expenses = _dated(expenses, linked_only=False, kind="expense")

    points: List[BalancePoint] = []
    for start, end in buckets(date_range, granularity):
        boundary = min(end, today)
        later_income = sum(a for d, a in linked_incomes if boundary < d <= today)
        later_spend = sum(a for d, a in linked_expenses if boundary < d <= today)
        spend = sum(a for d, a in all_expenses if start <= d <= end)
        points.append(
            BalancePoint(
                label=bucket_label(start, end, granularity),
                bucket_start=start,
                bucket_end=end,
                balance=current_total_reporting - later_income + later_spend,
                period_spend=spend,
            )
        )
    logger.debug(
        "reconstructed %d %s points for %s..%s",
        len(points),
        granularity,
        date_range.start,
        date_range.end,
    )
    return points


def balance_history(
    accounts: Sequence[Account],
    incomes: Sequence[Income],
    expenses: Sequence[Expense],
    date_range: Optional[DateRange],
    today: Optional[date] = None,
) -> List[BalancePoint]:
    """Series for a set of accounts; no accounts means nothing to chart."""
    if not accounts:
        return []
    current_total = sum(a.balance_reporting for a in accounts)
    return reconstruct(current_total, incomes, expenses, date_range, today)
