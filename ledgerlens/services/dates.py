"""Calendar helpers shared by the budget, replay and time-series computations."""

from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Optional

logger = logging.getLogger("ledgerlens.dates")


def parse_iso_date(value: object, *, context: str = "record") -> Optional[date]:
    """Parse a ledger date, returning None (and logging) when it is unusable.

    Accepts ``date`` / ``datetime`` objects and ISO strings; a timestamp suffix
    (``2025-01-31T10:00:00Z``) is reduced to its calendar day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass
    logger.warning("unparseable date %r on %s", value, context)
    return None


def end_of_month(d: date) -> date:
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def start_of_month(d: date) -> date:
    return d.replace(day=1)


def start_of_week(d: date) -> date:
    """Monday of the ISO week containing ``d``."""
    return d - timedelta(days=d.weekday())


def add_months(d: date, months: int) -> date:
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
