from __future__ import annotations

"""Rate provider abstraction.

Providers answer one question: how many units of the reporting currency equal
one unit of a given currency on a given day. A provider that does not know a
currency returns None; deciding what to show instead is the caller's job.
"""
from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, Iterable, Optional


class RateProvider(ABC):
    reporting_currency: str = "USD"

    @abstractmethod
    def get_rate(self, currency: str, on: Optional[date] = None) -> Optional[float]:
        """Return reporting-currency units per 1 unit of ``currency``."""
        raise NotImplementedError

    def get_rates(
        self, currencies: Iterable[str], on: Optional[date] = None
    ) -> Dict[str, float]:
        """Batch variant; currencies without a rate are omitted from the result."""
        out: Dict[str, float] = {}
        for code in currencies:
            rate = self.get_rate(code, on)
            if rate is not None:
                out[code.upper()] = rate
        return out
