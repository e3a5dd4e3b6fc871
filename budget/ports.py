"""Collaborator contracts of the budget engine.

The engine only sees transaction history, reserve balances and manual
adjustments through these three ports. Any failure raised by an
implementation propagates unchanged to the caller.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional, Protocol


TransactionType = Literal["income", "expense"]


class InvalidArgument(ValueError):
    """Input contract violation (month outside 1-12, months back out of range)."""


class LedgerQuery(Protocol):
    def total_by_type(
        self,
        type_: TransactionType,
        start: date,
        end: date,
        *,
        category: Optional[str] = None,
    ) -> float:  # pragma: no cover - interface
        """Sum of amounts of `type_` between start and end (inclusive)."""
        ...

    def list_between(self, start: date, end: date) -> List[Dict[str, Any]]:  # pragma: no cover - interface
        """Transactions in range, newest date first, then newest created first."""
        ...


class ReserveQuery(Protocol):
    def total_current_amount(self) -> float:  # pragma: no cover - interface
        ...


class AdjustmentStore(Protocol):
    def get_adjustment(self, month: int, year: int) -> float:  # pragma: no cover - interface
        """Stored manual daily adjustment, 0.0 when none was set."""
        ...

    def upsert_adjustment(self, month: int, year: int, amount: float) -> None:  # pragma: no cover - interface
        """Create or replace the single adjustment row for (month, year)."""
        ...
