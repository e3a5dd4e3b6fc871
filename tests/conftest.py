from __future__ import annotations

import os
import sys
from datetime import date
from typing import Any, Dict, List, Optional

import pytest


# Ensure the project root is on the path so top-level packages import when
# tests are executed from within the `tests` directory.
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)


class FakeLedger:
    """In-memory ledger port."""

    def __init__(self) -> None:
        self.rows: List[Dict[str, Any]] = []
        self.calls = 0

    def add(self, type_: str, amount: float, on: date, category: str = "Food", priority: str = "medium") -> None:
        self.rows.append(
            {
                "id": len(self.rows) + 1,
                "type": type_,
                "amount": float(amount),
                "date": on.isoformat(),
                "category": category,
                "priority": priority,
            }
        )

    def total_by_type(self, type_: str, start: date, end: date, *, category: Optional[str] = None) -> float:
        self.calls += 1
        lo, hi = start.isoformat(), end.isoformat()
        return sum(
            r["amount"]
            for r in self.rows
            if r["type"] == type_ and lo <= r["date"] <= hi and (category is None or r["category"] == category)
        )

    def list_between(self, start: date, end: date) -> List[Dict[str, Any]]:
        self.calls += 1
        lo, hi = start.isoformat(), end.isoformat()
        rows = [r for r in self.rows if lo <= r["date"] <= hi]
        return sorted(rows, key=lambda r: (r["date"], r["id"]), reverse=True)


class FakeReserves:
    def __init__(self, total: float = 0.0) -> None:
        self.total = total
        self.calls = 0

    def total_current_amount(self) -> float:
        self.calls += 1
        return self.total


class FakeAdjustments:
    def __init__(self) -> None:
        self.rows: Dict[tuple, float] = {}

    def get_adjustment(self, month: int, year: int) -> float:
        return self.rows.get((month, year), 0.0)

    def upsert_adjustment(self, month: int, year: int, amount: float) -> None:
        self.rows[(month, year)] = amount


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def reserves() -> FakeReserves:
    return FakeReserves()


@pytest.fixture
def adjustments() -> FakeAdjustments:
    return FakeAdjustments()
