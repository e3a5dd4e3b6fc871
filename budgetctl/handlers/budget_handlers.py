from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Optional, Tuple

from budget import DailyPaceCorrector, InvalidArgument, MonthlyBudgetCalculator, set_manual_adjustment
from budget.dates import today_local
from db.migrate import run_migrations
from localdb.store import SqliteAdjustments, SqliteLedger, SqliteReserves


def _calculator(db_path: Path) -> MonthlyBudgetCalculator:
    run_migrations(db_path)
    return MonthlyBudgetCalculator(
        SqliteLedger(db_path),
        SqliteReserves(db_path),
        SqliteAdjustments(db_path),
    )


def _resolve(month: Optional[int], year: Optional[int]) -> Tuple[int, int]:
    today = today_local()
    return (month if month is not None else today.month, year if year is not None else today.year)


def show_monthly(db_path: Path, *, month: Optional[int] = None, year: Optional[int] = None) -> int:
    month, year = _resolve(month, year)
    try:
        snapshot = _calculator(db_path).calculate(month, year, today_local())
    except InvalidArgument as e:
        print(f"[error] {e}")
        return 2
    except sqlite3.Error as e:
        print(f"[error] Budget calculation failed: {e}")
        return 1
    print(json.dumps({"month": month, "year": year, **snapshot.to_dict()}, indent=2))
    return 0


def show_daily(db_path: Path, *, month: Optional[int] = None, year: Optional[int] = None) -> int:
    month, year = _resolve(month, year)
    try:
        daily = DailyPaceCorrector(_calculator(db_path)).daily_budget(month, year, today_local())
    except InvalidArgument as e:
        print(f"[error] {e}")
        return 2
    except sqlite3.Error as e:
        print(f"[error] Daily budget failed: {e}")
        return 1
    print(json.dumps(daily.to_dict(), indent=2))
    return 0


def adjust(db_path: Path, *, month: int, year: int, amount: float) -> int:
    try:
        calculator = _calculator(db_path)
        set_manual_adjustment(calculator.adjustments, month, year, amount)
        snapshot = calculator.calculate(month, year, today_local())
    except InvalidArgument as e:
        print(f"[error] {e}")
        return 2
    except sqlite3.Error as e:
        print(f"[error] Adjustment failed: {e}")
        return 1
    print(f"[adjust] {year}-{month:02d} manual daily adjustment = {amount}")
    print(json.dumps(snapshot.to_dict(), indent=2))
    return 0
