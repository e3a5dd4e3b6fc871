from __future__ import annotations

import os
from calendar import monthrange
from datetime import date, datetime
from typing import Literal, Tuple

from budget.ports import InvalidArgument


MonthPosition = Literal["past", "current", "future"]


def _tz_name() -> str:
    return os.getenv("BUDGET_TZ") or os.getenv("TZ") or "UTC"


def today_local() -> date:
    """Return today's date in the configured timezone (BUDGET_TZ, TZ, UTC)."""
    try:
        from zoneinfo import ZoneInfo

        tz = ZoneInfo(_tz_name())
        return datetime.now(tz).date()
    except Exception:
        return datetime.utcnow().date()


def check_month(month: int) -> None:
    if not isinstance(month, int) or isinstance(month, bool) or not 1 <= month <= 12:
        raise InvalidArgument(f"month must be between 1 and 12, got {month!r}")


def month_length(month: int, year: int) -> int:
    check_month(month)
    return monthrange(year, month)[1]


def month_bounds(month: int, year: int) -> Tuple[date, date]:
    """Return (first_day, last_day) of the month, both inclusive."""
    last_day = month_length(month, year)
    return date(year, month, 1), date(year, month, last_day)


def shift_month(month: int, year: int, delta: int) -> Tuple[int, int]:
    """Move (month, year) by `delta` calendar months; negative goes back."""
    check_month(month)
    idx = month - 1 + delta
    return idx % 12 + 1, year + idx // 12


def month_position(month: int, year: int, today: date) -> MonthPosition:
    if year == today.year and month == today.month:
        return "current"
    if year > today.year or (year == today.year and month > today.month):
        return "future"
    return "past"


def days_left_in_month(month: int, year: int, today: date) -> int:
    """Spendable days left in the month as seen from `today`.

    - current month: today counts, and the result is never below 1
    - future month: the whole month
    - past month: 0
    """
    length = month_length(month, year)
    position = month_position(month, year, today)
    if position == "current":
        return max(1, length - today.day + 1)
    if position == "future":
        return length
    return 0


def period_label(month: int, year: int) -> str:
    return f"{year:04d}-{month:02d}"
