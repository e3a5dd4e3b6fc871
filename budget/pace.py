from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict

from budget.calculator import MonthlyBudgetCalculator
from budget.dates import check_month, month_position


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyBudget:
    month: int
    year: int
    basic_daily_limit: float
    adjusted_daily_limit: float
    automatic_adjustment: float
    final_daily_limit: float
    days_left_in_month: int
    remaining_budget: float
    overspend_amount: float
    is_current_month: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DailyPaceCorrector:
    """Linear pace feedback on top of the monthly daily limit.

    Compares month-to-date spending with `daily_spending_limit * days_passed`
    and spreads the gap evenly over the days left, so that absent further
    deviation the month closes on the budgeted total.
    """

    def __init__(self, calculator: MonthlyBudgetCalculator) -> None:
        self.calculator = calculator

    @property
    def ledger(self):
        return self.calculator.ledger

    def correction_for(self, month: int, year: int, reference_today: date) -> float:
        check_month(month)
        if month_position(month, year, reference_today) != "current":
            return 0.0

        budget = self.calculator.calculate(month, year, reference_today)
        month_start = date(year, month, 1)
        actual = float(self.ledger.total_by_type("expense", month_start, reference_today))

        days_passed = reference_today.day
        # Pace is measured against the unadjusted limit
        expected = budget.daily_spending_limit * days_passed
        overspend = actual - expected

        if budget.days_left_in_month == 0:
            return 0.0
        correction = -(overspend / budget.days_left_in_month)
        logger.debug(
            "pace %04d-%02d: actual=%.2f expected=%.2f correction=%.4f",
            year,
            month,
            actual,
            expected,
            correction,
        )
        return correction

    def daily_budget(self, month: int, year: int, reference_today: date) -> DailyBudget:
        """Snapshot plus automatic correction, combined into the final daily limit."""
        budget = self.calculator.calculate(month, year, reference_today)
        automatic = self.correction_for(month, year, reference_today)
        return DailyBudget(
            month=month,
            year=year,
            basic_daily_limit=budget.daily_spending_limit,
            adjusted_daily_limit=budget.adjusted_daily_limit,
            automatic_adjustment=automatic,
            final_daily_limit=max(0.0, budget.adjusted_daily_limit + automatic),
            days_left_in_month=budget.days_left_in_month,
            remaining_budget=budget.remaining_budget,
            overspend_amount=budget.overspend_amount,
            is_current_month=month_position(month, year, reference_today) == "current",
        )
