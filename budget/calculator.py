from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict

from budget.dates import check_month, days_left_in_month, month_bounds
from budget.ports import AdjustmentStore, LedgerQuery, ReserveQuery


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BudgetCalculation:
    total_income: float
    total_expenses: float
    total_reserves: float
    remaining_budget: float
    daily_spending_limit: float
    days_left_in_month: int
    overspend_amount: float
    adjusted_daily_limit: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class MonthlyBudgetCalculator:
    """Turns ledger, reserve and adjustment data into a month's spending plan.

    Every call re-derives the snapshot from the current port contents; nothing
    is cached between calls.
    """

    def __init__(self, ledger: LedgerQuery, reserves: ReserveQuery, adjustments: AdjustmentStore) -> None:
        self.ledger = ledger
        self.reserves = reserves
        self.adjustments = adjustments

    def calculate(self, month: int, year: int, reference_today: date) -> BudgetCalculation:
        check_month(month)
        start, end = month_bounds(month, year)

        total_income = float(self.ledger.total_by_type("income", start, end))
        total_expenses = float(self.ledger.total_by_type("expense", start, end))
        # Reserves are a point-in-time balance, not scoped to the month
        total_reserves = float(self.reserves.total_current_amount())

        remaining = total_income - total_expenses - total_reserves
        days_left = days_left_in_month(month, year, reference_today)
        daily = remaining / days_left if days_left > 0 else 0.0

        manual = float(self.adjustments.get_adjustment(month, year) or 0.0)

        snapshot = BudgetCalculation(
            total_income=total_income,
            total_expenses=total_expenses,
            total_reserves=total_reserves,
            remaining_budget=remaining,
            daily_spending_limit=daily,
            days_left_in_month=days_left,
            overspend_amount=max(0.0, -remaining),
            adjusted_daily_limit=max(0.0, daily + manual),
        )
        logger.debug("budget %04d-%02d as of %s: %s", year, month, reference_today.isoformat(), snapshot)
        return snapshot
