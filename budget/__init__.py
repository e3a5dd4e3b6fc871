from .ports import InvalidArgument, LedgerQuery, ReserveQuery, AdjustmentStore
from .calculator import BudgetCalculation, MonthlyBudgetCalculator
from .pace import DailyBudget, DailyPaceCorrector
from .adjustments import set_manual_adjustment
from .aggregator import SpendingAggregator

__all__ = [
    "InvalidArgument",
    "LedgerQuery",
    "ReserveQuery",
    "AdjustmentStore",
    "BudgetCalculation",
    "MonthlyBudgetCalculator",
    "DailyBudget",
    "DailyPaceCorrector",
    "set_manual_adjustment",
    "SpendingAggregator",
]
