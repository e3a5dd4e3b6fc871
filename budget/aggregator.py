from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Literal, Optional

from budget.dates import month_bounds, period_label, shift_month
from budget.ports import InvalidArgument, LedgerQuery


BreakdownKey = Literal["category", "priority"]


@dataclass
class Bucket:
    income: float = 0.0
    expense: float = 0.0
    count: int = 0
    expense_count: int = 0


@dataclass
class SpendingSummary:
    total_income: float = 0.0
    total_expenses: float = 0.0
    transaction_count: int = 0
    category_breakdown: Dict[str, Bucket] = field(default_factory=dict)
    priority_breakdown: Dict[str, Bucket] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TrendPoint:
    month: int
    year: int
    period: str
    total_income: float
    total_expenses: float
    net_amount: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ComparisonPoint:
    month: int
    year: int
    period: str
    total_income: float
    total_expenses: float
    net_amount: float
    percentage_change: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CategoryShare:
    key: str
    amount: float
    percentage: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MonthSummary:
    month: int
    year: int
    total_income: float
    total_expenses: float
    net_amount: float
    transaction_count: int
    top_expense_category: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _bump(buckets: Dict[str, Bucket], key: str, type_: str, amount: float) -> None:
    bucket = buckets.get(key)
    if bucket is None:
        bucket = buckets[key] = Bucket()
    if type_ == "income":
        bucket.income += amount
    else:
        bucket.expense += amount
        bucket.expense_count += 1
    bucket.count += 1


class SpendingAggregator:
    """Display-only breakdowns and trend series over the ledger."""

    def __init__(self, ledger: LedgerQuery) -> None:
        self.ledger = ledger

    def summary(self, start: date, end: date) -> SpendingSummary:
        transactions = self.ledger.list_between(start, end)
        out = SpendingSummary(transaction_count=len(transactions))
        for txn in transactions:
            type_ = str(txn["type"])
            amount = float(txn["amount"])
            if type_ == "income":
                out.total_income += amount
            else:
                out.total_expenses += amount
            _bump(out.category_breakdown, str(txn["category"]), type_, amount)
            _bump(out.priority_breakdown, str(txn["priority"]), type_, amount)
        return out

    def trends(
        self,
        months_back: int,
        reference_today: date,
        *,
        category: Optional[str] = None,
    ) -> List[TrendPoint]:
        """Income/expense totals for the `months_back` months ending at the reference month.

        Returned oldest first.
        """
        if months_back < 1:
            raise InvalidArgument(f"months_back must be at least 1, got {months_back}")

        points: List[TrendPoint] = []
        for i in range(months_back):
            month, year = shift_month(reference_today.month, reference_today.year, -i)
            start, end = month_bounds(month, year)
            income = float(self.ledger.total_by_type("income", start, end, category=category))
            expenses = float(self.ledger.total_by_type("expense", start, end, category=category))
            points.append(
                TrendPoint(
                    month=month,
                    year=year,
                    period=period_label(month, year),
                    total_income=income,
                    total_expenses=expenses,
                    net_amount=income - expenses,
                )
            )
        points.reverse()
        return points

    def category_trends(self, category: str, months_back: int, reference_today: date) -> List[TrendPoint]:
        if not category:
            raise InvalidArgument("category is required")
        return self.trends(months_back, reference_today, category=category)

    def comparison(self, months_back: int, reference_today: date) -> List[ComparisonPoint]:
        """Trend points with the month-over-month change of the net amount, in percent."""
        out: List[ComparisonPoint] = []
        prev: Optional[TrendPoint] = None
        for p in self.trends(months_back, reference_today):
            change: Optional[float] = None
            if prev is not None and prev.net_amount != 0:
                change = (p.net_amount - prev.net_amount) / abs(prev.net_amount) * 100
            out.append(
                ComparisonPoint(
                    month=p.month,
                    year=p.year,
                    period=p.period,
                    total_income=p.total_income,
                    total_expenses=p.total_expenses,
                    net_amount=p.net_amount,
                    percentage_change=change,
                )
            )
            prev = p
        return out

    def expense_shares(self, start: date, end: date, key: BreakdownKey = "category") -> List[CategoryShare]:
        """Expense totals per category or priority with their share of all expenses."""
        summary = self.summary(start, end)
        breakdown = summary.category_breakdown if key == "category" else summary.priority_breakdown
        buckets = {k: b for k, b in breakdown.items() if b.expense_count > 0}

        total = sum(b.expense for b in buckets.values())
        shares = [
            CategoryShare(
                key=k,
                amount=b.expense,
                percentage=(b.expense / total * 100) if total > 0 else 0.0,
                count=b.expense_count,
            )
            for k, b in buckets.items()
        ]
        shares.sort(key=lambda s: s.amount, reverse=True)
        return shares

    def month_summary(self, month: int, year: int) -> MonthSummary:
        start, end = month_bounds(month, year)
        summary = self.summary(start, end)
        top: Optional[str] = None
        top_amount = 0.0
        for k, b in summary.category_breakdown.items():
            if b.expense > top_amount:
                top, top_amount = k, b.expense
        return MonthSummary(
            month=month,
            year=year,
            total_income=summary.total_income,
            total_expenses=summary.total_expenses,
            net_amount=summary.total_income - summary.total_expenses,
            transaction_count=summary.transaction_count,
            top_expense_category=top,
        )
