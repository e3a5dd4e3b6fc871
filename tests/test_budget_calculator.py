from __future__ import annotations

import sqlite3
from datetime import date

import pytest

from budget import InvalidArgument, MonthlyBudgetCalculator, set_manual_adjustment


TODAY = date(2025, 6, 10)  # June has 30 days -> 21 days left including today


def _calc(ledger, reserves, adjustments) -> MonthlyBudgetCalculator:
    return MonthlyBudgetCalculator(ledger, reserves, adjustments)


def test_current_month_with_income_expenses_and_reserves(ledger, reserves, adjustments):
    ledger.add("income", 50000, date(2025, 6, 1), category="Salary")
    ledger.add("expense", 15000, date(2025, 6, 5), category="Groceries")
    reserves.total = 10000

    result = _calc(ledger, reserves, adjustments).calculate(6, 2025, TODAY)

    assert result.total_income == 50000
    assert result.total_expenses == 15000
    assert result.total_reserves == 10000
    assert result.remaining_budget == 25000
    assert result.days_left_in_month == 21
    assert result.daily_spending_limit == pytest.approx(25000 / 21)
    assert result.overspend_amount == 0
    assert result.adjusted_daily_limit == result.daily_spending_limit


def test_overspend_drives_adjusted_limit_to_zero(ledger, reserves, adjustments):
    ledger.add("income", 30000, date(2025, 6, 1))
    ledger.add("expense", 40000, date(2025, 6, 2))

    result = _calc(ledger, reserves, adjustments).calculate(6, 2025, TODAY)

    assert result.remaining_budget == -10000
    assert result.overspend_amount == 10000
    assert result.daily_spending_limit < 0
    assert result.adjusted_daily_limit == 0


def test_manual_adjustment_is_added_to_daily_limit(ledger, reserves, adjustments):
    ledger.add("income", 50000, date(2025, 6, 1))
    adjustments.upsert_adjustment(6, 2025, 500)

    result = _calc(ledger, reserves, adjustments).calculate(6, 2025, TODAY)

    assert result.adjusted_daily_limit == pytest.approx(result.daily_spending_limit + 500)


def test_negative_manual_adjustment_is_clamped_at_zero(ledger, reserves, adjustments):
    ledger.add("income", 2100, date(2025, 6, 1))
    adjustments.upsert_adjustment(6, 2025, -1000)

    result = _calc(ledger, reserves, adjustments).calculate(6, 2025, TODAY)

    assert result.daily_spending_limit == pytest.approx(100)
    assert result.adjusted_daily_limit == 0
    # Overspend is never driven by the manual adjustment
    assert result.overspend_amount == 0


def test_future_month_subtracts_reserves_and_uses_full_length(ledger, reserves, adjustments):
    reserves.total = 1234

    result = _calc(ledger, reserves, adjustments).calculate(8, 2025, TODAY)

    assert result.total_income == 0
    assert result.total_expenses == 0
    assert result.days_left_in_month == 31
    assert result.remaining_budget == -1234
    assert result.overspend_amount == 1234
    assert result.daily_spending_limit == pytest.approx(-1234 / 31)


@pytest.mark.parametrize(
    "month, year, expected",
    [(2, 2028, 29), (2, 2027, 28), (4, 2026, 30), (1, 2026, 31), (12, 2025, 31)],
)
def test_future_month_length_is_leap_year_aware(ledger, reserves, adjustments, month, year, expected):
    result = _calc(ledger, reserves, adjustments).calculate(month, year, TODAY)
    assert result.days_left_in_month == expected


def test_past_month_has_no_days_and_zero_limit(ledger, reserves, adjustments):
    ledger.add("income", 1000, date(2025, 4, 3))
    ledger.add("expense", 5000, date(2025, 4, 9))

    result = _calc(ledger, reserves, adjustments).calculate(4, 2025, TODAY)

    assert result.days_left_in_month == 0
    assert result.daily_spending_limit == 0
    assert result.remaining_budget == -4000
    assert result.overspend_amount == 4000


def test_previous_year_is_past_even_with_later_month(ledger, reserves, adjustments):
    result = _calc(ledger, reserves, adjustments).calculate(12, 2024, TODAY)
    assert result.days_left_in_month == 0


def test_last_day_of_current_month_still_has_one_day(ledger, reserves, adjustments):
    ledger.add("income", 900, date(2025, 6, 1))

    result = _calc(ledger, reserves, adjustments).calculate(6, 2025, date(2025, 6, 30))

    assert result.days_left_in_month == 1
    assert result.daily_spending_limit == 900


def test_transactions_outside_month_are_ignored(ledger, reserves, adjustments):
    ledger.add("income", 100, date(2025, 5, 31))
    ledger.add("income", 200, date(2025, 6, 30))
    ledger.add("expense", 50, date(2025, 7, 1))

    result = _calc(ledger, reserves, adjustments).calculate(6, 2025, TODAY)

    assert result.total_income == 200
    assert result.total_expenses == 0


@pytest.mark.parametrize("month", [0, 13, -1])
def test_invalid_month_is_rejected_before_querying(ledger, reserves, adjustments, month):
    with pytest.raises(InvalidArgument):
        _calc(ledger, reserves, adjustments).calculate(month, 2025, TODAY)
    assert ledger.calls == 0
    assert reserves.calls == 0


def test_port_failures_propagate(reserves, adjustments):
    class BrokenLedger:
        def total_by_type(self, *args, **kwargs):
            raise sqlite3.OperationalError("database is locked")

        def list_between(self, start, end):
            raise sqlite3.OperationalError("database is locked")

    with pytest.raises(sqlite3.OperationalError):
        _calc(BrokenLedger(), reserves, adjustments).calculate(6, 2025, TODAY)


def test_overspend_invariant_holds_across_inputs(ledger, reserves, adjustments):
    calc = _calc(ledger, reserves, adjustments)
    for income, expense, reserve in [(100, 50, 0), (100, 100, 0), (100, 50, 60), (0, 0, 0), (10, 0, 11)]:
        ledger.rows.clear()
        ledger.add("income", income, date(2025, 6, 1))
        ledger.add("expense", expense, date(2025, 6, 2))
        reserves.total = reserve
        result = calc.calculate(6, 2025, TODAY)
        assert result.remaining_budget == income - expense - reserve
        assert result.overspend_amount == max(0, expense + reserve - income)
        assert (result.overspend_amount > 0) == (result.remaining_budget < 0)
        assert result.adjusted_daily_limit >= 0


@pytest.mark.parametrize("amount", [float("inf"), float("-inf"), float("nan")])
def test_manual_adjustment_must_be_finite(adjustments, amount):
    with pytest.raises(InvalidArgument):
        set_manual_adjustment(adjustments, 6, 2025, amount)
    assert adjustments.rows == {}
