from __future__ import annotations

import logging
import sqlite3
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, HTTPException, Query

from budget import InvalidArgument, SpendingAggregator
from budget.dates import month_bounds, today_local
from config import (
    CATEGORY_TRENDS_DEFAULT_MONTHS,
    COMPARISON_DEFAULT_MONTHS,
    COMPARISON_MAX_MONTHS,
    MAX_YEAR,
    MIN_YEAR,
    TRENDS_DEFAULT_MONTHS,
    TRENDS_MAX_MONTHS,
)
from localdb.store import SqliteLedger


logger = logging.getLogger("uvicorn.error")

router = APIRouter()


def _today() -> date:
    return today_local()


def _aggregator() -> SpendingAggregator:
    return SpendingAggregator(SqliteLedger())


def _check_months(months: int, upper: int) -> None:
    if months < 1 or months > upper:
        raise HTTPException(status_code=400, detail=f"'months' must be between 1 and {upper}")


def _parse_range(start_date: Optional[str], end_date: Optional[str]) -> Tuple[date, date]:
    """Parse an inclusive date range; missing ends default to the current month's bounds."""
    today = _today()
    month_start, month_end = month_bounds(today.month, today.year)
    try:
        start = date.fromisoformat(start_date) if start_date else month_start
        end = date.fromisoformat(end_date) if end_date else month_end
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format; use YYYY-MM-DD")
    if end < start:
        raise HTTPException(status_code=400, detail="end_date must be on or after start_date")
    return start, end


@router.get("/api/analytics/expenses")
def get_expenses_by_category(
    start_date: Optional[str] = Query(None, description="Start date YYYY-MM-DD (inclusive)"),
    end_date: Optional[str] = Query(None, description="End date YYYY-MM-DD (inclusive)"),
) -> List[Dict[str, Any]]:
    start, end = _parse_range(start_date, end_date)
    try:
        return [s.to_dict() for s in _aggregator().expense_shares(start, end, "category")]
    except sqlite3.Error:
        logger.exception("[ANALYTICS] Expense breakdown failed")
        raise HTTPException(status_code=500, detail="Failed to load expense analytics")


@router.get("/api/analytics/priority")
def get_expenses_by_priority(
    start_date: Optional[str] = Query(None, description="Start date YYYY-MM-DD (inclusive)"),
    end_date: Optional[str] = Query(None, description="End date YYYY-MM-DD (inclusive)"),
) -> List[Dict[str, Any]]:
    start, end = _parse_range(start_date, end_date)
    try:
        return [s.to_dict() for s in _aggregator().expense_shares(start, end, "priority")]
    except sqlite3.Error:
        logger.exception("[ANALYTICS] Priority breakdown failed")
        raise HTTPException(status_code=500, detail="Failed to load priority analytics")


@router.get("/api/analytics/summary")
def get_spending_summary(
    start_date: Optional[str] = Query(None, description="Start date YYYY-MM-DD (inclusive)"),
    end_date: Optional[str] = Query(None, description="End date YYYY-MM-DD (inclusive)"),
) -> Dict[str, Any]:
    """Totals with per-category and per-priority breakdowns; defaults to the current month."""
    start, end = _parse_range(start_date, end_date)
    try:
        summary = _aggregator().summary(start, end)
    except sqlite3.Error:
        logger.exception("[ANALYTICS] Spending summary failed")
        raise HTTPException(status_code=500, detail="Failed to load spending summary")
    return {"start_date": start.isoformat(), "end_date": end.isoformat(), **summary.to_dict()}


@router.get("/api/analytics/monthly-summary")
def get_month_summary(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=MIN_YEAR, le=MAX_YEAR),
) -> Dict[str, Any]:
    today = _today()
    month = month if month is not None else today.month
    year = year if year is not None else today.year
    try:
        return _aggregator().month_summary(month, year).to_dict()
    except sqlite3.Error:
        logger.exception("[ANALYTICS] Month summary failed")
        raise HTTPException(status_code=500, detail="Failed to load monthly summary")


@router.get("/api/analytics/trends")
def get_spending_trends(months: int = Query(TRENDS_DEFAULT_MONTHS)) -> List[Dict[str, Any]]:
    _check_months(months, TRENDS_MAX_MONTHS)
    try:
        return [p.to_dict() for p in _aggregator().trends(months, _today())]
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except sqlite3.Error:
        logger.exception("[ANALYTICS] Spending trends failed")
        raise HTTPException(status_code=500, detail="Failed to load spending trends")


@router.get("/api/analytics/comparison")
def get_income_vs_expense(months: int = Query(COMPARISON_DEFAULT_MONTHS)) -> List[Dict[str, Any]]:
    _check_months(months, COMPARISON_MAX_MONTHS)
    try:
        return [p.to_dict() for p in _aggregator().comparison(months, _today())]
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except sqlite3.Error:
        logger.exception("[ANALYTICS] Income/expense comparison failed")
        raise HTTPException(status_code=500, detail="Failed to compare income and expenses")


@router.get("/api/analytics/category-trends/{category}")
def get_category_trends(
    category: str,
    months: int = Query(CATEGORY_TRENDS_DEFAULT_MONTHS),
) -> List[Dict[str, Any]]:
    _check_months(months, COMPARISON_MAX_MONTHS)
    try:
        return [p.to_dict() for p in _aggregator().category_trends(category, months, _today())]
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except sqlite3.Error:
        logger.exception(f"[ANALYTICS] Category trends failed for {category!r}")
        raise HTTPException(status_code=500, detail="Failed to load category trends")
