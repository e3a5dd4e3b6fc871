from __future__ import annotations

import logging
import sqlite3
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from budget import DailyPaceCorrector, InvalidArgument, MonthlyBudgetCalculator, set_manual_adjustment
from budget.dates import today_local
from config import MAX_YEAR, MIN_YEAR
from localdb.store import SqliteAdjustments, SqliteLedger, SqliteReserves


logger = logging.getLogger("uvicorn.error")

router = APIRouter()


class AdjustmentIn(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR)
    adjustment: float = Field(..., allow_inf_nan=False)


def _today() -> date:
    return today_local()


def _calculator() -> MonthlyBudgetCalculator:
    return MonthlyBudgetCalculator(SqliteLedger(), SqliteReserves(), SqliteAdjustments())


@router.get("/api/budget/monthly")
def get_monthly_budget(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=MIN_YEAR, le=MAX_YEAR),
) -> Dict[str, Any]:
    """Budget snapshot for a month; falls back to the current month unless both month and year are given."""
    today = _today()
    if month is None or year is None:
        month, year = today.month, today.year
    try:
        return _calculator().calculate(month, year, today).to_dict()
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except sqlite3.Error:
        logger.exception(f"[BUDGET] Monthly budget failed for {year}-{month:02d}")
        raise HTTPException(status_code=500, detail="Failed to calculate monthly budget")


@router.get("/api/budget/daily")
def get_daily_budget(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=MIN_YEAR, le=MAX_YEAR),
) -> Dict[str, Any]:
    """Today's limit: monthly snapshot, manual adjustment and automatic pace correction combined."""
    today = _today()
    month = month if month is not None else today.month
    year = year if year is not None else today.year
    try:
        return DailyPaceCorrector(_calculator()).daily_budget(month, year, today).to_dict()
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except sqlite3.Error:
        logger.exception(f"[BUDGET] Daily budget failed for {year}-{month:02d}")
        raise HTTPException(status_code=500, detail="Failed to calculate daily budget")


@router.get("/api/budget/adjust")
def get_manual_adjustment(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=MIN_YEAR, le=MAX_YEAR),
) -> Dict[str, Any]:
    try:
        amount = SqliteAdjustments().get_adjustment(month, year)
    except sqlite3.Error:
        logger.exception(f"[BUDGET] Reading adjustment failed for {year}-{month:02d}")
        raise HTTPException(status_code=500, detail="Failed to read budget adjustment")
    return {"month": month, "year": year, "manual_daily_adjustment": amount}


@router.post("/api/budget/adjust")
def adjust_budget(payload: AdjustmentIn) -> Dict[str, Any]:
    """Set the manual daily adjustment and return the recomputed month."""
    try:
        set_manual_adjustment(SqliteAdjustments(), payload.month, payload.year, payload.adjustment)
        return _calculator().calculate(payload.month, payload.year, _today()).to_dict()
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))
    except sqlite3.Error:
        logger.exception(f"[BUDGET] Adjusting budget failed for {payload.year}-{payload.month:02d}")
        raise HTTPException(status_code=500, detail="Failed to adjust budget")
