from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from localdb.store import SqliteReserves


logger = logging.getLogger("uvicorn.error")

router = APIRouter()


class ReserveIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    target_amount: float = Field(..., ge=0, allow_inf_nan=False)
    current_amount: float = Field(0.0, ge=0, allow_inf_nan=False)
    purpose: Optional[str] = Field(None, max_length=500)


class ReservePatch(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    target_amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    current_amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    purpose: Optional[str] = Field(None, max_length=500)


class AmountIn(BaseModel):
    amount: float = Field(..., gt=0, allow_inf_nan=False)


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Reserve not found")


def _require(reserves: SqliteReserves, reserve_id: int) -> Dict[str, Any]:
    found = reserves.get(reserve_id)
    if found is None:
        raise _not_found()
    return found


@router.get("/api/reserves")
def list_reserves() -> List[Dict[str, Any]]:
    try:
        return SqliteReserves().list()
    except sqlite3.Error:
        logger.exception("[RESERVES] Listing failed")
        raise HTTPException(status_code=500, detail="Failed to list reserves")


@router.get("/api/reserves/summary")
def reserves_summary() -> Dict[str, Any]:
    """Funding totals across all reserves."""
    try:
        return SqliteReserves().summary()
    except sqlite3.Error:
        logger.exception("[RESERVES] Summary failed")
        raise HTTPException(status_code=500, detail="Failed to summarize reserves")


@router.get("/api/reserves/{reserve_id}")
def get_reserve(reserve_id: int) -> Dict[str, Any]:
    try:
        return _require(SqliteReserves(), reserve_id)
    except sqlite3.Error:
        logger.exception(f"[RESERVES] Lookup failed for id={reserve_id}")
        raise HTTPException(status_code=500, detail="Failed to load reserve")


@router.post("/api/reserves", status_code=201)
def create_reserve(payload: ReserveIn) -> Dict[str, Any]:
    try:
        return SqliteReserves().create(payload.model_dump())
    except sqlite3.Error:
        logger.exception("[RESERVES] Create failed")
        raise HTTPException(status_code=500, detail="Failed to create reserve")


@router.put("/api/reserves/{reserve_id}")
def update_reserve(reserve_id: int, payload: ReservePatch) -> Dict[str, Any]:
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None or k == "purpose"}
    reserves = SqliteReserves()
    try:
        _require(reserves, reserve_id)
        updated = reserves.update(reserve_id, changes)
    except sqlite3.Error:
        logger.exception(f"[RESERVES] Update failed for id={reserve_id}")
        raise HTTPException(status_code=500, detail="Failed to update reserve")
    if updated is None:
        raise _not_found()
    return updated


@router.delete("/api/reserves/{reserve_id}")
def delete_reserve(reserve_id: int) -> Dict[str, Any]:
    try:
        deleted = SqliteReserves().delete(reserve_id)
    except sqlite3.Error:
        logger.exception(f"[RESERVES] Delete failed for id={reserve_id}")
        raise HTTPException(status_code=500, detail="Failed to delete reserve")
    if not deleted:
        raise _not_found()
    return {"status": "deleted", "id": reserve_id}


@router.post("/api/reserves/{reserve_id}/allocate")
def allocate_to_reserve(reserve_id: int, payload: AmountIn) -> Dict[str, Any]:
    reserves = SqliteReserves()
    try:
        _require(reserves, reserve_id)
        updated = reserves.add_amount(reserve_id, payload.amount)
    except sqlite3.Error:
        logger.exception(f"[RESERVES] Allocation failed for id={reserve_id}")
        raise HTTPException(status_code=500, detail="Failed to allocate to reserve")
    if updated is None:
        raise _not_found()
    logger.info(f"[RESERVES] Allocated {payload.amount} to reserve id={reserve_id}")
    return updated


@router.post("/api/reserves/{reserve_id}/withdraw")
def withdraw_from_reserve(reserve_id: int, payload: AmountIn) -> Dict[str, Any]:
    reserves = SqliteReserves()
    try:
        existing = _require(reserves, reserve_id)
        if existing["current_amount"] < payload.amount:
            raise HTTPException(
                status_code=400,
                detail=(
                    f"Insufficient funds in reserve: available {existing['current_amount']}, "
                    f"requested {payload.amount}"
                ),
            )
        updated = reserves.subtract_amount(reserve_id, payload.amount)
    except sqlite3.Error:
        logger.exception(f"[RESERVES] Withdrawal failed for id={reserve_id}")
        raise HTTPException(status_code=500, detail="Failed to withdraw from reserve")
    if updated is None:
        raise _not_found()
    logger.info(f"[RESERVES] Withdrew {payload.amount} from reserve id={reserve_id}")
    return updated
