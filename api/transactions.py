from __future__ import annotations

import logging
import sqlite3
from datetime import date as _date
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from config import TRANSACTIONS_PAGE_DEFAULT, TRANSACTIONS_PAGE_MAX
from localdb.store import SqliteLedger


logger = logging.getLogger("uvicorn.error")

router = APIRouter()

TransactionType = Literal["income", "expense"]
Priority = Literal["low", "medium", "high", "maximum", "target"]


class TransactionIn(BaseModel):
    type: TransactionType
    category: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    description: str = Field(..., min_length=1, max_length=500)
    priority: Priority = "medium"
    date: _date
    notes: Optional[str] = Field(None, max_length=1000)


class TransactionPatch(BaseModel):
    type: Optional[TransactionType] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    amount: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    priority: Optional[Priority] = None
    date: Optional[_date] = None
    notes: Optional[str] = Field(None, max_length=1000)


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Transaction not found")


@router.get("/api/transactions")
def list_transactions(
    type: Optional[TransactionType] = Query(None, description="income or expense"),
    category: Optional[str] = Query(None, max_length=100),
    priority: Optional[Priority] = Query(None),
    date_from: Optional[str] = Query(None, description="Start date YYYY-MM-DD (inclusive)"),
    date_to: Optional[str] = Query(None, description="End date YYYY-MM-DD (inclusive)"),
    search: Optional[str] = Query(None, description="Search in description, notes or category (case-insensitive)"),
    limit: int = Query(TRANSACTIONS_PAGE_DEFAULT, ge=1, le=TRANSACTIONS_PAGE_MAX),
    offset: int = Query(0, ge=0),
) -> Dict[str, Any]:
    try:
        start_d = _date.fromisoformat(date_from) if date_from else None
        end_d = _date.fromisoformat(date_to) if date_to else None
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format; use YYYY-MM-DD")

    try:
        return SqliteLedger().list(
            type_=type,
            category=category,
            priority=priority,
            date_from=start_d,
            date_to=end_d,
            search=search,
            limit=limit,
            offset=offset,
        )
    except sqlite3.Error:
        logger.exception("[TRANSACTIONS] Listing failed")
        raise HTTPException(status_code=500, detail="Failed to list transactions")


@router.get("/api/transactions/{txn_id}")
def get_transaction(txn_id: int) -> Dict[str, Any]:
    try:
        txn = SqliteLedger().get(txn_id)
    except sqlite3.Error:
        logger.exception(f"[TRANSACTIONS] Lookup failed for id={txn_id}")
        raise HTTPException(status_code=500, detail="Failed to load transaction")
    if txn is None:
        raise _not_found()
    return txn


@router.post("/api/transactions", status_code=201)
def create_transaction(payload: TransactionIn) -> Dict[str, Any]:
    try:
        return SqliteLedger().create(payload.model_dump())
    except sqlite3.Error:
        logger.exception("[TRANSACTIONS] Create failed")
        raise HTTPException(status_code=500, detail="Failed to create transaction")


@router.put("/api/transactions/{txn_id}")
def update_transaction(txn_id: int, payload: TransactionPatch) -> Dict[str, Any]:
    changes = payload.model_dump(exclude_unset=True)
    # Only notes may be cleared explicitly
    changes = {k: v for k, v in changes.items() if v is not None or k == "notes"}
    ledger = SqliteLedger()
    try:
        if ledger.get(txn_id) is None:
            raise _not_found()
        updated = ledger.update(txn_id, changes)
    except sqlite3.Error:
        logger.exception(f"[TRANSACTIONS] Update failed for id={txn_id}")
        raise HTTPException(status_code=500, detail="Failed to update transaction")
    if updated is None:
        raise _not_found()
    return updated


@router.delete("/api/transactions/{txn_id}")
def delete_transaction(txn_id: int) -> Dict[str, Any]:
    try:
        deleted = SqliteLedger().delete(txn_id)
    except sqlite3.Error:
        logger.exception(f"[TRANSACTIONS] Delete failed for id={txn_id}")
        raise HTTPException(status_code=500, detail="Failed to delete transaction")
    if not deleted:
        raise _not_found()
    return {"status": "deleted", "id": txn_id}
