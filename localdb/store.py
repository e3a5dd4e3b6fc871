"""SQLite-backed ledger, reserves and budget settings.

The three classes implement the budget engine ports and also carry the CRUD
used by the HTTP routers. Every call opens its own short-lived connection.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from config import default_db_path


TRANSACTION_COLUMNS = ("type", "category", "amount", "description", "priority", "date", "notes")
RESERVE_COLUMNS = ("name", "target_amount", "current_amount", "purpose")


@contextmanager
def _connect(db_path: Path) -> Iterator[sqlite3.Connection]:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        with conn:
            yield conn
    finally:
        conn.close()


def _now() -> str:
    return datetime.utcnow().isoformat(timespec="seconds") + "Z"


def _iso(d: date | str) -> str:
    return d.isoformat() if isinstance(d, date) else str(d)


def _transaction_row(r: sqlite3.Row) -> Dict[str, Any]:
    return {
        "id": int(r["id"]),
        "type": r["type"],
        "category": r["category"],
        "amount": float(r["amount"]),
        "description": r["description"],
        "priority": r["priority"],
        "date": r["date"],
        "notes": r["notes"],
        "created_at": r["created_at"],
        "updated_at": r["updated_at"],
    }


def _reserve_row(r: sqlite3.Row) -> Dict[str, Any]:
    target = float(r["target_amount"])
    current = float(r["current_amount"])
    return {
        "id": int(r["id"]),
        "name": r["name"],
        "target_amount": target,
        "current_amount": current,
        "purpose": r["purpose"],
        "completion_percentage": min(100.0, current / target * 100) if target > 0 else 0.0,
        "remaining_amount": max(0.0, target - current),
        "created_at": r["created_at"],
        "updated_at": r["updated_at"],
    }


class SqliteLedger:
    """Transactions table; implements `budget.ports.LedgerQuery`."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = db_path or default_db_path()

    # --- ledger port ---

    def total_by_type(
        self,
        type_: str,
        start: date,
        end: date,
        *,
        category: Optional[str] = None,
    ) -> float:
        sql = "SELECT COALESCE(SUM(amount), 0) AS total FROM transactions WHERE type = ? AND date >= ? AND date <= ?"
        params: list[Any] = [type_, _iso(start), _iso(end)]
        if category is not None:
            sql += " AND category = ?"
            params.append(category)
        with _connect(self.db_path) as conn:
            row = conn.execute(sql, params).fetchone()
        return float(row["total"] or 0.0)

    def list_between(self, start: date, end: date) -> List[Dict[str, Any]]:
        with _connect(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT * FROM transactions
                WHERE date >= ? AND date <= ?
                ORDER BY date DESC, created_at DESC, id DESC
                """,
                (_iso(start), _iso(end)),
            ).fetchall()
        return [_transaction_row(r) for r in rows]

    # --- CRUD ---

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = _now()
        with _connect(self.db_path) as conn:
            cur = conn.execute(
                """
                INSERT INTO transactions(type, category, amount, description, priority, date, notes, created_at, updated_at)
                VALUES (?,?,?,?,?,?,?,?,?)
                """,
                (
                    data["type"],
                    data["category"],
                    float(data["amount"]),
                    data["description"],
                    data.get("priority") or "medium",
                    _iso(data["date"]),
                    data.get("notes"),
                    now,
                    now,
                ),
            )
            txn_id = int(cur.lastrowid)
        found = self.get(txn_id)
        assert found is not None
        return found

    def get(self, txn_id: int) -> Optional[Dict[str, Any]]:
        with _connect(self.db_path) as conn:
            row = conn.execute("SELECT * FROM transactions WHERE id = ?", (txn_id,)).fetchone()
        return _transaction_row(row) if row else None

    def list(
        self,
        *,
        type_: Optional[str] = None,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Dict[str, Any]:
        where = ["1=1"]
        params: list[Any] = []
        if type_:
            where.append("type = ?")
            params.append(type_)
        if category:
            where.append("category = ?")
            params.append(category)
        if priority:
            where.append("priority = ?")
            params.append(priority)
        if date_from:
            where.append("date >= ?")
            params.append(_iso(date_from))
        if date_to:
            where.append("date <= ?")
            params.append(_iso(date_to))
        if search:
            where.append("(LOWER(description) LIKE ? OR LOWER(notes) LIKE ? OR LOWER(category) LIKE ?)")
            needle = f"%{search.lower()}%"
            params.extend([needle, needle, needle])

        clause = " AND ".join(where)
        with _connect(self.db_path) as conn:
            total = conn.execute(f"SELECT COUNT(*) FROM transactions WHERE {clause}", params).fetchone()[0]
            rows = conn.execute(
                f"""
                SELECT * FROM transactions
                WHERE {clause}
                ORDER BY date DESC, created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                params + [int(limit), int(offset)],
            ).fetchall()

        return {
            "items": [_transaction_row(r) for r in rows],
            "total": int(total),
            "limit": int(limit),
            "offset": int(offset),
            "has_more": offset + limit < total,
        }

    def update(self, txn_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        sets = []
        params: list[Any] = []
        for col in TRANSACTION_COLUMNS:
            if col in changes:
                sets.append(f"{col} = ?")
                params.append(_iso(changes[col]) if col == "date" else changes[col])
        if sets:
            sets.append("updated_at = ?")
            params.extend([_now(), txn_id])
            with _connect(self.db_path) as conn:
                conn.execute(f"UPDATE transactions SET {', '.join(sets)} WHERE id = ?", params)
        return self.get(txn_id)

    def delete(self, txn_id: int) -> bool:
        with _connect(self.db_path) as conn:
            cur = conn.execute("DELETE FROM transactions WHERE id = ?", (txn_id,))
            return cur.rowcount > 0


class SqliteReserves:
    """Reserves table; implements `budget.ports.ReserveQuery`."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = db_path or default_db_path()

    def total_current_amount(self) -> float:
        with _connect(self.db_path) as conn:
            row = conn.execute("SELECT COALESCE(SUM(current_amount), 0) AS total FROM reserves").fetchone()
        return float(row["total"] or 0.0)

    def total_target_amount(self) -> float:
        with _connect(self.db_path) as conn:
            row = conn.execute("SELECT COALESCE(SUM(target_amount), 0) AS total FROM reserves").fetchone()
        return float(row["total"] or 0.0)

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = _now()
        with _connect(self.db_path) as conn:
            cur = conn.execute(
                """
                INSERT INTO reserves(name, target_amount, current_amount, purpose, created_at, updated_at)
                VALUES (?,?,?,?,?,?)
                """,
                (
                    data["name"],
                    float(data["target_amount"]),
                    float(data.get("current_amount") or 0.0),
                    data.get("purpose"),
                    now,
                    now,
                ),
            )
            reserve_id = int(cur.lastrowid)
        found = self.get(reserve_id)
        assert found is not None
        return found

    def get(self, reserve_id: int) -> Optional[Dict[str, Any]]:
        with _connect(self.db_path) as conn:
            row = conn.execute("SELECT * FROM reserves WHERE id = ?", (reserve_id,)).fetchone()
        return _reserve_row(row) if row else None

    def list(self) -> List[Dict[str, Any]]:
        with _connect(self.db_path) as conn:
            rows = conn.execute("SELECT * FROM reserves ORDER BY created_at DESC, id DESC").fetchall()
        return [_reserve_row(r) for r in rows]

    def update(self, reserve_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        sets = []
        params: list[Any] = []
        for col in RESERVE_COLUMNS:
            if col in changes:
                sets.append(f"{col} = ?")
                params.append(changes[col])
        if sets:
            sets.append("updated_at = ?")
            params.extend([_now(), reserve_id])
            with _connect(self.db_path) as conn:
                conn.execute(f"UPDATE reserves SET {', '.join(sets)} WHERE id = ?", params)
        return self.get(reserve_id)

    def delete(self, reserve_id: int) -> bool:
        with _connect(self.db_path) as conn:
            cur = conn.execute("DELETE FROM reserves WHERE id = ?", (reserve_id,))
            return cur.rowcount > 0

    def add_amount(self, reserve_id: int, amount: float) -> Optional[Dict[str, Any]]:
        with _connect(self.db_path) as conn:
            conn.execute(
                "UPDATE reserves SET current_amount = current_amount + ?, updated_at = ? WHERE id = ?",
                (float(amount), _now(), reserve_id),
            )
        return self.get(reserve_id)

    def subtract_amount(self, reserve_id: int, amount: float) -> Optional[Dict[str, Any]]:
        # Never below zero
        with _connect(self.db_path) as conn:
            conn.execute(
                "UPDATE reserves SET current_amount = MAX(0, current_amount - ?), updated_at = ? WHERE id = ?",
                (float(amount), _now(), reserve_id),
            )
        return self.get(reserve_id)

    def summary(self) -> Dict[str, Any]:
        reserves = self.list()
        total_current = sum(r["current_amount"] for r in reserves)
        total_target = sum(r["target_amount"] for r in reserves)
        return {
            "total_reserves": len(reserves),
            "total_current_amount": total_current,
            "total_target_amount": total_target,
            "total_remaining_amount": max(0.0, total_target - total_current),
            "overall_completion_percentage": min(100.0, total_current / total_target * 100) if total_target > 0 else 0.0,
            "fully_funded_reserves": sum(1 for r in reserves if r["current_amount"] >= r["target_amount"]),
            "partially_funded_reserves": sum(
                1 for r in reserves if 0 < r["current_amount"] < r["target_amount"]
            ),
            "empty_reserves": sum(1 for r in reserves if r["current_amount"] == 0),
        }


class SqliteAdjustments:
    """budget_settings table; implements `budget.ports.AdjustmentStore`."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = db_path or default_db_path()

    def get_adjustment(self, month: int, year: int) -> float:
        with _connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT manual_daily_adjustment FROM budget_settings WHERE month = ? AND year = ?",
                (month, year),
            ).fetchone()
        return float(row["manual_daily_adjustment"]) if row else 0.0

    def upsert_adjustment(self, month: int, year: int, amount: float) -> None:
        now = _now()
        with _connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO budget_settings(month, year, manual_daily_adjustment, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(month, year) DO UPDATE SET
                    manual_daily_adjustment = excluded.manual_daily_adjustment,
                    updated_at = excluded.updated_at
                """,
                (month, year, float(amount), now, now),
            )

    def count(self, month: int, year: int) -> int:
        with _connect(self.db_path) as conn:
            return int(
                conn.execute(
                    "SELECT COUNT(*) FROM budget_settings WHERE month = ? AND year = ?",
                    (month, year),
                ).fetchone()[0]
            )
