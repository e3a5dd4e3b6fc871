"""Forward-only SQL migrations for the budget database.

Each `*.sql` file under `db/migrations` is applied once, in filename order,
and recorded in `schema_migrations`.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional


logger = logging.getLogger("uvicorn.error")

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def _ensure_schema_table(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            filename TEXT PRIMARY KEY,
            applied_at TEXT NOT NULL
        )
        """
    )


def _migration_files(migrations_dir: Path) -> List[Path]:
    if not migrations_dir.is_dir():
        return []
    return sorted(migrations_dir.glob("*.sql"))


def pending_migrations(conn: sqlite3.Connection, migrations_dir: Optional[Path] = None) -> List[Path]:
    _ensure_schema_table(conn)
    done = {row[0] for row in conn.execute("SELECT filename FROM schema_migrations")}
    return [p for p in _migration_files(migrations_dir or MIGRATIONS_DIR) if p.name not in done]


def run_migrations(db_path: Path, migrations_dir: Optional[Path] = None) -> List[str]:
    """Apply pending migrations to `db_path`, creating the file if needed.

    Safe to call on every startup. Returns the filenames applied by this call.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    applied: List[str] = []
    try:
        for sql_file in pending_migrations(conn, migrations_dir):
            # one transaction per file; a failing script leaves no record behind
            with conn:
                conn.executescript(sql_file.read_text(encoding="utf-8"))
                conn.execute(
                    "INSERT INTO schema_migrations(filename, applied_at) VALUES(?, ?)",
                    (sql_file.name, datetime.utcnow().isoformat(timespec="seconds") + "Z"),
                )
            logger.debug(f"[MIGRATIONS] {db_path}: applied {sql_file.name}")
            applied.append(sql_file.name)
    finally:
        conn.close()
    return applied


def reset_database(db_path: Path, migrations_dir: Optional[Path] = None) -> List[str]:
    """Delete the database file, if any, and rebuild the schema from scratch."""
    if db_path.exists():
        db_path.unlink()
        logger.warning(f"[MIGRATIONS] Deleted database {db_path}")
    return run_migrations(db_path, migrations_dir)
