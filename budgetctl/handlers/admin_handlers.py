from __future__ import annotations

import sqlite3
from pathlib import Path

from db.migrate import reset_database, run_migrations


def db_migrate(db_path: Path) -> int:
    try:
        applied = run_migrations(db_path)
    except sqlite3.Error as e:
        print(f"[error] Migration failed: {e}")
        return 1
    if applied:
        print("Applied migrations:", ", ".join(applied))
    else:
        print("No pending migrations.")
    return 0


def db_reset(db_path: Path, *, force: bool = False) -> int:
    """Drop every transaction, reserve and adjustment by recreating the DB file.

    An existing file is only deleted with `force=True`; otherwise exit code 3.
    """
    if db_path.exists() and not force:
        print(f"[abort] DB exists at {db_path}. Re-run with --force to delete and reset.")
        return 3
    try:
        applied = reset_database(db_path)
    except (OSError, sqlite3.Error) as e:
        print(f"[error] Reset failed for {db_path}: {e}")
        return 1
    print(f"[reset] Schema initialized at {db_path}. Applied: {', '.join(applied) or 'none'}")
    return 0
