from __future__ import annotations

import json
from datetime import date
from pathlib import Path

from budgetctl.cli import main
from localdb.store import SqliteAdjustments, SqliteLedger


def test_db_migrate_then_noop(tmp_path: Path, capsys):
    db = tmp_path / "budget.db"
    assert main(["db", "migrate", "--db", str(db)]) == 0
    assert "0001_init.sql" in capsys.readouterr().out
    assert main(["db", "migrate", "--db", str(db)]) == 0
    assert "No pending migrations." in capsys.readouterr().out


def test_db_reset_requires_force(tmp_path: Path, capsys):
    db = tmp_path / "budget.db"
    main(["db", "migrate", "--db", str(db)])
    SqliteLedger(db).create(
        {"type": "expense", "category": "Food", "amount": 5, "description": "Tea", "date": date(2025, 1, 2)}
    )

    assert main(["db", "reset", "--db", str(db)]) == 3
    assert SqliteLedger(db).list()["total"] == 1

    assert main(["db", "reset", "--db", str(db), "--force"]) == 0
    assert SqliteLedger(db).list()["total"] == 0
    assert "[reset]" in capsys.readouterr().out


def test_budget_adjust_and_monthly(tmp_path: Path, capsys):
    db = tmp_path / "budget.db"

    assert main(["budget", "adjust", "--db", str(db), "--month", "3", "--year", "2020", "--amount", "25"]) == 0
    out = capsys.readouterr().out
    assert "[adjust] 2020-03 manual daily adjustment = 25.0" in out
    assert SqliteAdjustments(db).get_adjustment(3, 2020) == 25

    assert main(["budget", "monthly", "--db", str(db), "--month", "3", "--year", "2020"]) == 0
    snapshot = json.loads(capsys.readouterr().out)
    assert snapshot["month"] == 3
    # Past month: no days left, limit is the manual adjustment alone
    assert snapshot["days_left_in_month"] == 0
    assert snapshot["adjusted_daily_limit"] == 25


def test_budget_daily_prints_json(tmp_path: Path, capsys):
    db = tmp_path / "budget.db"
    assert main(["budget", "daily", "--db", str(db)]) == 0
    daily = json.loads(capsys.readouterr().out)
    assert daily["is_current_month"] is True
    assert daily["final_daily_limit"] >= 0


def test_invalid_month_exit_code(tmp_path: Path, capsys):
    db = tmp_path / "budget.db"
    assert main(["budget", "monthly", "--db", str(db), "--month", "13", "--year", "2025"]) == 2
    assert "[error]" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "budgetctl" in capsys.readouterr().out


def test_db_path_defaults_to_env(tmp_path: Path, monkeypatch, capsys):
    db = tmp_path / "from-env.db"
    monkeypatch.setenv("BUDGET_DB_PATH", str(db))

    assert main(["budget", "adjust", "--month", "4", "--year", "2021", "--amount", "12"]) == 0
    assert SqliteAdjustments(db).get_adjustment(4, 2021) == 12


def test_non_finite_adjustment_exit_code(tmp_path: Path, capsys):
    db = tmp_path / "budget.db"
    assert main(["budget", "adjust", "--db", str(db), "--month", "4", "--year", "2021", "--amount", "inf"]) == 2
    assert "[error]" in capsys.readouterr().out
    assert SqliteAdjustments(db).get_adjustment(4, 2021) == 0.0
