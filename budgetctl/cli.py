import argparse
import sys
from pathlib import Path

from config import default_db_path

from .handlers import admin_handlers, budget_handlers


def _add_common_db_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db",
        type=Path,
        default=default_db_path(),
        help="Path to SQLite DB (default: $BUDGET_DB_PATH or localdb/budget.db)",
    )

def _add_month_args(parser: argparse.ArgumentParser, *, required: bool = False) -> None:
    parser.add_argument("--month", type=int, required=required, help="Month 1-12 (default: current)")
    parser.add_argument("--year", type=int, required=required, help="Year (default: current)")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="budgetctl", description="Daily Budget ops CLI")
    subparsers = parser.add_subparsers(dest="command")

    # db group
    db_parser = subparsers.add_parser("db", help="Database utilities")
    db_sub = db_parser.add_subparsers(dest="db_command")
    migrate_parser = db_sub.add_parser("migrate", help="Run DB migrations")
    _add_common_db_arg(migrate_parser)

    reset_parser = db_sub.add_parser("reset", help="Purge the DB file and re-create the schema")
    _add_common_db_arg(reset_parser)
    reset_parser.add_argument(
        "--force",
        action="store_true",
        help="Do not prompt; proceed with destructive reset",
    )

    # budget group
    budget_parser = subparsers.add_parser("budget", help="Budget calculations")
    budget_sub = budget_parser.add_subparsers(dest="budget_command")

    monthly_parser = budget_sub.add_parser("monthly", help="Print the month's budget snapshot")
    _add_month_args(monthly_parser)
    _add_common_db_arg(monthly_parser)

    daily_parser = budget_sub.add_parser("daily", help="Print today's limit with pace correction")
    _add_month_args(daily_parser)
    _add_common_db_arg(daily_parser)

    adjust_parser = budget_sub.add_parser("adjust", help="Set the manual daily adjustment for a month")
    _add_month_args(adjust_parser, required=True)
    adjust_parser.add_argument("--amount", type=float, required=True, help="Signed daily adjustment")
    _add_common_db_arg(adjust_parser)

    return parser

def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "db" and args.db_command == "migrate":
        return admin_handlers.db_migrate(args.db)

    if args.command == "db" and args.db_command == "reset":
        return admin_handlers.db_reset(args.db, force=args.force)

    if args.command == "budget" and args.budget_command == "monthly":
        return budget_handlers.show_monthly(args.db, month=args.month, year=args.year)

    if args.command == "budget" and args.budget_command == "daily":
        return budget_handlers.show_daily(args.db, month=args.month, year=args.year)

    if args.command == "budget" and args.budget_command == "adjust":
        return budget_handlers.adjust(args.db, month=args.month, year=args.year, amount=args.amount)

    parser.print_help()
    return 1

if __name__ == "__main__":
    raise SystemExit(main())
