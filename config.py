"""
Global configuration for the Daily Budget service.

Runtime settings come from the environment (a `.env` file is loaded at app
start); the constants below are API policy shared by the routers and the CLI.
"""

import os
from pathlib import Path

# Subpath when served behind a reverse proxy (e.g. '/daily-budget'); '' for root.
BASE_PATH = os.getenv("BASE_PATH", "")

DEFAULT_DB_PATH = Path("localdb/budget.db")


def default_db_path() -> Path:
    # Allow override via env var to support tests
    env = os.getenv("BUDGET_DB_PATH")
    if env:
        return Path(env)
    return DEFAULT_DB_PATH


# Accepted year range on budget endpoints
MIN_YEAR = 2000
MAX_YEAR = 3000

# Months-back bounds for analytics endpoints
TRENDS_DEFAULT_MONTHS = 12
TRENDS_MAX_MONTHS = 60
COMPARISON_DEFAULT_MONTHS = 6
COMPARISON_MAX_MONTHS = 24
CATEGORY_TRENDS_DEFAULT_MONTHS = 6

# Transactions
TRANSACTION_TYPES = ("income", "expense")
PRIORITIES = ("low", "medium", "high", "maximum", "target")
TRANSACTIONS_PAGE_DEFAULT = 50
TRANSACTIONS_PAGE_MAX = 1000
