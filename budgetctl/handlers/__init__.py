from .admin_handlers import db_migrate, db_reset
from .budget_handlers import show_monthly, show_daily, adjust

__all__ = [
    "db_migrate",
    "db_reset",
    "show_monthly",
    "show_daily",
    "adjust",
]
