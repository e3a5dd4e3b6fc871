from __future__ import annotations

import logging
import math

from budget.dates import check_month
from budget.ports import AdjustmentStore, InvalidArgument


logger = logging.getLogger(__name__)


def set_manual_adjustment(store: AdjustmentStore, month: int, year: int, amount: float) -> None:
    """Set the manual daily adjustment for (month, year).

    Any finite amount is accepted: positive loosens the daily limit, negative
    tightens it. The store replaces an existing row or creates it.
    """
    check_month(month)
    amount = float(amount)
    if not math.isfinite(amount):
        raise InvalidArgument(f"adjustment must be a finite number, got {amount!r}")
    store.upsert_adjustment(month, year, amount)
    logger.info("manual daily adjustment for %04d-%02d set to %s", year, month, amount)
