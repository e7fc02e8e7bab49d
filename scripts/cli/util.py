"""Display formatting and stderr log muting for the admin CLI."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal

_SILENT = logging.CRITICAL + 1


def fmt_amount(v, symbol: str = "G$", places: int = 0) -> str:
    """``G$1,234`` / ``US$12.50``; ``-`` for a missing value."""
    if v is None:
        return "-"
    return f"{symbol}{Decimal(str(v)):,.{places}f}"


def fmt_money(money) -> str:
    return fmt_amount(money.amount, money.currency.symbol, money.currency.decimal_places)


@contextmanager
def quiet_logging(enabled: bool = True) -> Iterator[None]:
    """Silence the kernel's console handlers inside the block (file handlers keep writing)."""
    saved: list[tuple[logging.Handler, int]] = []
    if enabled:
        for handler in logging.getLogger("resale_kernel").handlers:
            if type(handler) is logging.StreamHandler:
                saved.append((handler, handler.level))
                handler.setLevel(_SILENT)
    try:
        yield
    finally:
        for handler, level in saved:
            handler.setLevel(level)
