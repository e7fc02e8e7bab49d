"""
Pure domain layer.

Value objects and record snapshots with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

Time is only read through an injected Clock.
"""

from resale_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from resale_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from resale_kernel.domain.records import (
    LogisticsShipment,
    OrderInvoiceTotal,
    Product,
    PurchaseLine,
    SaleLine,
)
from resale_kernel.domain.values import Currency, Money

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Currency",
    "Money",
    "PurchaseLine",
    "OrderInvoiceTotal",
    "LogisticsShipment",
    "SaleLine",
    "Product",
]
