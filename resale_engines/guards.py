"""
Input guards -- structural validation at the engine boundary.

Every engine re-validates the records it is handed, even when the caller
already did: a negative quantity, weight or price would otherwise flow
silently into landed costs.  Missing reference data is NOT checked here;
it resolves to zero inside the engines.  Natural keys (``require_key``) are
checked at registration only; the engines price whatever key a stored
record carries.

All guards raise ``InvalidRecordError`` and log ``engine_input_rejected``
before raising.
"""

from __future__ import annotations

from decimal import Decimal

from resale_kernel.domain.records import (
    LogisticsShipment,
    OrderInvoiceTotal,
    Product,
    PurchaseLine,
    SaleLine,
)
from resale_kernel.exceptions import InvalidRecordError
from resale_kernel.logging_config import get_logger

logger = get_logger("engines.guards")


def _reject(record_type: str, field: str, value, reason: str) -> None:
    logger.error("engine_input_rejected", extra={
        "record_type": record_type,
        "field": field,
        "value": str(value),
        "reason": reason,
    })
    raise InvalidRecordError(record_type, field, value, reason)


def require_non_negative(record_type: str, field: str, value: Decimal | int | None) -> None:
    """Reject negative or non-finite numbers. ``None`` (missing) is allowed."""
    if value is None:
        return
    if isinstance(value, float):
        _reject(record_type, field, value, "float values are not accepted")
    if isinstance(value, Decimal) and not value.is_finite():
        _reject(record_type, field, value, "must be a finite number")
    if value < 0:
        _reject(record_type, field, value, "cannot be negative")


def require_key(record_type: str, field: str, value: str | None) -> None:
    """Reject a missing or blank natural key. Used when a record is registered."""
    if not isinstance(value, str) or not value.strip():
        _reject(record_type, field, value, "is required")


def validate_purchase_line(line: PurchaseLine) -> None:
    for field in (
        "quantity_acquired",
        "units_per_package",
        "unit_cost",
        "exchange_rate",
        "weight_kg",
    ):
        require_non_negative("PurchaseLine", field, getattr(line, field))


def validate_order_total(order_total: OrderInvoiceTotal) -> None:
    require_non_negative("OrderInvoiceTotal", "invoiced_total", order_total.invoiced_total)


def validate_shipment(shipment: LogisticsShipment) -> None:
    require_non_negative(
        "LogisticsShipment", "total_retrieval_cost", shipment.total_retrieval_cost
    )


def validate_sale_line(sale: SaleLine) -> None:
    require_non_negative("SaleLine", "quantity_sold", sale.quantity_sold)


def validate_product(product: Product) -> None:
    require_non_negative("Product", "list_price", product.list_price)
