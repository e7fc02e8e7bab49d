"""
Record snapshots (``resale_kernel.domain.records``).

Responsibility
--------------
Frozen value objects for the nouns the engines read: purchase lines, order
invoice totals, logistics shipments, sale lines and catalog products.
Each carries its user-entered fields plus the derived fields the engines
compute (``None`` until computed).

Architecture
------------
Layer: **Kernel > Domain** -- pure data structures, no I/O.  ORM models in
``resale_kernel.models`` convert to and from these via ``to_dto`` /
``from_dto``.

Invariants
----------
- Monetary fields are ``Decimal``; counts are ``int``.
- Records are snapshots owned by the store; they do not validate their own
  numbers.  Structural validation is done by ``resale_engines.guards`` at
  the engine boundary.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class PurchaseLine:
    """
    One purchase lot: a quantity of a SKU bought on an order.

    User-entered: everything up to ``tracking_py``.
    Derived: ``line_key`` onwards, attached by the landed-cost calculator.
    """
    order_number: str
    sku: str
    purchase_date: date
    supplier: str
    quantity_acquired: int
    units_per_package: int
    unit_cost: Decimal  # source currency
    exchange_rate: Decimal  # source -> local, fixed at purchase time
    weight_kg: Decimal
    tracking_us: str | None = None
    tracking_py: str | None = None
    # derived
    record_id: UUID | None = None
    line_key: str | None = None
    total_units: int | None = None
    lot_cost_source: Decimal | None = None
    lot_cost_local: Decimal | None = None
    extra_cost_share: Decimal | None = None
    shipment_cost_share: Decimal | None = None

    @property
    def is_priced(self) -> bool:
        return self.lot_cost_source is not None


@dataclass(frozen=True)
class OrderInvoiceTotal:
    """Total invoiced amount (source currency) for one order number."""
    order_number: str
    invoiced_total: Decimal
    record_id: UUID | None = None


@dataclass(frozen=True)
class LogisticsShipment:
    """
    A local retrieval of one tracked shipment.

    ``aggregate_weight`` and ``distribution_factor`` (local currency per kg)
    are derived by the logistics distribution calculator.
    """
    tracking_code: str
    retrieval_date: date
    total_retrieval_cost: Decimal  # local currency
    record_id: UUID | None = None
    shipment_key: str | None = None
    aggregate_weight: Decimal | None = None
    distribution_factor: Decimal | None = None


@dataclass(frozen=True)
class SaleLine:
    """A sale of some units of one SKU to a customer."""
    sku: str
    quantity_sold: int
    sale_date: date
    customer: str
    receipt_number: str | None = None
    notes: str | None = None
    # derived
    record_id: UUID | None = None
    sale_key: str | None = None
    unit_price: Decimal | None = None  # local currency
    sale_total: Decimal | None = None  # local currency


@dataclass(frozen=True)
class Product:
    """
    Catalog entry.

    ``stock`` and ``average_cost`` are display copies of the inventory
    valuation; the caller writes them back after revaluing.
    """
    sku: str
    name: str
    list_price: Decimal  # local currency
    is_visible: bool = True
    record_id: UUID | None = None
    stock: int | None = None
    average_cost: Decimal | None = None  # local currency per unit
