"""
Module: resale_kernel.models.purchase
Responsibility: ORM persistence for purchase lines and per-order invoice
    totals.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/records.py only.

Invariants enforced:
    - ``purchase_lines.id`` is the engine-generated record_id; ``line_key``
      is the display alias and is NOT unique.
    - ``order_invoice_totals.order_number`` is unique: one invoiced total
      per order, written by upsert.

Failure modes:
    - IntegrityError on a second order_invoice_totals row for one order
      number (callers upsert through the service instead).
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from resale_kernel.db.base import TrackedBase
from resale_kernel.domain.records import OrderInvoiceTotal, PurchaseLine


class PurchaseLineModel(TrackedBase):
    """
    One purchased lot.

    Guarantees:
        - User-entered columns are NOT NULL except the two tracking codes.
        - Derived columns are NULL until the landed-cost calculator has run.
    """

    __tablename__ = "purchase_lines"

    __table_args__ = (
        Index("idx_purchase_line_order", "order_number"),
        Index("idx_purchase_line_sku", "sku"),
        Index("idx_purchase_line_tracking_py", "tracking_py"),
    )

    order_number: Mapped[str] = mapped_column(String(100), nullable=False)
    sku: Mapped[str] = mapped_column(String(100), nullable=False)
    purchase_date: Mapped[date] = mapped_column(Date, nullable=False)
    supplier: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity_acquired: Mapped[int] = mapped_column(nullable=False)
    units_per_package: Mapped[int] = mapped_column(nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(nullable=False)
    exchange_rate: Mapped[Decimal] = mapped_column(nullable=False)
    weight_kg: Mapped[Decimal] = mapped_column(nullable=False)
    tracking_us: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tracking_py: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Derived
    line_key: Mapped[str | None] = mapped_column(String(32), nullable=True)
    total_units: Mapped[int | None] = mapped_column(nullable=True)
    lot_cost_source: Mapped[Decimal | None] = mapped_column(nullable=True)
    lot_cost_local: Mapped[Decimal | None] = mapped_column(nullable=True)
    extra_cost_share: Mapped[Decimal | None] = mapped_column(nullable=True)
    shipment_cost_share: Mapped[Decimal | None] = mapped_column(nullable=True)

    def to_dto(self) -> PurchaseLine:
        return PurchaseLine(
            order_number=self.order_number,
            sku=self.sku,
            purchase_date=self.purchase_date,
            supplier=self.supplier,
            quantity_acquired=self.quantity_acquired,
            units_per_package=self.units_per_package,
            unit_cost=self.unit_cost,
            exchange_rate=self.exchange_rate,
            weight_kg=self.weight_kg,
            tracking_us=self.tracking_us,
            tracking_py=self.tracking_py,
            record_id=self.id,
            line_key=self.line_key,
            total_units=self.total_units,
            lot_cost_source=self.lot_cost_source,
            lot_cost_local=self.lot_cost_local,
            extra_cost_share=self.extra_cost_share,
            shipment_cost_share=self.shipment_cost_share,
        )

    @classmethod
    def from_dto(cls, dto: PurchaseLine) -> PurchaseLineModel:
        model = cls(
            order_number=dto.order_number,
            sku=dto.sku,
            purchase_date=dto.purchase_date,
            supplier=dto.supplier,
            quantity_acquired=dto.quantity_acquired,
            units_per_package=dto.units_per_package,
            unit_cost=dto.unit_cost,
            exchange_rate=dto.exchange_rate,
            weight_kg=dto.weight_kg,
            tracking_us=dto.tracking_us,
            tracking_py=dto.tracking_py,
        )
        if dto.record_id is not None:
            model.id = dto.record_id
        model.apply_derived(dto)
        return model

    def apply_derived(self, dto: PurchaseLine) -> None:
        """Overwrite the derived columns from a priced snapshot."""
        self.line_key = dto.line_key
        self.total_units = dto.total_units
        self.lot_cost_source = dto.lot_cost_source
        self.lot_cost_local = dto.lot_cost_local
        self.extra_cost_share = dto.extra_cost_share
        self.shipment_cost_share = dto.shipment_cost_share

    def __repr__(self) -> str:
        return (
            f"<PurchaseLine {self.line_key}: order={self.order_number} "
            f"sku={self.sku} qty={self.quantity_acquired}>"
        )


class OrderInvoiceTotalModel(TrackedBase):
    """Invoiced total (source currency) for one order number."""

    __tablename__ = "order_invoice_totals"

    __table_args__ = (
        UniqueConstraint("order_number", name="uq_order_invoice_total_order"),
    )

    order_number: Mapped[str] = mapped_column(String(100), nullable=False)
    invoiced_total: Mapped[Decimal] = mapped_column(nullable=False)

    def to_dto(self) -> OrderInvoiceTotal:
        return OrderInvoiceTotal(
            order_number=self.order_number,
            invoiced_total=self.invoiced_total,
            record_id=self.id,
        )

    @classmethod
    def from_dto(cls, dto: OrderInvoiceTotal) -> OrderInvoiceTotalModel:
        model = cls(order_number=dto.order_number, invoiced_total=dto.invoiced_total)
        if dto.record_id is not None:
            model.id = dto.record_id
        return model

    def __repr__(self) -> str:
        return f"<OrderInvoiceTotal {self.order_number}: {self.invoiced_total}>"
