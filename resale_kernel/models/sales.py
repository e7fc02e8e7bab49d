"""
Module: resale_kernel.models.sales
Responsibility: ORM persistence for sale lines.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/records.py only.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from resale_kernel.db.base import TrackedBase
from resale_kernel.domain.records import SaleLine


class SaleLineModel(TrackedBase):
    __tablename__ = "sale_lines"

    __table_args__ = (
        Index("idx_sale_line_sku", "sku"),
        Index("idx_sale_line_date", "sale_date"),
    )

    sku: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity_sold: Mapped[int] = mapped_column(nullable=False)
    sale_date: Mapped[date] = mapped_column(Date, nullable=False)
    customer: Mapped[str] = mapped_column(String(200), nullable=False)
    receipt_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Derived
    sale_key: Mapped[str | None] = mapped_column(String(32), nullable=True)
    unit_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    sale_total: Mapped[Decimal | None] = mapped_column(nullable=True)

    def to_dto(self) -> SaleLine:
        return SaleLine(
            sku=self.sku,
            quantity_sold=self.quantity_sold,
            sale_date=self.sale_date,
            customer=self.customer,
            receipt_number=self.receipt_number,
            notes=self.notes,
            record_id=self.id,
            sale_key=self.sale_key,
            unit_price=self.unit_price,
            sale_total=self.sale_total,
        )

    @classmethod
    def from_dto(cls, dto: SaleLine) -> SaleLineModel:
        model = cls(
            sku=dto.sku,
            quantity_sold=dto.quantity_sold,
            sale_date=dto.sale_date,
            customer=dto.customer,
            receipt_number=dto.receipt_number,
            notes=dto.notes,
            sale_key=dto.sale_key,
            unit_price=dto.unit_price,
            sale_total=dto.sale_total,
        )
        if dto.record_id is not None:
            model.id = dto.record_id
        return model

    def __repr__(self) -> str:
        return f"<SaleLine {self.sale_key}: sku={self.sku} qty={self.quantity_sold}>"
