"""
Module: resale_kernel.models.product
Responsibility: ORM persistence for catalog products.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/records.py only.

Invariants enforced:
    - ``sku`` is unique; products are written by upsert.
    - ``stock`` and ``average_cost`` are display copies of the last
      inventory valuation, NULL until the product is first revalued.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from resale_kernel.db.base import TrackedBase
from resale_kernel.domain.records import Product


class ProductModel(TrackedBase):
    __tablename__ = "products"

    __table_args__ = (
        UniqueConstraint("sku", name="uq_product_sku"),
    )

    sku: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    list_price: Mapped[Decimal] = mapped_column(nullable=False)
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Derived
    stock: Mapped[int | None] = mapped_column(nullable=True)
    average_cost: Mapped[Decimal | None] = mapped_column(nullable=True)

    def to_dto(self) -> Product:
        return Product(
            sku=self.sku,
            name=self.name,
            list_price=self.list_price,
            is_visible=self.is_visible,
            record_id=self.id,
            stock=self.stock,
            average_cost=self.average_cost,
        )

    @classmethod
    def from_dto(cls, dto: Product) -> ProductModel:
        model = cls(sku=dto.sku)
        if dto.record_id is not None:
            model.id = dto.record_id
        model.update_from_dto(dto)
        return model

    def update_from_dto(self, dto: Product) -> None:
        """Overwrite every column except the natural key and id."""
        self.name = dto.name
        self.list_price = dto.list_price
        self.is_visible = dto.is_visible
        self.stock = dto.stock
        self.average_cost = dto.average_cost

    def __repr__(self) -> str:
        return f"<Product {self.sku}: {self.name} stock={self.stock}>"
