"""
Sales and catalog query selector.

Read-only access to sale lines and catalog products.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from resale_kernel.domain.records import Product, SaleLine
from resale_kernel.models.product import ProductModel
from resale_kernel.models.sales import SaleLineModel
from resale_kernel.selectors.base import BaseSelector


class SalesSelector(BaseSelector[SaleLineModel]):
    """Selector for sale lines and products."""

    def __init__(self, session: Session):
        super().__init__(session)

    def all_sales(self) -> list[SaleLine]:
        stmt = select(SaleLineModel).order_by(
            SaleLineModel.sale_date, SaleLineModel.created_at, SaleLineModel.id
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def sales_for_sku(self, sku: str) -> list[SaleLine]:
        stmt = (
            select(SaleLineModel)
            .where(SaleLineModel.sku == sku)
            .order_by(SaleLineModel.sale_date, SaleLineModel.created_at, SaleLineModel.id)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def product(self, sku: str) -> Product | None:
        stmt = select(ProductModel).where(ProductModel.sku == sku)
        model = self.session.scalars(stmt).one_or_none()
        return model.to_dto() if model is not None else None

    def all_products(self) -> list[Product]:
        stmt = select(ProductModel).order_by(ProductModel.sku)
        return [m.to_dto() for m in self.session.scalars(stmt)]
