"""
Purchase query selector.

Read-only access to purchase lines and order invoice totals.  Every list
query is ordered by purchase date, then creation time, then id, so the
"last line" of an order is stable between calls.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from resale_kernel.domain.records import OrderInvoiceTotal, PurchaseLine
from resale_kernel.models.purchase import OrderInvoiceTotalModel, PurchaseLineModel
from resale_kernel.selectors.base import BaseSelector

_LINE_ORDER = (
    PurchaseLineModel.purchase_date,
    PurchaseLineModel.created_at,
    PurchaseLineModel.id,
)


class PurchaseSelector(BaseSelector[PurchaseLineModel]):
    """Selector for purchase lines and order totals."""

    def __init__(self, session: Session):
        super().__init__(session)

    def all_lines(self) -> list[PurchaseLine]:
        stmt = select(PurchaseLineModel).order_by(*_LINE_ORDER)
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def lines_for_order(self, order_number: str) -> list[PurchaseLine]:
        stmt = (
            select(PurchaseLineModel)
            .where(PurchaseLineModel.order_number == order_number)
            .order_by(*_LINE_ORDER)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def lines_for_sku(self, sku: str) -> list[PurchaseLine]:
        stmt = (
            select(PurchaseLineModel)
            .where(PurchaseLineModel.sku == sku)
            .order_by(*_LINE_ORDER)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def lines_for_tracking(self, tracking_code: str) -> list[PurchaseLine]:
        """Lines whose PY tracking code equals ``tracking_code``."""
        stmt = (
            select(PurchaseLineModel)
            .where(PurchaseLineModel.tracking_py == tracking_code)
            .order_by(*_LINE_ORDER)
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def order_total(self, order_number: str) -> OrderInvoiceTotal | None:
        stmt = select(OrderInvoiceTotalModel).where(
            OrderInvoiceTotalModel.order_number == order_number
        )
        model = self.session.scalars(stmt).one_or_none()
        return model.to_dto() if model is not None else None

    def all_order_totals(self) -> dict[str, OrderInvoiceTotal]:
        stmt = select(OrderInvoiceTotalModel)
        return {m.order_number: m.to_dto() for m in self.session.scalars(stmt)}
