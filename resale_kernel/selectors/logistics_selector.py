"""
Logistics query selector.

Read-only access to logistics shipments, keyed by PY tracking code.
"""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from resale_kernel.domain.records import LogisticsShipment
from resale_kernel.models.logistics import LogisticsShipmentModel
from resale_kernel.selectors.base import BaseSelector


class LogisticsSelector(BaseSelector[LogisticsShipmentModel]):
    """Selector for logistics shipments."""

    def __init__(self, session: Session):
        super().__init__(session)

    def by_tracking(self, tracking_code: str) -> LogisticsShipment | None:
        stmt = select(LogisticsShipmentModel).where(
            LogisticsShipmentModel.tracking_code == tracking_code
        )
        model = self.session.scalars(stmt).one_or_none()
        return model.to_dto() if model is not None else None

    def all_shipments(self) -> list[LogisticsShipment]:
        stmt = select(LogisticsShipmentModel).order_by(
            LogisticsShipmentModel.retrieval_date,
            LogisticsShipmentModel.tracking_code,
        )
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def distribution_factors(self) -> dict[str, Decimal]:
        """Tracking code -> stored factor, for shipments already distributed."""
        return {
            s.tracking_code: s.distribution_factor
            for s in self.all_shipments()
            if s.distribution_factor is not None
        }
