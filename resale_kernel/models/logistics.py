"""
Module: resale_kernel.models.logistics
Responsibility: ORM persistence for logistics retrievals (one row per PY
    tracking code).
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/records.py only.

Invariants enforced:
    - ``tracking_code`` is unique; re-registering a shipment updates the
      row in place.
    - ``aggregate_weight`` and ``distribution_factor`` are derived and are
      overwritten on every recomputation.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from resale_kernel.db.base import TrackedBase
from resale_kernel.domain.records import LogisticsShipment


class LogisticsShipmentModel(TrackedBase):
    __tablename__ = "logistics_shipments"

    __table_args__ = (
        UniqueConstraint("tracking_code", name="uq_logistics_shipment_tracking"),
    )

    tracking_code: Mapped[str] = mapped_column(String(100), nullable=False)
    retrieval_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_retrieval_cost: Mapped[Decimal] = mapped_column(nullable=False)

    # Derived
    shipment_key: Mapped[str | None] = mapped_column(String(32), nullable=True)
    aggregate_weight: Mapped[Decimal | None] = mapped_column(nullable=True)
    distribution_factor: Mapped[Decimal | None] = mapped_column(nullable=True)

    def to_dto(self) -> LogisticsShipment:
        return LogisticsShipment(
            tracking_code=self.tracking_code,
            retrieval_date=self.retrieval_date,
            total_retrieval_cost=self.total_retrieval_cost,
            record_id=self.id,
            shipment_key=self.shipment_key,
            aggregate_weight=self.aggregate_weight,
            distribution_factor=self.distribution_factor,
        )

    @classmethod
    def from_dto(cls, dto: LogisticsShipment) -> LogisticsShipmentModel:
        model = cls(tracking_code=dto.tracking_code)
        if dto.record_id is not None:
            model.id = dto.record_id
        model.update_from_dto(dto)
        return model

    def update_from_dto(self, dto: LogisticsShipment) -> None:
        """Overwrite every column except the natural key and id."""
        self.retrieval_date = dto.retrieval_date
        self.total_retrieval_cost = dto.total_retrieval_cost
        self.shipment_key = dto.shipment_key
        self.aggregate_weight = dto.aggregate_weight
        self.distribution_factor = dto.distribution_factor

    def __repr__(self) -> str:
        return (
            f"<LogisticsShipment {self.tracking_code}: "
            f"cost={self.total_retrieval_cost} factor={self.distribution_factor}>"
        )
