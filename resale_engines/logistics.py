"""
Module: resale_engines.logistics
Responsibility:
    Derive a shipment's aggregate shipped weight and its distribution
    factor (local currency per kilogram) from the purchase-line history.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``distribution_factor = total_retrieval_cost / aggregate_weight`` when
      the weight is positive, else exactly ``0``; never NaN or infinity.
    - The factor is computed from the unrounded weight sum and then rounded
      to ``policy.factor_places``; the reported weight is rounded to
      ``policy.weight_places``.
    - Homogeneous in cost: doubling the retrieval cost doubles the
      unrounded factor.

Failure modes:
    - InvalidRecordError on a negative retrieval cost or a negative field in
      any contributing purchase line.
    - No error for a shipment with no purchase lines yet: it may be
      registered before its purchases, and yields a zero factor.

Usage:
    calculator = LogisticsDistributionCalculator()
    result = calculator.calculate(shipment=shipment, purchase_lines=all_lines)
    result.distribution_factor   # Decimal("41000.00")
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from resale_engines.guards import validate_purchase_line, validate_shipment
from resale_engines.identifiers import RecordKey, generate_key
from resale_engines.policy import DEFAULT_POLICY, CostingPolicy
from resale_engines.tracer import traced_engine
from resale_kernel.domain.clock import Clock
from resale_kernel.domain.records import LogisticsShipment, PurchaseLine
from resale_kernel.logging_config import get_logger

logger = get_logger("engines.logistics")


@dataclass(frozen=True)
class ShipmentDistribution:
    """
    Result of distributing one shipment's retrieval cost by weight.

    Guarantees:
        - ``distribution_factor`` is zero whenever ``aggregate_weight`` is zero.
    """

    shipment_key: RecordKey
    tracking_code: str
    aggregate_weight: Decimal
    distribution_factor: Decimal
    line_count: int

    @property
    def has_weight(self) -> bool:
        return self.aggregate_weight > 0

    def apply_to(self, shipment: LogisticsShipment) -> LogisticsShipment:
        """Return the shipment with its derived fields filled in."""
        return replace(
            shipment,
            record_id=shipment.record_id or self.shipment_key.record_id,
            shipment_key=self.shipment_key.display_key,
            aggregate_weight=self.aggregate_weight,
            distribution_factor=self.distribution_factor,
        )


def lines_for_tracking(
    tracking_code: str,
    purchase_lines: Sequence[PurchaseLine],
) -> list[PurchaseLine]:
    """Purchase lines whose PY tracking code equals ``tracking_code``."""
    return [line for line in purchase_lines if line.tracking_py == tracking_code]


class LogisticsDistributionCalculator:
    """
    Compute the per-kilogram distribution factor for a shipment.

    Contract:
        Pure function of (shipment, purchase lines).  Reads the clock and
        random source only to mint a key for a shipment that has none.
    Non-goals:
        - Does not allocate the cost to lines; the landed-cost calculator
          multiplies the factor by each line's weight.
    """

    def __init__(
        self,
        policy: CostingPolicy | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ):
        self._policy = policy or DEFAULT_POLICY
        self._clock = clock
        self._rng = rng

    @traced_engine("logistics_distribution", "1.0", fingerprint_fields=("shipment",))
    def calculate(
        self,
        shipment: LogisticsShipment,
        purchase_lines: Sequence[PurchaseLine],
    ) -> ShipmentDistribution:
        """
        Distribute ``shipment.total_retrieval_cost`` over the weight of every
        purchase line carrying the shipment's tracking code.
        """
        validate_shipment(shipment)
        matching = lines_for_tracking(shipment.tracking_code, purchase_lines)
        for line in matching:
            validate_purchase_line(line)

        total_weight = sum((line.weight_kg for line in matching), Decimal("0"))

        if total_weight > 0:
            factor = self._policy.quantize_factor(
                Decimal(shipment.total_retrieval_cost) / total_weight
            )
        else:
            logger.warning("shipment_without_weight", extra={
                "tracking_code": shipment.tracking_code,
                "line_count": len(matching),
            })
            factor = self._policy.quantize_factor(Decimal("0"))

        result = ShipmentDistribution(
            shipment_key=self._shipment_key(shipment),
            tracking_code=shipment.tracking_code,
            aggregate_weight=self._policy.quantize_weight(total_weight),
            distribution_factor=factor,
            line_count=len(matching),
        )

        logger.info("shipment_distribution_calculated", extra={
            "tracking_code": shipment.tracking_code,
            "total_retrieval_cost": str(shipment.total_retrieval_cost),
            "aggregate_weight": str(result.aggregate_weight),
            "distribution_factor": str(result.distribution_factor),
            "line_count": result.line_count,
        })
        return result

    def _shipment_key(self, shipment: LogisticsShipment) -> RecordKey:
        # Re-registering a known shipment keeps its identity.
        if shipment.record_id is not None and shipment.shipment_key:
            return RecordKey(record_id=shipment.record_id, display_key=shipment.shipment_key)
        return generate_key(
            self._policy.key_prefixes.shipment, clock=self._clock, rng=self._rng
        )
