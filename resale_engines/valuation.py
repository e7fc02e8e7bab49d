"""
Module: resale_engines.valuation
Responsibility:
    Aggregate a SKU's purchase and sale history into current stock and a
    weighted-average landed unit cost.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``stock = acquired_units - sold_units``; negative stock (oversell) is
      reported as is, never clamped.
    - ``total_landed_cost = sum(lot_cost_local + shipment_cost_share)``
      over the SKU's purchase lines; derived amounts not yet computed
      count as zero.
    - ``average_unit_cost = total_landed_cost / acquired_units`` rounded to
      ``policy.average_cost_places``, or exactly ``0`` when nothing was
      acquired.

Failure modes:
    - InvalidRecordError on a negative field in any contributing record.
    - Zero history is not an error: stock 0, average cost 0.

Usage:
    aggregator = InventoryValuationAggregator()
    valuation = aggregator.valuate("P1", purchase_lines, sale_lines)
    product = valuation.apply_to(product)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from resale_engines.guards import validate_purchase_line, validate_sale_line
from resale_engines.policy import DEFAULT_POLICY, CostingPolicy
from resale_engines.tracer import traced_engine
from resale_kernel.domain.records import Product, PurchaseLine, SaleLine
from resale_kernel.domain.values import Money
from resale_kernel.logging_config import get_logger

logger = get_logger("engines.valuation")


@dataclass(frozen=True)
class InventoryValuation:
    """Stock and weighted-average cost of one SKU."""

    sku: str
    acquired_units: int
    sold_units: int
    stock: int
    total_landed_cost: Money
    average_unit_cost: Decimal

    @property
    def is_oversold(self) -> bool:
        return self.stock < 0

    def apply_to(self, product: Product) -> Product:
        """Return the product with stock and average cost filled in."""
        if product.sku != self.sku:
            raise ValueError(
                f"Valuation for {self.sku!r} cannot be applied to product {product.sku!r}"
            )
        return replace(product, stock=self.stock, average_cost=self.average_unit_cost)


def line_units(line: PurchaseLine) -> int:
    """Stored total units, or ``quantity_acquired * units_per_package``."""
    if line.total_units is not None:
        return line.total_units
    return line.quantity_acquired * line.units_per_package


def line_landed_cost(line: PurchaseLine) -> Decimal:
    return (line.lot_cost_local or Decimal("0")) + (line.shipment_cost_share or Decimal("0"))


class InventoryValuationAggregator:
    """
    Weighted-average valuation over full history.

    Contract:
        Pure function of (sku, purchase lines, sale lines).  Every call
        recomputes from scratch; nothing is cached between calls.
    """

    def __init__(self, policy: CostingPolicy | None = None):
        self._policy = policy or DEFAULT_POLICY

    @traced_engine("inventory_valuation", "1.0", fingerprint_fields=("sku",))
    def valuate(
        self,
        sku: str,
        purchase_lines: Sequence[PurchaseLine],
        sale_lines: Sequence[SaleLine],
    ) -> InventoryValuation:
        purchases = [line for line in purchase_lines if line.sku == sku]
        sales = [sale for sale in sale_lines if sale.sku == sku]
        for line in purchases:
            validate_purchase_line(line)
        for sale in sales:
            validate_sale_line(sale)

        acquired = sum(line_units(line) for line in purchases)
        sold = sum(sale.quantity_sold for sale in sales)
        total_cost = sum((line_landed_cost(line) for line in purchases), Decimal("0"))

        if acquired > 0:
            average = self._policy.quantize_average_cost(total_cost / acquired)
        else:
            average = self._policy.quantize_average_cost(Decimal("0"))

        result = InventoryValuation(
            sku=sku,
            acquired_units=acquired,
            sold_units=sold,
            stock=acquired - sold,
            total_landed_cost=Money(total_cost, self._policy.local_currency).round(),
            average_unit_cost=average,
        )

        if result.is_oversold:
            logger.warning("inventory_oversold", extra={
                "sku": sku,
                "acquired_units": acquired,
                "sold_units": sold,
            })

        logger.info("inventory_valuated", extra={
            "sku": sku,
            "stock": result.stock,
            "acquired_units": acquired,
            "sold_units": sold,
            "total_landed_cost": str(result.total_landed_cost.amount),
            "average_unit_cost": str(average),
        })
        return result

    def valuate_all(
        self,
        purchase_lines: Sequence[PurchaseLine],
        sale_lines: Sequence[SaleLine],
    ) -> dict[str, InventoryValuation]:
        """Valuate every SKU present in either history, keyed and sorted by SKU."""
        skus = {line.sku for line in purchase_lines} | {sale.sku for sale in sale_lines}
        return {
            sku: self.valuate(sku, purchase_lines, sale_lines)
            for sku in sorted(skus)
        }
