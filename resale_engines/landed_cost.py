"""
Module: resale_engines.landed_cost
Responsibility:
    Price purchase lines: total units, lot cost in source and local
    currency, an even per-line share of the order's "extra" invoice amount,
    and a weight-based share of the shipment's retrieval cost.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``total_units = quantity_acquired * units_per_package`` exactly.
    - ``lot_cost_source = quantity_acquired * unit_cost`` rounded to the
      source currency; ``lot_cost_local = lot_cost_source * exchange_rate``
      rounded to the local currency (whole guaranies).
    - Extra cost is split by HEAD COUNT: ``(invoiced_total - sum of sibling
      lot costs) / sibling count``.  Shipment cost is split by WEIGHT:
      ``distribution_factor * weight_kg``.  Neither basis is
      derived from the other.
    - ``calculate_order`` assigns the even-split rounding residual to the
      last line, so the shares of an order sum exactly to the extra total.

Failure modes:
    - InvalidRecordError on negative quantities, costs, rates, weights,
      invoiced totals or factors.
    - Never raises for missing reference data: no order total, a zero order
      total, no shipment factor, or zero siblings all give a zero share.

Usage:
    calculator = PurchaseLandedCostCalculator()
    result = calculator.calculate(
        line=line,
        siblings=lines_of_same_order,
        invoiced_total=Decimal("100.00"),
        distribution_factor=Decimal("41000.00"),
    )
    priced_line = result.apply_to(line)
"""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal

from resale_engines.guards import require_non_negative, validate_purchase_line
from resale_engines.identifiers import RecordKey, generate_key
from resale_engines.policy import DEFAULT_POLICY, CostingPolicy
from resale_engines.tracer import traced_engine
from resale_kernel.domain.clock import Clock
from resale_kernel.domain.records import PurchaseLine
from resale_kernel.domain.values import Money
from resale_kernel.logging_config import get_logger

logger = get_logger("engines.landed_cost")


@dataclass(frozen=True)
class LandedCost:
    """
    Derived costing for one purchase line.

    Contract:
        Frozen result of ``PurchaseLandedCostCalculator.calculate``.
    Guarantees:
        - Source-currency amounts are in ``policy.source_currency``,
          local-currency amounts in ``policy.local_currency``, all rounded.
    """

    line_key: RecordKey
    total_units: int
    lot_cost_source: Money
    lot_cost_local: Money
    extra_cost_share: Money
    shipment_cost_share: Money

    @property
    def landed_cost_local(self) -> Money:
        """Lot cost plus shipment share, the basis for inventory valuation."""
        return self.lot_cost_local + self.shipment_cost_share

    def apply_to(self, line: PurchaseLine) -> PurchaseLine:
        """Return the line with its derived fields filled in."""
        return replace(
            line,
            record_id=self.line_key.record_id,
            line_key=self.line_key.display_key,
            total_units=self.total_units,
            lot_cost_source=self.lot_cost_source.amount,
            lot_cost_local=self.lot_cost_local.amount,
            extra_cost_share=self.extra_cost_share.amount,
            shipment_cost_share=self.shipment_cost_share.amount,
        )


@dataclass(frozen=True)
class OrderExtraCost:
    """The non-product residual of one order's invoice."""

    order_number: str
    invoiced_total: Money | None
    sum_lot_cost_source: Money
    extra_total: Money
    sibling_count: int

    def even_share(self) -> Money:
        """Head-count share before any residual fixup."""
        if self.sibling_count == 0:
            return Money.zero(self.extra_total.currency)
        return (self.extra_total / self.sibling_count).round(ROUND_HALF_UP)


@dataclass(frozen=True)
class OrderLandedCost:
    """
    Batch costing for every line of one order.

    Guarantees:
        - Sum of ``extra_cost_share`` over ``lines`` == ``extra.extra_total``
          whenever the order has at least one line.
        - ``lines`` keeps the input order.
    """

    extra: OrderExtraCost
    lines: tuple[LandedCost, ...]
    rounding_adjustment: Money

    @property
    def total_extra_allocated(self) -> Money:
        return sum(
            (lc.extra_cost_share for lc in self.lines),
            Money.zero(self.extra.extra_total.currency),
        )


class PurchaseLandedCostCalculator:
    """
    Landed-cost calculator for purchase lines.

    Contract:
        Pure functions over the line, its order siblings, the order's
        invoiced total and the shipment factor.  Reads the clock and random
        source only to mint keys for lines that have none.
    Non-goals:
        - Does not look anything up; callers pass the reference data they
          found (or None).
        - Does not include ``extra_cost_share`` in the local landed cost;
          the extra share stays in source currency.
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

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    def lot_cost_source(self, line: PurchaseLine) -> Money:
        unit_cost = Money.of(line.unit_cost, self._policy.source_currency)
        return (unit_cost * line.quantity_acquired).round()

    def lot_cost_local(self, lot_cost_source: Money, exchange_rate: Decimal) -> Money:
        return Money(
            amount=lot_cost_source.amount * Decimal(exchange_rate),
            currency=self._policy.local_currency,
        ).round()

    def shipment_cost_share(
        self,
        line: PurchaseLine,
        distribution_factor: Decimal | None,
    ) -> Money:
        """``factor * weight``; a missing factor gives zero."""
        if distribution_factor is None:
            return Money.zero(self._policy.local_currency)
        return Money(
            amount=Decimal(distribution_factor) * line.weight_kg,
            currency=self._policy.local_currency,
        ).round()

    def order_extra_cost(
        self,
        order_number: str,
        siblings: Sequence[PurchaseLine],
        invoiced_total: Decimal | None,
    ) -> OrderExtraCost:
        """
        Residual of the invoice over the sum of the order's lot costs.

        Only siblings carrying ``order_number`` count.  A missing or zero
        invoice total means the extra amount is not known yet: the residual
        is zero rather than minus the lot costs.
        """
        require_non_negative("OrderInvoiceTotal", "invoiced_total", invoiced_total)
        members = [s for s in siblings if s.order_number == order_number]
        for member in members:
            validate_purchase_line(member)

        currency = self._policy.source_currency
        sum_lots = sum(
            (self.lot_cost_source(m) for m in members),
            Money.zero(currency),
        )

        if invoiced_total is None or Decimal(invoiced_total) == 0:
            logger.debug("order_total_missing", extra={
                "order_number": order_number,
                "sibling_count": len(members),
            })
            invoice = None if invoiced_total is None else Money.zero(currency)
            extra_total = Money.zero(currency)
        else:
            invoice = Money.of(Decimal(invoiced_total), currency)
            extra_total = (invoice - sum_lots).round()

        return OrderExtraCost(
            order_number=order_number,
            invoiced_total=invoice,
            sum_lot_cost_source=sum_lots,
            extra_total=extra_total,
            sibling_count=len(members),
        )

    # ------------------------------------------------------------------
    # Single line
    # ------------------------------------------------------------------

    @traced_engine(
        "landed_cost",
        "1.0",
        fingerprint_fields=("line", "invoiced_total", "distribution_factor"),
    )
    def calculate(
        self,
        line: PurchaseLine,
        siblings: Sequence[PurchaseLine],
        invoiced_total: Decimal | None = None,
        distribution_factor: Decimal | None = None,
    ) -> LandedCost:
        """
        Price one line.

        Args:
            line: The line to price.
            siblings: Every line of the same order, the line itself included.
            invoiced_total: The order's invoiced total, or None if unknown.
            distribution_factor: Factor of the line's shipment, or None.
        """
        validate_purchase_line(line)
        require_non_negative("LogisticsShipment", "distribution_factor", distribution_factor)

        extra = self.order_extra_cost(line.order_number, siblings, invoiced_total)
        result = self._price(line, extra.even_share(), distribution_factor)

        logger.info("landed_cost_calculated", extra={
            "line_key": result.line_key.display_key,
            "order_number": line.order_number,
            "sku": line.sku,
            "total_units": result.total_units,
            "lot_cost_source": str(result.lot_cost_source.amount),
            "lot_cost_local": str(result.lot_cost_local.amount),
            "extra_cost_share": str(result.extra_cost_share.amount),
            "shipment_cost_share": str(result.shipment_cost_share.amount),
            "sibling_count": extra.sibling_count,
        })
        return result

    # ------------------------------------------------------------------
    # Whole order
    # ------------------------------------------------------------------

    @traced_engine(
        "landed_cost_order",
        "1.0",
        fingerprint_fields=("order_number", "invoiced_total"),
    )
    def calculate_order(
        self,
        order_number: str,
        lines: Sequence[PurchaseLine],
        invoiced_total: Decimal | None = None,
        distribution_factors: Mapping[str, Decimal] | None = None,
    ) -> OrderLandedCost:
        """
        Price every line of one order in a single pass.

        Lines not carrying ``order_number`` are ignored; a blank order
        number is a key like any other.  Each line's
        shipment factor is looked up by its PY tracking code in
        ``distribution_factors``; codes not present get a zero share.
        The last line absorbs the even-split rounding residual.
        """
        factors = distribution_factors or {}

        extra = self.order_extra_cost(order_number, lines, invoiced_total)
        members = [line for line in lines if line.order_number == order_number]
        even = extra.even_share()

        priced: list[LandedCost] = []
        allocated = Money.zero(extra.extra_total.currency)
        for i, line in enumerate(members):
            is_last = i == len(members) - 1
            share = (extra.extra_total - allocated) if is_last else even
            allocated = allocated + share
            factor = factors.get(line.tracking_py) if line.tracking_py else None
            require_non_negative("LogisticsShipment", "distribution_factor", factor)
            priced.append(self._price(line, share, factor))

        if members:
            rounding_adjustment = priced[-1].extra_cost_share - even
        else:
            rounding_adjustment = Money.zero(extra.extra_total.currency)

        result = OrderLandedCost(
            extra=extra,
            lines=tuple(priced),
            rounding_adjustment=rounding_adjustment,
        )

        assert not members or result.total_extra_allocated == extra.extra_total, (
            f"Extra cost conservation violated for order {order_number}: "
            f"{result.total_extra_allocated} != {extra.extra_total}"
        )

        logger.info("order_landed_cost_calculated", extra={
            "order_number": order_number,
            "line_count": len(priced),
            "extra_total": str(extra.extra_total.amount),
            "rounding_adjustment": str(rounding_adjustment.amount),
        })
        return result

    def _price(
        self,
        line: PurchaseLine,
        extra_share: Money,
        distribution_factor: Decimal | None,
    ) -> LandedCost:
        lot_source = self.lot_cost_source(line)
        return LandedCost(
            line_key=self._line_key(line),
            total_units=line.quantity_acquired * line.units_per_package,
            lot_cost_source=lot_source,
            lot_cost_local=self.lot_cost_local(lot_source, line.exchange_rate),
            extra_cost_share=extra_share,
            shipment_cost_share=self.shipment_cost_share(line, distribution_factor),
        )

    def _line_key(self, line: PurchaseLine) -> RecordKey:
        # Recomputing a stored line keeps its identity.
        if line.record_id is not None and line.line_key:
            return RecordKey(record_id=line.record_id, display_key=line.line_key)
        return generate_key(
            self._policy.key_prefixes.purchase, clock=self._clock, rng=self._rng
        )
