"""
Landed-Cost Service (``resale_services.landed_cost_service``).

Responsibility
--------------
Registers purchases, shipments, order totals, sales and products, and keeps
their derived fields current by composing the pure engines with the store
selectors.  This is a **thin glue layer**: every number it writes comes from
an engine.

Architecture
------------
Layer: **Services** -- stateful orchestration wrapper.

1. Reads snapshots through ``PurchaseSelector``, ``LogisticsSelector`` and
   ``SalesSelector``.
2. Calls ``LogisticsDistributionCalculator``,
   ``PurchaseLandedCostCalculator``, ``InventoryValuationAggregator`` and
   ``SalePricingCalculator``.
3. Writes the results through the ORM models: upsert by natural key for
   shipments, order totals and products; plain insert for purchase and
   sale lines.

Invariants
----------
- Each public method owns its transaction boundary: ``session.commit()`` on
  success, ``session.rollback()`` and re-raise on failure.
- Input is validated before the engines run; the engines validate again.
- No locking.  Two callers registering lines of one order concurrently can
  each see a stale sibling count; ``recalculate_all`` repairs that.

Failure Modes
-------------
- ``InvalidRecordError`` for negative or non-finite numbers.
- ``RecordNotFoundError`` when deleting a product that does not exist.
- SQLAlchemy errors propagate after rollback.

Usage::

    service = LandedCostService(session)
    service.register_order_total("A-100", Decimal("100.00"))
    line = service.register_purchase(PurchaseLine(...))
    valuation = service.revalue_product("P1")
"""

from __future__ import annotations

import random
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from resale_engines.guards import (
    require_key,
    validate_order_total,
    validate_product,
    validate_purchase_line,
    validate_sale_line,
    validate_shipment,
)
from resale_engines.landed_cost import PurchaseLandedCostCalculator
from resale_engines.logistics import LogisticsDistributionCalculator
from resale_engines.policy import DEFAULT_POLICY, CostingPolicy
from resale_engines.sale_pricing import SalePricingCalculator
from resale_engines.valuation import InventoryValuation, InventoryValuationAggregator
from resale_kernel.domain.clock import Clock, SystemClock
from resale_kernel.domain.records import (
    LogisticsShipment,
    OrderInvoiceTotal,
    Product,
    PurchaseLine,
    SaleLine,
)
from resale_kernel.exceptions import RecordNotFoundError
from resale_kernel.logging_config import LogContext, get_logger
from resale_kernel.models.logistics import LogisticsShipmentModel
from resale_kernel.models.product import ProductModel
from resale_kernel.models.purchase import OrderInvoiceTotalModel, PurchaseLineModel
from resale_kernel.models.sales import SaleLineModel
from resale_kernel.selectors.logistics_selector import LogisticsSelector
from resale_kernel.selectors.purchase_selector import PurchaseSelector
from resale_kernel.selectors.sales_selector import SalesSelector

logger = get_logger("services.landed_cost")


@dataclass(frozen=True)
class RecalculationSummary:
    """Counts of rows rewritten by ``recalculate_all``."""

    shipments: int
    orders: int
    purchase_lines: int
    products: int


class LandedCostService:
    """
    Orchestrates record registration through engines and selectors.

    Contract
    --------
    Every public write method fetches fresh snapshots, delegates computation
    to an engine, persists the engine's output and commits.  On failure the
    session is rolled back and the error re-raised.

    Non-goals
    ---------
    - Does not recompute siblings when a new line joins an order, nor lines
      when a shipment or order total arrives late.  Call
      ``recalculate_all`` for that.
    """

    def __init__(
        self,
        session: Session,
        policy: CostingPolicy | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ):
        self._session = session
        self._policy = policy or DEFAULT_POLICY
        self._clock = clock or SystemClock()

        self._logistics = LogisticsDistributionCalculator(self._policy, self._clock, rng)
        self._landed_cost = PurchaseLandedCostCalculator(self._policy, self._clock, rng)
        self._valuation = InventoryValuationAggregator(self._policy)
        self._pricing = SalePricingCalculator(self._policy, self._clock, rng)

        self._purchases = PurchaseSelector(session)
        self._shipments = LogisticsSelector(session)
        self._sales = SalesSelector(session)

    # =========================================================================
    # Order totals
    # =========================================================================

    def register_order_total(
        self,
        order_number: str,
        invoiced_total: Decimal,
    ) -> OrderInvoiceTotal:
        """Insert or replace the invoiced total of ``order_number``."""
        try:
            with LogContext.bind(order_number=order_number):
                require_key("OrderInvoiceTotal", "order_number", order_number)
                validate_order_total(OrderInvoiceTotal(order_number, invoiced_total))

                model = self._session.scalars(
                    select(OrderInvoiceTotalModel).where(
                        OrderInvoiceTotalModel.order_number == order_number
                    )
                ).one_or_none()
                created = model is None
                if created:
                    model = OrderInvoiceTotalModel(
                        order_number=order_number, invoiced_total=invoiced_total
                    )
                    self._session.add(model)
                else:
                    model.invoiced_total = invoiced_total
                self._session.flush()

                logger.info("order_total_registered", extra={
                    "invoiced_total": str(invoiced_total),
                    "created": created,
                })
                result = model.to_dto()
            self._session.commit()
            return result
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Shipments
    # =========================================================================

    def register_shipment(
        self,
        tracking_code: str,
        retrieval_date: date,
        total_retrieval_cost: Decimal,
    ) -> LogisticsShipment:
        """
        Distribute a retrieval's cost over the weight of every purchase line
        carrying ``tracking_code`` and upsert the shipment.

        Postconditions:
            - The stored shipment holds the new cost, weight and factor.
            - A re-registered shipment keeps its record id and key.
        """
        try:
            with LogContext.bind(tracking_code=tracking_code):
                existing = self._shipments.by_tracking(tracking_code)
                snapshot = LogisticsShipment(
                    tracking_code=tracking_code,
                    retrieval_date=retrieval_date,
                    total_retrieval_cost=total_retrieval_cost,
                    record_id=existing.record_id if existing else None,
                    shipment_key=existing.shipment_key if existing else None,
                )
                validate_shipment(snapshot)

                distribution = self._logistics.calculate(
                    shipment=snapshot,
                    purchase_lines=self._purchases.lines_for_tracking(tracking_code),
                )
                shipment = distribution.apply_to(snapshot)
                self._save_shipment(shipment)

                logger.info("shipment_registered", extra={
                    "shipment_key": shipment.shipment_key,
                    "distribution_factor": str(shipment.distribution_factor),
                    "created": existing is None,
                })
            self._session.commit()
            return shipment
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Purchases
    # =========================================================================

    def register_purchase(self, line: PurchaseLine) -> PurchaseLine:
        """
        Price and insert a new purchase line.

        The line's siblings are the stored lines of its order plus the line
        itself.  The order's invoiced total and the shipment factor are
        whatever is stored now; either may be missing.
        """
        try:
            with LogContext.bind(order_number=line.order_number, sku=line.sku):
                require_key("PurchaseLine", "order_number", line.order_number)
                validate_purchase_line(line)

                siblings = self._purchases.lines_for_order(line.order_number) + [line]
                order_total = self._purchases.order_total(line.order_number)
                factor = self._factor_for(line.tracking_py)

                result = self._landed_cost.calculate(
                    line=line,
                    siblings=siblings,
                    invoiced_total=order_total.invoiced_total if order_total else None,
                    distribution_factor=factor,
                )
                priced = result.apply_to(line)
                self._session.add(PurchaseLineModel.from_dto(priced))
                self._session.flush()

                logger.info("purchase_registered", extra={
                    "line_key": priced.line_key,
                    "has_order_total": order_total is not None,
                    "has_shipment_factor": factor is not None,
                })
            self._session.commit()
            return priced
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Sales and catalog
    # =========================================================================

    def register_sale(self, sale: SaleLine) -> SaleLine:
        """Price ``sale`` from the catalog and insert it."""
        try:
            with LogContext.bind(sku=sale.sku):
                validate_sale_line(sale)
                product = self._sales.product(sale.sku)
                pricing = self._pricing.price(
                    sale=sale,
                    products=[product] if product is not None else [],
                )
                priced = pricing.apply_to(sale)
                self._session.add(SaleLineModel.from_dto(priced))
                self._session.flush()

                logger.info("sale_registered", extra={
                    "sale_key": priced.sale_key,
                    "catalog_hit": pricing.catalog_hit,
                })
            self._session.commit()
            return priced
        except Exception:
            self._session.rollback()
            raise

    def upsert_product(self, product: Product) -> Product:
        """
        Insert or update a catalog entry by SKU.

        Stored stock and average cost survive an update that does not carry
        them.
        """
        try:
            with LogContext.bind(sku=product.sku):
                validate_product(product)
                model = self._product_model(product.sku)
                created = model is None
                if created:
                    model = ProductModel.from_dto(product)
                    self._session.add(model)
                else:
                    model.update_from_dto(replace(
                        product,
                        stock=product.stock if product.stock is not None else model.stock,
                        average_cost=(
                            product.average_cost
                            if product.average_cost is not None
                            else model.average_cost
                        ),
                    ))
                self._session.flush()

                logger.info("product_upserted", extra={"created": created})
                result = model.to_dto()
            self._session.commit()
            return result
        except Exception:
            self._session.rollback()
            raise

    def delete_product(self, sku: str) -> None:
        """
        Remove a catalog entry.  Purchase and sale history for the SKU is
        kept; a later ``upsert_product`` brings the entry back.

        Raises:
            RecordNotFoundError: No product with ``sku`` exists.
        """
        try:
            with LogContext.bind(sku=sku):
                model = self._product_model(sku)
                if model is None:
                    logger.warning("product_not_found", extra={"operation": "delete"})
                    raise RecordNotFoundError("Product", sku)
                self._session.delete(model)
                self._session.flush()
                logger.info("product_deleted")
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Valuation
    # =========================================================================

    def revalue_product(self, sku: str) -> InventoryValuation:
        """
        Valuate ``sku`` over its full history and write stock and average
        cost onto its catalog entry, if one exists.
        """
        try:
            with LogContext.bind(sku=sku):
                valuation = self._valuation.valuate(
                    sku=sku,
                    purchase_lines=self._purchases.lines_for_sku(sku),
                    sale_lines=self._sales.sales_for_sku(sku),
                )
                model = self._product_model(sku)
                if model is not None:
                    model.stock = valuation.stock
                    model.average_cost = valuation.average_unit_cost
                    self._session.flush()
                else:
                    logger.info("valuation_without_product", extra={"stock": valuation.stock})
            self._session.commit()
            return valuation
        except Exception:
            self._session.rollback()
            raise

    def stock_report(self) -> dict[str, InventoryValuation]:
        """Read-only valuation of every SKU with history, keyed by SKU."""
        return self._valuation.valuate_all(
            purchase_lines=self._purchases.all_lines(),
            sale_lines=self._sales.all_sales(),
        )

    # =========================================================================
    # Full recomputation
    # =========================================================================

    def recalculate_all(self) -> RecalculationSummary:
        """
        Recompute every derived field from scratch.

        Order matters: shipment factors first, then every order's lines in
        batch form (so extra shares sum exactly per order), then every
        catalog product's valuation from the freshly priced lines.
        """
        try:
            lines = self._purchases.all_lines()

            # 1. Shipment factors
            shipment_count = 0
            factors: dict[str, Decimal] = {}
            for model in self._session.scalars(select(LogisticsShipmentModel)).all():
                distribution = self._logistics.calculate(
                    shipment=model.to_dto(),
                    purchase_lines=lines,
                )
                model.update_from_dto(distribution.apply_to(model.to_dto()))
                factors[model.tracking_code] = distribution.distribution_factor
                shipment_count += 1

            # 2. Purchase lines, one order at a time
            totals = self._purchases.all_order_totals()
            by_order: dict[str, list[PurchaseLine]] = defaultdict(list)
            for line in lines:
                by_order[line.order_number].append(line)

            line_models = {
                m.id: m for m in self._session.scalars(select(PurchaseLineModel))
            }
            priced_lines: list[PurchaseLine] = []
            for order_number, order_lines in by_order.items():
                total = totals.get(order_number)
                result = self._landed_cost.calculate_order(
                    order_number=order_number,
                    lines=order_lines,
                    invoiced_total=total.invoiced_total if total else None,
                    distribution_factors=factors,
                )
                for line, landed in zip(order_lines, result.lines):
                    priced = landed.apply_to(line)
                    line_models[line.record_id].apply_derived(priced)
                    priced_lines.append(priced)

            # 3. Catalog valuation
            valuations = self._valuation.valuate_all(
                purchase_lines=priced_lines,
                sale_lines=self._sales.all_sales(),
            )
            product_count = 0
            for model in self._session.scalars(select(ProductModel)).all():
                valuation = valuations.get(model.sku)
                model.stock = valuation.stock if valuation else 0
                model.average_cost = (
                    valuation.average_unit_cost if valuation else Decimal("0.00")
                )
                product_count += 1

            self._session.flush()
            summary = RecalculationSummary(
                shipments=shipment_count,
                orders=len(by_order),
                purchase_lines=len(priced_lines),
                products=product_count,
            )
            logger.info("recalculation_completed", extra={
                "shipments": summary.shipments,
                "orders": summary.orders,
                "purchase_lines": summary.purchase_lines,
                "products": summary.products,
            })
            self._session.commit()
            return summary
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Helpers
    # =========================================================================

    def _factor_for(self, tracking_code: str | None) -> Decimal | None:
        if not tracking_code:
            return None
        shipment = self._shipments.by_tracking(tracking_code)
        if shipment is None:
            return None
        return shipment.distribution_factor

    def _product_model(self, sku: str) -> ProductModel | None:
        return self._session.scalars(
            select(ProductModel).where(ProductModel.sku == sku)
        ).one_or_none()

    def _save_shipment(self, shipment: LogisticsShipment) -> None:
        model = self._session.scalars(
            select(LogisticsShipmentModel).where(
                LogisticsShipmentModel.tracking_code == shipment.tracking_code
            )
        ).one_or_none()
        if model is None:
            self._session.add(LogisticsShipmentModel.from_dto(shipment))
        else:
            model.update_from_dto(shipment)
        self._session.flush()
