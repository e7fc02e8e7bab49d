"""
Module: resale_engines.sale_pricing
Responsibility:
    Price a sale line from the product catalog: unit price is the list
    price of the product with the sold SKU, total is unit price times
    quantity sold.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - A SKU missing from the catalog prices at zero; it is not an error.
    - ``sale_total = unit_price * quantity_sold`` rounded to the local
      currency.

Failure modes:
    - InvalidRecordError on a negative quantity sold or a negative list
      price on the matching product.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass, replace

from resale_engines.guards import validate_product, validate_sale_line
from resale_engines.identifiers import RecordKey, generate_key
from resale_engines.policy import DEFAULT_POLICY, CostingPolicy
from resale_engines.tracer import traced_engine
from resale_kernel.domain.clock import Clock
from resale_kernel.domain.records import Product, SaleLine
from resale_kernel.domain.values import Money
from resale_kernel.logging_config import get_logger

logger = get_logger("engines.sale_pricing")


@dataclass(frozen=True)
class SalePricing:
    sale_key: RecordKey
    unit_price: Money
    sale_total: Money
    catalog_hit: bool

    def apply_to(self, sale: SaleLine) -> SaleLine:
        return replace(
            sale,
            record_id=self.sale_key.record_id,
            sale_key=self.sale_key.display_key,
            unit_price=self.unit_price.amount,
            sale_total=self.sale_total.amount,
        )


def find_product(sku: str, products: Sequence[Product]) -> Product | None:
    """First catalog entry with ``sku``, or None."""
    for product in products:
        if product.sku == sku:
            return product
    return None


class SalePricingCalculator:
    """Catalog-price a sale line and mint its key."""

    def __init__(
        self,
        policy: CostingPolicy | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ):
        self._policy = policy or DEFAULT_POLICY
        self._clock = clock
        self._rng = rng

    @traced_engine("sale_pricing", "1.0", fingerprint_fields=("sale",))
    def price(self, sale: SaleLine, products: Sequence[Product]) -> SalePricing:
        validate_sale_line(sale)
        product = find_product(sale.sku, products)
        currency = self._policy.local_currency

        if product is None:
            logger.warning("sale_sku_not_in_catalog", extra={"sku": sale.sku})
            unit_price = Money.zero(currency)
        else:
            validate_product(product)
            unit_price = Money.of(product.list_price, currency).round()

        result = SalePricing(
            sale_key=self._sale_key(sale),
            unit_price=unit_price,
            sale_total=(unit_price * sale.quantity_sold).round(),
            catalog_hit=product is not None,
        )

        logger.info("sale_priced", extra={
            "sale_key": result.sale_key.display_key,
            "sku": sale.sku,
            "quantity_sold": sale.quantity_sold,
            "unit_price": str(result.unit_price.amount),
            "sale_total": str(result.sale_total.amount),
        })
        return result

    def _sale_key(self, sale: SaleLine) -> RecordKey:
        if sale.record_id is not None and sale.sale_key:
            return RecordKey(record_id=sale.record_id, display_key=sale.sale_key)
        return generate_key(
            self._policy.key_prefixes.sale, clock=self._clock, rng=self._rng
        )
