"""
Module: resale_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for resale_services
    and the CLI.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import resale_kernel.domain, resale_kernel.exceptions and
    resale_kernel.logging_config.  MUST NOT import resale_services or
    resale_kernel.models.

Invariants enforced:
    - Purity: engines never call ``datetime.now()`` or ``date.today()``
      directly; key generation reads an injected Clock.
    - Decimal-only arithmetic; floats are rejected at the guards.
    - Determinism: identical inputs (and an identical clock and random
      source) produce identical outputs.

Usage:
    from resale_engines import (
        LogisticsDistributionCalculator,
        PurchaseLandedCostCalculator,
        InventoryValuationAggregator,
    )
"""

from resale_kernel.logging_config import get_logger

logger = get_logger("engines")

from resale_engines.identifiers import (
    RecordKey,
    generate_display_key,
    generate_key,
)
from resale_engines.landed_cost import (
    LandedCost,
    OrderExtraCost,
    OrderLandedCost,
    PurchaseLandedCostCalculator,
)
from resale_engines.logistics import (
    LogisticsDistributionCalculator,
    ShipmentDistribution,
    lines_for_tracking,
)
from resale_engines.policy import DEFAULT_POLICY, CostingPolicy, KeyPrefixes
from resale_engines.sale_pricing import (
    SalePricing,
    SalePricingCalculator,
    find_product,
)
from resale_engines.tracer import compute_input_fingerprint, traced_engine
from resale_engines.valuation import (
    InventoryValuation,
    InventoryValuationAggregator,
)

__all__ = [
    "CostingPolicy",
    "DEFAULT_POLICY",
    "InventoryValuation",
    "InventoryValuationAggregator",
    "KeyPrefixes",
    "LandedCost",
    "LogisticsDistributionCalculator",
    "OrderExtraCost",
    "OrderLandedCost",
    "PurchaseLandedCostCalculator",
    "RecordKey",
    "SalePricing",
    "SalePricingCalculator",
    "ShipmentDistribution",
    "compute_input_fingerprint",
    "find_product",
    "generate_display_key",
    "generate_key",
    "lines_for_tracking",
    "traced_engine",
]
