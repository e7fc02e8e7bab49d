"""
Config -> Engine Bridges.

Functions that convert a ``ResaleConfiguration`` into engine inputs.  They
live in resale_config (the producer) because the engines must never
import resale_config.

Usage:
    from resale_config import get_active_config
    from resale_config.bridges import build_costing_policy

    policy = build_costing_policy(get_active_config())
"""

from __future__ import annotations

from resale_config.schema import ResaleConfiguration
from resale_engines.policy import CostingPolicy, KeyPrefixes
from resale_kernel.domain.values import Currency


def build_costing_policy(config: ResaleConfiguration) -> CostingPolicy:
    """Build the engines' CostingPolicy from currencies, rounding and key prefixes."""
    return CostingPolicy(
        source_currency=Currency(config.currencies.source),
        local_currency=Currency(config.currencies.local),
        weight_places=config.rounding.weight_places,
        factor_places=config.rounding.factor_places,
        average_cost_places=config.rounding.average_cost_places,
        key_prefixes=KeyPrefixes(
            purchase=config.key_prefixes.purchase,
            shipment=config.key_prefixes.shipment,
            sale=config.key_prefixes.sale,
        ),
    )
