"""
Costing policy -- currencies, rounding and key prefixes for the engines.

The engines never read configuration; callers hand them a ``CostingPolicy``
(``resale_config.build_costing_policy`` produces one from the YAML file).
Money amounts round to their currency's minor unit; the three precisions
here cover the non-monetary figures.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from resale_kernel.domain.values import Currency


@dataclass(frozen=True)
class KeyPrefixes:
    """Display-key prefixes per record kind."""

    purchase: str = "C"
    shipment: str = "R"
    sale: str = "V"


@dataclass(frozen=True)
class CostingPolicy:
    """
    Immutable engine settings.

    Guarantees:
        - ``source_currency`` and ``local_currency`` are registered currencies.
        - All precisions are non-negative.
    """

    source_currency: Currency = Currency("USD")
    local_currency: Currency = Currency("PYG")
    weight_places: int = 3
    factor_places: int = 2
    average_cost_places: int = 2
    key_prefixes: KeyPrefixes = KeyPrefixes()

    def __post_init__(self) -> None:
        if isinstance(self.source_currency, str):
            object.__setattr__(self, "source_currency", Currency(self.source_currency))
        if isinstance(self.local_currency, str):
            object.__setattr__(self, "local_currency", Currency(self.local_currency))
        for name in ("weight_places", "factor_places", "average_cost_places"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")

    def quantize_weight(self, value: Decimal) -> Decimal:
        return _quantize(value, self.weight_places)

    def quantize_factor(self, value: Decimal) -> Decimal:
        return _quantize(value, self.factor_places)

    def quantize_average_cost(self, value: Decimal) -> Decimal:
        return _quantize(value, self.average_cost_places)


def _quantize(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


DEFAULT_POLICY = CostingPolicy()
