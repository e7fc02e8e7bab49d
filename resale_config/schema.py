"""
Resale configuration schema.

Frozen dataclasses the YAML file is parsed into.  Defaults mirror
``defaults.yaml`` so a partial file only needs the keys it changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CurrencyConfig:
    """Source (purchase) and local (retrieval, sale) currencies."""

    source: str = "USD"
    local: str = "PYG"


@dataclass(frozen=True)
class RoundingConfig:
    """Decimal places for the non-monetary figures."""

    weight_places: int = 3
    factor_places: int = 2
    average_cost_places: int = 2


@dataclass(frozen=True)
class KeyPrefixConfig:
    purchase: str = "C"
    shipment: str = "R"
    sale: str = "V"


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = "sqlite:///resale.db"
    echo: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class ResaleConfiguration:
    """
    The complete runtime configuration.

    ``checksum`` is the SHA-256 of the canonical JSON of every other field,
    so two configurations with equal values share a checksum.
    """

    config_id: str = "default"
    version: int = 1
    currencies: CurrencyConfig = field(default_factory=CurrencyConfig)
    rounding: RoundingConfig = field(default_factory=RoundingConfig)
    key_prefixes: KeyPrefixConfig = field(default_factory=KeyPrefixConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    source_path: str | None = None
    checksum: str = ""
