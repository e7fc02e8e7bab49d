"""
Configuration Loader (``resale_config.loader``).

Responsibility
--------------
Loads the YAML configuration file and parses it into the frozen
``resale_config.schema`` dataclasses, validating every value on the way.
Runtime callers use ``resale_config.get_active_config()`` instead.

Invariants enforced
-------------------
* The result is built only from the frozen ``schema.py`` dataclasses.
* Bad values raise ``ConfigurationError`` naming the dotted setting path;
  missing optional sections fall back to schema defaults.
* ``compute_checksum`` is a stable SHA-256 of the parsed settings, logged
  so two runs can be compared.

Failure modes
-------------
* No such file -> ``FileNotFoundError``.
* Not valid YAML -> ``yaml.YAMLError``.
* Invalid value  -> ``ConfigurationError``.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from resale_config.schema import (
    CurrencyConfig,
    DatabaseConfig,
    KeyPrefixConfig,
    LoggingConfig,
    ResaleConfiguration,
    RoundingConfig,
)
from resale_kernel.domain.currency import CurrencyRegistry
from resale_kernel.exceptions import ConfigurationError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Read one YAML document; an empty file reads as ``{}``.

    Raises ConfigurationError when the document is not a mapping; file and
    parse errors propagate from ``open`` and ``yaml.safe_load``.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), type(data).__name__, "top level must be a mapping")
    return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(name, value, "must be a mapping")
    return value


def _places(section: dict[str, Any], key: str, default: int, prefix: str) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{prefix}.{key}", value, "must be an integer")
    if value < 0:
        raise ConfigurationError(f"{prefix}.{key}", value, "cannot be negative")
    return value


def _currency(section: dict[str, Any], key: str, default: str) -> str:
    value = section.get(key, default)
    if not isinstance(value, str) or not CurrencyRegistry.is_valid(value):
        raise ConfigurationError(f"currencies.{key}", value, "unknown ISO 4217 code")
    return value.strip().upper()


def _prefix(section: dict[str, Any], key: str, default: str) -> str:
    value = section.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"key_prefixes.{key}", value, "must be a non-empty string")
    return value.strip()


def parse_currencies(data: dict[str, Any]) -> CurrencyConfig:
    defaults = CurrencyConfig()
    return CurrencyConfig(
        source=_currency(data, "source", defaults.source),
        local=_currency(data, "local", defaults.local),
    )


def parse_rounding(data: dict[str, Any]) -> RoundingConfig:
    defaults = RoundingConfig()
    return RoundingConfig(
        weight_places=_places(data, "weight_places", defaults.weight_places, "rounding"),
        factor_places=_places(data, "factor_places", defaults.factor_places, "rounding"),
        average_cost_places=_places(
            data, "average_cost_places", defaults.average_cost_places, "rounding"
        ),
    )


def parse_key_prefixes(data: dict[str, Any]) -> KeyPrefixConfig:
    defaults = KeyPrefixConfig()
    return KeyPrefixConfig(
        purchase=_prefix(data, "purchase", defaults.purchase),
        shipment=_prefix(data, "shipment", defaults.shipment),
        sale=_prefix(data, "sale", defaults.sale),
    )


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    defaults = DatabaseConfig()
    url = data.get("url", defaults.url)
    if not isinstance(url, str) or not url:
        raise ConfigurationError("database.url", url, "must be a non-empty string")
    return DatabaseConfig(url=url, echo=bool(data.get("echo", defaults.echo)))


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    level = str(data.get("level", LoggingConfig().level)).upper()
    if level not in _LOG_LEVELS:
        raise ConfigurationError("logging.level", level, f"must be one of {_LOG_LEVELS}")
    return LoggingConfig(level=level)


def parse_configuration(
    data: dict[str, Any],
    source_path: str | None = None,
) -> ResaleConfiguration:
    """
    Parse a complete configuration from a dict.

    Postconditions:
        - Returns a ``ResaleConfiguration`` with ``checksum`` filled in.
    """
    config = ResaleConfiguration(
        config_id=str(data.get("config_id", "default")),
        version=int(data.get("version", 1)),
        currencies=parse_currencies(_section(data, "currencies")),
        rounding=parse_rounding(_section(data, "rounding")),
        key_prefixes=parse_key_prefixes(_section(data, "key_prefixes")),
        database=parse_database(_section(data, "database")),
        logging=parse_logging(_section(data, "logging")),
        source_path=source_path,
    )
    return dataclasses.replace(config, checksum=compute_checksum(config_to_dict(config)))


def config_to_dict(config: ResaleConfiguration) -> dict[str, Any]:
    """Every field except ``checksum`` and ``source_path``."""
    data = dataclasses.asdict(config)
    data.pop("checksum")
    data.pop("source_path")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def log_level(config: ResaleConfiguration) -> int:
    return logging.getLevelName(config.logging.level)
