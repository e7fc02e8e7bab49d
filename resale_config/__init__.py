"""
resale_config -- single public entrypoint for runtime configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables directly.

Architecture position:
    Configuration -- sits above ``resale_kernel`` and ``resale_engines``
    and below ``resale_services`` and the CLI.  The kernel and engines
    MUST NEVER import from ``resale_config``; ``bridges`` translates the
    configuration into engine inputs.

Invariants enforced:
    - Resolution order for the file: explicit ``path`` argument, then the
      ``RESALE_CONFIG`` environment variable, then the packaged
      ``defaults.yaml``.
    - ``RESALE_DATABASE_URL`` overrides ``database.url``.
    - Every returned configuration has been validated and carries a
      deterministic checksum.

Failure modes:
    - ``FileNotFoundError`` -- the selected file does not exist.
    - ``ConfigurationError`` -- a value fails validation.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``RESALE_CONFIG_TRACE`` log record with the config id, version,
    checksum and source path.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from resale_config.bridges import build_costing_policy
from resale_config.loader import (
    compute_checksum,
    config_to_dict,
    load_yaml_file,
    parse_configuration,
)
from resale_config.schema import DatabaseConfig, ResaleConfiguration

_logger = logging.getLogger("resale_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

CONFIG_ENV_VAR = "RESALE_CONFIG"
DATABASE_URL_ENV_VAR = "RESALE_DATABASE_URL"


def get_active_config(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> ResaleConfiguration:
    """The ONLY public configuration entrypoint.

    Args:
        path: Configuration file; overrides ``RESALE_CONFIG``.
        environ: Environment to read overrides from (defaults to
            ``os.environ``).

    Returns:
        A validated, frozen ``ResaleConfiguration``.
    """
    env = os.environ if environ is None else environ

    if path is None:
        path = env.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    config_path = Path(path)

    config = parse_configuration(load_yaml_file(config_path), source_path=str(config_path))

    database_url = env.get(DATABASE_URL_ENV_VAR)
    if database_url:
        config = dataclasses.replace(
            config,
            database=DatabaseConfig(url=database_url, echo=config.database.echo),
        )
        config = dataclasses.replace(
            config, checksum=compute_checksum(config_to_dict(config))
        )

    _logger.info(
        "RESALE_CONFIG_TRACE",
        extra={
            "trace_type": "RESALE_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "source_path": config.source_path,
            "database_url_overridden": bool(database_url),
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ResaleConfiguration",
    "build_costing_policy",
    "get_active_config",
]
