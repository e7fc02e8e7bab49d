"""
resale_engines.tracer -- ``@traced_engine`` and its input fingerprint.

Responsibility:
    Emit one RESALE_ENGINE_TRACE record per successful engine call: which
    engine ran, at which version, on which inputs (as a short hash) and
    how long it took.

Invariants enforced:
    - The same keyword inputs always hash to the same fingerprint.  Dict
      keys are sorted; dataclasses hash by type name and field values.
    - Only keyword arguments are fingerprinted.  Engines are called with
      keywords throughout.
    - Inputs and results pass through untouched.

Failure modes:
    - A fingerprint field absent from the call hashes as ``null``.
    - An exception from the engine propagates and no trace is written.

Usage:
    @traced_engine("logistics_distribution", "1.0", fingerprint_fields=("shipment",))
    def calculate(self, *, shipment, purchase_lines):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import time
from collections.abc import Callable, Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from resale_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_TYPE = "RESALE_ENGINE_TRACE"


def _stable_repr(obj: Any) -> str:
    if obj is None:
        return "null"
    if isinstance(obj, str):
        return obj
    if isinstance(obj, (bool, int, Decimal)):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        values = {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
        return f"{type(obj).__name__}{_stable_repr(values)}"
    if isinstance(obj, Mapping):
        body = ",".join(
            f"{key}:{_stable_repr(obj[key])}" for key in sorted(obj, key=str)
        )
        return "{%s}" % body
    if isinstance(obj, (list, tuple)):
        return "[%s]" % ",".join(map(_stable_repr, obj))
    return str(obj)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: Mapping[str, Any],
) -> str:
    """First 16 hex chars of SHA-256 over ``name=value`` pairs of the chosen kwargs."""
    joined = "|".join(f"{name}={_stable_repr(kwargs.get(name))}" for name in fingerprint_fields)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable[[Callable], Callable]:
    """
    Wrap an engine method so each successful call logs a trace record.

    ``fingerprint_fields`` names the keyword arguments hashed into
    ``input_fingerprint``; with none named the fingerprint is empty.
    """

    def wrap(func: Callable) -> Callable:
        @functools.wraps(func)
        def traced(*args: Any, **kwargs: Any) -> Any:
            fingerprint = (
                compute_input_fingerprint(fingerprint_fields, kwargs)
                if fingerprint_fields else ""
            )
            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

            _logger.info(TRACE_TYPE, extra={
                "trace_type": TRACE_TYPE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "duration_ms": elapsed_ms,
                "function": func.__qualname__,
            })
            return result

        return traced

    return wrap
