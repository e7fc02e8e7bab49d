"""
Typed exception hierarchy for the resale kernel.

Every error is a typed class with a machine-readable ``code`` class
attribute and carries its context as structured attributes, so callers
catch by type and read fields instead of parsing messages:

    try:
        service.register_purchase(line)
    except InvalidRecordError as e:
        show_field_error(e.field, e.value)      # structured data
        api_response(code=e.code)               # machine-readable

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ResaleKernelError (base)
    |
    +-- ValidationError
    |   +-- InvalidRecordError
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |
    +-- StoreError
    |   +-- RecordNotFoundError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES
===============================================================================

Category        | Code                  | When Raised
----------------|-----------------------|-------------------------------------
Validation      | INVALID_RECORD        | Negative / non-finite numeric field
Currency        | INVALID_CURRENCY      | Not a known ISO 4217 code
Store           | RECORD_NOT_FOUND      | Natural key has no row
Configuration   | CONFIGURATION_ERROR   | Config file holds an invalid value

Missing reference data (no order total, no shipment, no SKU history) and
degenerate divisions (zero weight, zero units, zero siblings) are NOT
errors: the engines resolve them to defined zero values.
"""

from decimal import Decimal
from typing import Any


class ResaleKernelError(Exception):
    """
    Base exception for all resale kernel errors.

    All subclasses must have a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "RESALE_KERNEL_ERROR"


# Validation


class ValidationError(ResaleKernelError):
    """Base exception for structurally invalid input."""

    code: str = "VALIDATION_ERROR"


class InvalidRecordError(ValidationError):
    """A record field holds a value the engine refuses to compute with."""

    code: str = "INVALID_RECORD"

    def __init__(self, record_type: str, field: str, value: Any, reason: str):
        self.record_type = record_type
        self.field = field
        self.value = str(value) if isinstance(value, Decimal) else value
        self.reason = reason
        super().__init__(
            f"Invalid {record_type}.{field}={value!r}: {reason}"
        )


# Currency


class CurrencyError(ResaleKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Invalid ISO 4217 currency code provided."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid ISO 4217 currency code: '{currency}'")


# Store


class StoreError(ResaleKernelError):
    """Base exception for store adapter errors."""

    code: str = "STORE_ERROR"


class RecordNotFoundError(StoreError):
    """No row exists for the requested natural key."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, entity: str, key: str):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


# Configuration


class ConfigurationError(ResaleKernelError):
    """Configuration file contains an invalid value."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, setting: str, value: Any, reason: str):
        self.setting = setting
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid configuration {setting}={value!r}: {reason}")
