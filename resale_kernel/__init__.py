"""
Resale Kernel

Shared foundation for the landed-cost engine:
- Immutable value objects (Currency, Money) with explicit rounding
- Record snapshots for purchases, shipments, sales and products
- Structured JSON logging and typed exceptions
- SQLAlchemy store adapter (models + read-only selectors)
"""

__version__ = "0.1.0"
