"""
Pytest fixtures for the resale kernel test suite.

Provides:
- Structured logging configuration and a ``captured_logs`` fixture
- A fresh in-memory SQLite database per test (``session``)
- Deterministic clock and random source for key generation
- Record factories for purchase lines, shipments, sales and products

Environment Variables:
- DATABASE_URL: optional database URL for the ``session`` fixture.
  Defaults to in-memory SQLite.
"""

import json
import logging
import os
import random
from datetime import UTC, date, datetime
from decimal import Decimal
from io import StringIO

import pytest

from resale_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from resale_kernel.domain.clock import DeterministicClock
from resale_kernel.domain.records import (
    LogisticsShipment,
    Product,
    PurchaseLine,
    SaleLine,
)
from resale_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

DEFAULT_TEST_DATABASE_URL = "sqlite://"


# -- logging -----------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _suite_logging():
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _fresh_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Collect ``resale_kernel`` records emitted during the test.

    Returns a callable giving the records so far as parsed JSON dicts::

        def test_trace(captured_logs):
            calculator.calculate(...)
            assert "landed_cost_calculated" in [r["message"] for r in captured_logs()]
    """
    buffer = StringIO()
    capture = logging.StreamHandler(buffer)
    capture.setFormatter(StructuredFormatter())
    kernel_logger = logging.getLogger("resale_kernel")
    previous_level = kernel_logger.level
    kernel_logger.setLevel(logging.DEBUG)
    kernel_logger.addHandler(capture)

    yield lambda: [json.loads(line) for line in buffer.getvalue().splitlines() if line]

    kernel_logger.removeHandler(capture)
    kernel_logger.setLevel(previous_level)


# -- database ----------------------------------------------------------------


@pytest.fixture
def db_engine():
    """Engine with all tables created; dropped and disposed after the test."""
    engine = init_engine_from_url(os.environ.get("DATABASE_URL", DEFAULT_TEST_DATABASE_URL))
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine):
    """A session on a freshly created schema. The test owns commits."""
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


# -- determinism -------------------------------------------------------------


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 3, 15, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


# -- record factories --------------------------------------------------------


@pytest.fixture
def make_line():
    """Factory for PurchaseLine with sensible defaults."""

    def _make(**overrides) -> PurchaseLine:
        fields = dict(
            order_number="A-100",
            sku="P1",
            purchase_date=date(2024, 3, 1),
            supplier="Acme Wholesale",
            quantity_acquired=1,
            units_per_package=1,
            unit_cost=Decimal("40.00"),
            exchange_rate=Decimal("7300"),
            weight_kg=Decimal("1.000"),
            tracking_us=None,
            tracking_py=None,
        )
        fields.update(overrides)
        return PurchaseLine(**fields)

    return _make


@pytest.fixture
def make_shipment():
    def _make(**overrides) -> LogisticsShipment:
        fields = dict(
            tracking_code="PY-001",
            retrieval_date=date(2024, 3, 10),
            total_retrieval_cost=Decimal("615000"),
        )
        fields.update(overrides)
        return LogisticsShipment(**fields)

    return _make


@pytest.fixture
def make_sale():
    def _make(**overrides) -> SaleLine:
        fields = dict(
            sku="P1",
            quantity_sold=1,
            sale_date=date(2024, 3, 20),
            customer="Maria Gonzalez",
        )
        fields.update(overrides)
        return SaleLine(**fields)

    return _make


@pytest.fixture
def make_product():
    def _make(**overrides) -> Product:
        fields = dict(
            sku="P1",
            name="Protein Bar Box",
            list_price=Decimal("120000"),
        )
        fields.update(overrides)
        return Product(**fields)

    return _make
