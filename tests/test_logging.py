"""
Tests for resale_kernel.logging_config.

Covers:
- JSON line shape and extra fields
- LogContext merge, bind/restore and field validation
- Exception payloads from ResaleKernelError subclasses
- configure_logging idempotence
"""

import json
import logging
import sys
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from resale_kernel.exceptions import InvalidRecordError
from resale_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture
def log_stream():
    """Fresh logging configuration writing into a StringIO; restored afterwards."""
    reset_logging()
    stream = StringIO()
    configure_logging(stream=stream)
    yield stream
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _records(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestStructuredFormatter:

    def test_line_shape(self, log_stream):
        get_logger("test").info("landed_cost_calculated", extra={"line_count": 3})

        (record,) = _records(log_stream)
        assert record["level"] == "INFO"
        assert record["logger"] == "resale_kernel.test"
        assert record["message"] == "landed_cost_calculated"
        assert record["line_count"] == 3
        assert "ts" in record

    def test_non_json_values(self, log_stream):
        uid = uuid4()
        get_logger("test").info("values", extra={
            "record_id": uid,
            "factor": Decimal("41000.00"),
            "retrieval_date": date(2024, 3, 10),
        })

        (record,) = _records(log_stream)
        assert record["record_id"] == str(uid)
        assert record["factor"] == "41000.00"
        assert record["retrieval_date"] == "2024-03-10"

    def test_default_level_drops_debug(self, log_stream):
        logger = get_logger("test")
        logger.debug("hidden")
        logger.warning("shown")
        assert [r["message"] for r in _records(log_stream)] == ["shown"]

    def test_context_merged_into_record(self, log_stream):
        with LogContext.bind(order_number="A-100", sku="P1"):
            get_logger("test").info("inside")
        get_logger("test").info("outside")

        inside, outside = _records(log_stream)
        assert inside["order_number"] == "A-100"
        assert inside["sku"] == "P1"
        assert "order_number" not in outside

    def test_kernel_error_fields(self, log_stream):
        try:
            raise InvalidRecordError("PurchaseLine", "weight_kg", Decimal("-1"), "cannot be negative")
        except InvalidRecordError:
            get_logger("test").error("record_error", exc_info=True)

        (record,) = _records(log_stream)
        assert record["exc_type"] == "InvalidRecordError"
        assert record["exc_code"] == "INVALID_RECORD"
        assert record["exc_record_type"] == "PurchaseLine"
        assert record["exc_field"] == "weight_kg"
        assert record["exc_value"] == "-1"
        assert "traceback" in record

    def test_plain_exception(self):
        formatter = StructuredFormatter()
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("resale_kernel.t", logging.ERROR, "", 0, "failed", (), sys.exc_info())
        payload = json.loads(formatter.format(record))
        assert payload["exc_type"] == "ValueError"
        assert payload["exc_message"] == "boom"
        assert "exc_code" not in payload


class TestLogContext:

    def test_set_merges(self):
        LogContext.set(correlation_id="x")
        LogContext.set(sku="P1", tracking_code=None)
        assert LogContext.get_all() == {"correlation_id": "x", "sku": "P1"}

    def test_clear(self):
        LogContext.set(actor_id="admin")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_restores_outer_value(self):
        LogContext.set(tracking_code="outer")
        with LogContext.bind(tracking_code="inner"):
            assert LogContext.get_all()["tracking_code"] == "inner"
        assert LogContext.get_all()["tracking_code"] == "outer"

    def test_bind_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(order_number="A-1"):
                raise RuntimeError("fail")
        assert LogContext.get_all() == {}

    def test_bind_skips_none(self):
        with LogContext.bind(order_number=None, sku="P1"):
            assert LogContext.get_all() == {"sku": "P1"}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            LogContext.set(customer="Ana")


class TestConfigureLogging:

    def test_idempotent(self, log_stream):
        configure_logging(stream=StringIO())
        assert len(logging.getLogger("resale_kernel").handlers) == 1

    def test_does_not_propagate(self, log_stream):
        assert logging.getLogger("resale_kernel").propagate is False

    def test_child_logger_name(self):
        assert get_logger("engines.landed_cost").name == "resale_kernel.engines.landed_cost"
