"""Tests for the engine tracer decorator and input fingerprints."""

from datetime import date
from decimal import Decimal

from resale_engines.tracer import compute_input_fingerprint, traced_engine


class _Engine:
    @traced_engine("demo", "2.1", fingerprint_fields=("amount", "when"))
    def run(self, amount=None, when=None):
        return amount


def test_fingerprint_is_deterministic():
    kwargs = {"amount": Decimal("10.00"), "when": date(2024, 1, 1)}
    a = compute_input_fingerprint(("amount", "when"), kwargs)
    b = compute_input_fingerprint(("amount", "when"), dict(kwargs))
    assert a == b
    assert len(a) == 16


def test_fingerprint_changes_with_input():
    a = compute_input_fingerprint(("amount",), {"amount": Decimal("10.00")})
    b = compute_input_fingerprint(("amount",), {"amount": Decimal("10.01")})
    assert a != b


def test_dict_key_order_irrelevant():
    a = compute_input_fingerprint(("m",), {"m": {"x": 1, "y": 2}})
    b = compute_input_fingerprint(("m",), {"m": {"y": 2, "x": 1}})
    assert a == b


def test_dataclass_fingerprint_follows_field_values(make_line):
    a = compute_input_fingerprint(("line",), {"line": make_line()})
    b = compute_input_fingerprint(("line",), {"line": make_line()})
    c = compute_input_fingerprint(("line",), {"line": make_line(sku="P2")})
    assert a == b
    assert a != c


def test_missing_field_recorded_as_null():
    assert compute_input_fingerprint(("amount",), {}) == compute_input_fingerprint(
        ("amount",), {"amount": None}
    )


def test_trace_record_emitted(captured_logs):
    result = _Engine().run(amount=Decimal("5"), when=date(2024, 1, 1))
    assert result == Decimal("5")

    traces = [r for r in captured_logs() if r["message"] == "RESALE_ENGINE_TRACE"]
    assert len(traces) == 1
    trace = traces[0]
    assert trace["engine_name"] == "demo"
    assert trace["engine_version"] == "2.1"
    assert trace["function"] == "_Engine.run"
    assert trace["duration_ms"] >= 0


def test_no_trace_on_failure(captured_logs):
    class _Failing:
        @traced_engine("failing", "1.0")
        def run(self):
            raise RuntimeError("nope")

    try:
        _Failing().run()
    except RuntimeError:
        pass
    assert not [r for r in captured_logs() if r["message"] == "RESALE_ENGINE_TRACE"]
