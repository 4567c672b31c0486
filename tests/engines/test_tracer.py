"""Tests for the engine trace decorator and input fingerprinting."""

from datetime import date
from decimal import Decimal

from billing_engines.ledger import DateRange
from billing_engines.tracer import compute_input_fingerprint, traced_engine


def test_fingerprint_deterministic():
    kwargs = {"date_range": DateRange(date(2024, 3, 1), date(2024, 3, 31)), "customer_id": "c1"}
    first = compute_input_fingerprint(("date_range", "customer_id"), kwargs)
    second = compute_input_fingerprint(("date_range", "customer_id"), dict(kwargs))
    assert first == second
    assert len(first) == 16


def test_fingerprint_changes_with_input():
    a = compute_input_fingerprint(("amount",), {"amount": Decimal("1.00")})
    b = compute_input_fingerprint(("amount",), {"amount": Decimal("1.01")})
    assert a != b


def test_missing_field_is_null():
    assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(("x",), {"x": None})


def test_decorator_logs_and_returns(captured_logs):
    @traced_engine("demo", "2.1", fingerprint_fields=("value",))
    def double(value):
        return value * 2

    assert double(value=Decimal("2")) == Decimal("4")

    traces = [r for r in captured_logs() if r["message"] == "BILLING_ENGINE_TRACE"]
    assert len(traces) == 1
    trace = traces[0]
    assert trace["trace_type"] == "BILLING_ENGINE_TRACE"
    assert trace["engine_name"] == "demo"
    assert trace["engine_version"] == "2.1"
    assert trace["function"].endswith("double")
    assert trace["duration_ms"] >= 0
