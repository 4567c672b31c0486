"""
Pytest fixtures for the billing test suite.

Provides:
- Structured logging configured once per session, with per-test capture
- A deterministic clock (2024-03-20 12:00 UTC) and an in-memory store
- A SQLite-backed store on a temporary file for SQL persistence tests
- The "Acme" scenario: one customer, one March invoice for 250.00 and one
  March payment of 120.00 against it
"""

import json
import logging
from datetime import UTC, date, datetime
from decimal import Decimal
from io import StringIO

import pytest

from billing_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from billing_kernel.domain.clock import DeterministicClock
from billing_kernel.domain.entities import (
    Customer,
    CustomerSnapshot,
    Invoice,
    LineItem,
    Payment,
    PaymentMode,
)
from billing_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from billing_services import BillingServices
from billing_services.store import CollectionName, InMemoryEntityStore, SqlEntityStore

FIXED_TIME = datetime(2024, 3, 20, 12, 0, 0, tzinfo=UTC)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture billing_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, services):
            services.invoices.save_invoice(draft)
            logs = captured_logs()
            assert any(r["message"] == "invoice_saved" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("billing_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Clock and stores
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(FIXED_TIME)


@pytest.fixture
def memory_store():
    return InMemoryEntityStore()


@pytest.fixture
def sql_store(tmp_path):
    """SqlEntityStore over a fresh SQLite file, engine reset afterwards."""
    init_engine_from_url(f"sqlite:///{tmp_path / 'billing.db'}")
    create_tables()
    yield SqlEntityStore(get_session_factory())
    reset_engine()


@pytest.fixture
def services(memory_store, deterministic_clock):
    """Every service wired over the in-memory store and fixed clock."""
    return BillingServices.build(memory_store, deterministic_clock)


# =============================================================================
# Acme scenario
# =============================================================================


@pytest.fixture
def acme():
    return Customer(id="c1", name="Acme", address="1 Main St", phone="555-0100")


@pytest.fixture
def acme_invoice(acme):
    """INV-001 dated 2024-03-10: 2 x 100 + 1 x 50 = 250."""
    items = (
        LineItem(id=1, product_id="p1", name="Widget", quantity=2, price=Decimal("100")),
        LineItem(id=2, product_id="p2", name="Gadget", quantity=1, price=Decimal("50")),
    )
    return Invoice(
        id="i1",
        invoice_number="INV-001",
        invoice_date=date(2024, 3, 10),
        customer_details=acme.snapshot(),
        items=items,
        sub_total=Decimal("250"),
        grand_total=Decimal("250"),
    )


@pytest.fixture
def acme_payment(acme, acme_invoice):
    return Payment(
        id="pay1",
        date=date(2024, 3, 15),
        customer_id=acme.id,
        invoice_id=acme_invoice.id,
        amount=Decimal("120"),
        payment_mode=PaymentMode.UPI,
        reference="UPI-1",
    )


@pytest.fixture
def acme_store(acme, acme_invoice, acme_payment):
    """In-memory store pre-loaded with the Acme scenario."""
    return InMemoryEntityStore({
        CollectionName.CUSTOMERS: [acme.to_record()],
        CollectionName.INVOICES: [acme_invoice.to_record()],
        CollectionName.PAYMENTS: [acme_payment.to_record()],
    })


@pytest.fixture
def acme_services(acme_store, deterministic_clock):
    return BillingServices.build(acme_store, deterministic_clock)


def make_invoice(
    invoice_id: str,
    invoice_date: date | None,
    customer: Customer | None,
    grand_total: str,
    invoice_number: str = "",
) -> Invoice:
    """Single-line invoice whose line total equals ``grand_total``."""
    amount = Decimal(grand_total)
    return Invoice(
        id=invoice_id,
        invoice_number=invoice_number or f"INV-{invoice_id}",
        invoice_date=invoice_date,
        customer_details=customer.snapshot() if customer else CustomerSnapshot(),
        items=(LineItem(id=1, name="Item", quantity=1, price=amount),),
        sub_total=amount,
        grand_total=amount,
    )


def make_payment(
    payment_id: str,
    payment_date: date | None,
    customer_id: str,
    amount: str,
    invoice_id: str = "",
) -> Payment:
    return Payment(
        id=payment_id,
        date=payment_date,
        customer_id=customer_id,
        invoice_id=invoice_id,
        amount=Decimal(amount),
    )
