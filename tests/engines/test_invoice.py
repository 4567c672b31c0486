"""
Tests for the invoice aggregator.

Covers totals, line management on a draft (add/remove/id allocation) and
building the saved Invoice with its frozen customer snapshot.
"""

from datetime import date
from decimal import Decimal

import pytest

from billing_kernel.domain.entities import LineItem, Product
from billing_kernel.exceptions import CustomerRequiredError, EmptyInvoiceError
from billing_engines.invoice import (
    InvoiceDraft,
    add_item,
    build_invoice,
    compute_invoice_totals,
    next_item_id,
    remove_item,
)


@pytest.fixture
def draft():
    """Two lines: 2 x 100 and 1 x 50."""
    d = InvoiceDraft.new(invoice_date=date(2024, 3, 5), invoice_number="INV-001")
    d = d.update_item(1, quantity=2, price="100").add_item()
    return d.update_item(2, quantity=1, price="50")


# ============================================================================
# Totals
# ============================================================================


class TestComputeInvoiceTotals:

    def test_sum_of_line_totals(self, draft):
        totals = compute_invoice_totals(draft.items)
        assert totals.sub_total == Decimal("250")
        assert totals.grand_total == Decimal("250")
        assert totals.tax_amount == Decimal("0")

    def test_empty_is_zero(self):
        totals = compute_invoice_totals([])
        assert totals.grand_total == Decimal("0")

    def test_recompute_is_stable(self, draft):
        assert compute_invoice_totals(draft.items) == compute_invoice_totals(draft.items)

    def test_no_float_drift(self):
        items = [LineItem(id=i, quantity=1, price="0.10") for i in range(1, 4)]
        assert compute_invoice_totals(items).grand_total == Decimal("0.30")

    def test_huge_price_line_counts_as_zero(self, draft):
        draft = draft.add_item().update_item(3, quantity=2, price="9e999999")
        assert draft.get_item(3).total == Decimal("0")
        assert draft.totals.grand_total == Decimal("250")


# ============================================================================
# Line management
# ============================================================================


class TestLineManagement:

    def test_new_draft_has_one_blank_line(self):
        d = InvoiceDraft.new(invoice_date=date(2024, 3, 1))
        assert len(d.items) == 1
        assert d.items[0].id == 1
        assert d.totals.grand_total == Decimal("0")

    def test_next_item_id_is_max_plus_one(self):
        items = [LineItem(id=1), LineItem(id=4)]
        assert next_item_id(items) == 5

    def test_add_item_appends_blank(self):
        items = add_item([LineItem(id=1, quantity=2, price="3")])
        assert [i.id for i in items] == [1, 2]
        assert items[1].quantity == 1
        assert items[1].price == Decimal("0")

    def test_remove_last_line_is_noop(self):
        items = (LineItem(id=1, quantity=2, price="3"),)
        assert remove_item(items, 1) == items

    def test_remove_unknown_id_keeps_lines(self):
        items = (LineItem(id=1), LineItem(id=2))
        assert remove_item(items, 9) == items

    def test_draft_remove_updates_totals(self, draft):
        after = draft.remove_item(2)
        assert [i.id for i in after.items] == [1]
        assert after.totals.grand_total == Decimal("200")

    def test_draft_remove_single_line_returns_same_draft(self):
        d = InvoiceDraft.new(invoice_date=date(2024, 3, 1))
        assert d.remove_item(1) is d

    def test_ids_not_reused_after_deleting_highest(self, draft):
        d = draft.add_item()                      # ids 1, 2, 3
        d = d.remove_item(3)                      # ids 1, 2
        d = d.add_item()
        assert [i.id for i in d.items] == [1, 2, 4]

    def test_update_unknown_line_returns_same_draft(self, draft):
        assert draft.update_item(42, quantity=9) is draft

    def test_select_product_fills_line(self):
        products = [Product(id="p1", name="Widget", price=Decimal("100"))]
        d = InvoiceDraft.new(invoice_date=date(2024, 3, 1))
        d = d.update_item(1, quantity=2).select_product(1, "p1", products)
        assert d.items[0].name == "Widget"
        assert d.totals.grand_total == Decimal("200")

    def test_select_unknown_product_returns_same_draft(self):
        d = InvoiceDraft.new(invoice_date=date(2024, 3, 1))
        assert d.select_product(1, "nope", []) is d


# ============================================================================
# build_invoice
# ============================================================================


class TestBuildInvoice:

    def test_builds_with_snapshot_and_totals(self, draft, acme):
        invoice = build_invoice(draft=draft.with_customer(acme.id), customer=acme, invoice_id="i1")
        assert invoice.id == "i1"
        assert invoice.invoice_number == "INV-001"
        assert invoice.invoice_date == date(2024, 3, 5)
        assert invoice.customer_details == acme.snapshot()
        assert invoice.sub_total == invoice.grand_total == Decimal("250")
        assert invoice.tax_amount == Decimal("0")
        assert sum(i.total for i in invoice.items) == invoice.grand_total

    def test_no_customer_gives_empty_snapshot(self, draft):
        invoice = build_invoice(draft=draft, customer=None, invoice_id="i2")
        assert invoice.customer_details.is_empty
        assert invoice.customer_details.name == ""

    def test_customer_required(self, draft):
        with pytest.raises(CustomerRequiredError) as exc_info:
            build_invoice(draft=draft, customer=None, invoice_id="i3", require_customer=True)
        assert exc_info.value.code == "CUSTOMER_REQUIRED"

    def test_empty_items_rejected(self):
        empty = InvoiceDraft(invoice_date=date(2024, 3, 1), items=())
        with pytest.raises(EmptyInvoiceError):
            build_invoice(draft=empty, customer=None, invoice_id="i4")

    def test_emits_engine_trace(self, draft, captured_logs):
        build_invoice(draft=draft, customer=None, invoice_id="i6")
        traces = [r for r in captured_logs() if r["message"] == "BILLING_ENGINE_TRACE"]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "invoice"
        assert len(traces[0]["input_fingerprint"]) == 16
