"""Tests for the frozen billing entities and their stored record encoding."""

from dataclasses import FrozenInstanceError, replace
from datetime import date
from decimal import Decimal

import pytest

from billing_kernel.domain.entities import (
    EMPTY_SNAPSHOT,
    Customer,
    CustomerSnapshot,
    Invoice,
    LineItem,
    Payment,
    PaymentMode,
    Product,
)


class TestLineItem:

    def test_total_is_quantity_times_price(self):
        item = LineItem(id=1, quantity=3, price=Decimal("12.50"))
        assert item.total == Decimal("37.50")

    def test_inputs_coerced_on_construction(self):
        item = LineItem(id=1, quantity="2.9", price="abc")
        assert item.quantity == 2
        assert item.price == Decimal("0")
        assert item.total == Decimal("0")

    def test_replace_recomputes_total(self):
        item = LineItem(id=1, quantity=2, price=Decimal("100"))
        assert replace(item, quantity=5).total == Decimal("500")

    def test_frozen(self):
        item = LineItem(id=1)
        with pytest.raises(FrozenInstanceError):
            item.quantity = 4

    def test_record_carries_derived_total(self):
        record = LineItem(id=2, product_id="p1", name="Widget", quantity=2, price=Decimal("100")).to_record()
        assert record == {
            "id": 2,
            "productId": "p1",
            "name": "Widget",
            "quantity": 2,
            "price": "100",
            "total": "200",
        }

    def test_stored_total_is_ignored_on_read(self):
        item = LineItem.from_record({"id": 1, "quantity": 2, "price": "10", "total": "999"})
        assert item.total == Decimal("20")


class TestCustomerSnapshot:

    def test_snapshot_copies_details(self, acme):
        snap = acme.snapshot()
        assert snap == CustomerSnapshot(id="c1", name="Acme", address="1 Main St", phone="555-0100")

    def test_snapshot_unaffected_by_later_edit(self, acme):
        snap = acme.snapshot()
        renamed = replace(acme, name="Acme Corp")
        assert snap.name == "Acme"
        assert renamed.snapshot().name == "Acme Corp"

    def test_empty_snapshot(self):
        assert EMPTY_SNAPSHOT.is_empty
        assert CustomerSnapshot.from_record(None) == EMPTY_SNAPSHOT


class TestInvoiceRecord:

    def test_round_trip(self, acme_invoice):
        assert Invoice.from_record(acme_invoice.to_record()) == acme_invoice

    def test_camel_case_keys(self, acme_invoice):
        record = acme_invoice.to_record()
        assert record["invoiceNumber"] == "INV-001"
        assert record["invoiceDate"] == "2024-03-10"
        assert record["customerDetails"]["name"] == "Acme"
        assert record["grandTotal"] == "250"
        assert record["taxAmount"] == "0"

    def test_timestamp_date_read_as_calendar_date(self, acme_invoice):
        record = acme_invoice.to_record() | {"invoiceDate": "2024-03-10T09:15:00Z"}
        assert Invoice.from_record(record).invoice_date == date(2024, 3, 10)

    def test_unreadable_fields_tolerated(self):
        invoice = Invoice.from_record({"id": "x", "invoiceDate": "soon", "grandTotal": "n/a"})
        assert invoice.invoice_date is None
        assert invoice.grand_total == Decimal("0")
        assert invoice.items == ()
        assert invoice.customer_details.is_empty

    @pytest.mark.parametrize("details", ["Acme", ["c1"], 42])
    def test_non_object_customer_details_read_as_empty(self, acme_invoice, details):
        record = acme_invoice.to_record() | {"customerDetails": details}
        assert Invoice.from_record(record).customer_details == EMPTY_SNAPSHOT

    def test_non_object_items_skipped(self, acme_invoice):
        good = acme_invoice.to_record()["items"]
        record = acme_invoice.to_record() | {"items": [None, good[0], "x", 7, good[1]]}
        assert Invoice.from_record(record).items == acme_invoice.items

    def test_items_not_a_list_read_as_empty(self, acme_invoice):
        record = acme_invoice.to_record() | {"items": "Widget x2"}
        invoice = Invoice.from_record(record)
        assert invoice.items == ()
        assert invoice.grand_total == Decimal("250")


class TestPaymentRecord:

    def test_round_trip(self, acme_payment):
        assert Payment.from_record(acme_payment.to_record()) == acme_payment

    def test_unallocated(self):
        payment = Payment(id="p", date=date(2024, 3, 1), customer_id="c1", amount=Decimal("5"))
        assert payment.is_unallocated
        assert payment.to_record()["invoiceId"] == ""

    def test_unknown_mode_reads_as_other(self, acme_payment):
        record = acme_payment.to_record() | {"paymentMode": "Barter"}
        assert Payment.from_record(record).payment_mode == PaymentMode.OTHER


def test_product_record_keys():
    product = Product(id="p1", name="Widget", price=Decimal("100"), product_code="W1", hsn_code="7326")
    record = product.to_record()
    assert record["productCode"] == "W1"
    assert record["hsnCode"] == "7326"
    assert Product.from_record(record) == product


def test_customer_round_trip():
    customer = Customer(id="c9", name="Zed")
    assert Customer.from_record(customer.to_record()) == customer
