"""Tests for the free-text search predicates."""

from datetime import date
from decimal import Decimal

import pytest

from billing_kernel.domain.entities import Customer, Payment, PaymentMode, Product
from billing_engines.search import (
    customer_matches_search,
    invoice_matches_search,
    payment_matches_search,
    product_matches_search,
)


@pytest.mark.parametrize("term", [None, ""])
def test_blank_term_matches_everything(term, acme, acme_invoice, acme_payment):
    assert invoice_matches_search(acme_invoice, term)
    assert payment_matches_search(acme_payment, term, {}, {})
    assert customer_matches_search(acme, term)
    assert product_matches_search(Product(id="p", name="", price=Decimal("0")), term)


class TestInvoiceSearch:

    @pytest.mark.parametrize("term", ["inv-001", "ACME", "2024-03", "03-10"])
    def test_matches(self, acme_invoice, term):
        assert invoice_matches_search(acme_invoice, term)

    def test_no_match(self, acme_invoice):
        assert not invoice_matches_search(acme_invoice, "globex")


class TestPaymentSearch:

    @pytest.fixture
    def lookups(self, acme, acme_invoice):
        return {acme.id: acme}, {acme_invoice.id: acme_invoice}

    @pytest.mark.parametrize("term", ["acme", "INV-001", "2024-03-15", "120", "upi"])
    def test_matches(self, acme_payment, lookups, term):
        customers, invoices = lookups
        assert payment_matches_search(acme_payment, term, customers, invoices)

    def test_missing_customer_has_no_name_to_match(self, acme_payment):
        assert not payment_matches_search(acme_payment, "acme", {}, {})

    def test_unallocated_payment_has_no_invoice_number(self, acme):
        payment = Payment(
            id="p", date=date(2024, 3, 1), customer_id=acme.id,
            amount=Decimal("5"), payment_mode=PaymentMode.CASH,
        )
        assert not payment_matches_search(payment, "INV", {acme.id: acme}, {})


class TestMasterDataSearch:

    def test_customer_by_name_or_phone(self):
        customer = Customer(id="c", name="Acme Traders", phone="9820012345")
        assert customer_matches_search(customer, "traders")
        assert customer_matches_search(customer, "98200")
        assert not customer_matches_search(customer, "globex")

    def test_product_by_name_description_or_hsn(self):
        product = Product(
            id="p", name="Widget", price=Decimal("1"),
            description="Steel bracket", hsn_code="7326",
        )
        assert product_matches_search(product, "WIDGET")
        assert product_matches_search(product, "steel")
        assert product_matches_search(product, "732")
        assert not product_matches_search(product, "plastic")
