"""
Module: billing_engines.search
Responsibility:
    Free-text search predicates used by the list views: invoices, payments,
    customers and products.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - An empty or blank search term matches every record.
    - Names, invoice numbers and payment modes match case-insensitively;
      dates, amounts, phone numbers and HSN codes match as plain substrings.
    - Predicates are independent of the date/customer filters in
      ``billing_engines.ledger`` and compose with them freely.
"""

from __future__ import annotations

from typing import Mapping

from billing_kernel.domain.entities import Customer, Invoice, Payment, Product


def _blank(term: str | None) -> bool:
    return term is None or term == ""


def _contains_folded(haystack: str, term: str) -> bool:
    return term.lower() in haystack.lower()


def invoice_matches_search(invoice: Invoice, term: str | None) -> bool:
    """Match invoice number, snapshot customer name, or the invoice date."""
    if _blank(term):
        return True
    invoice_date = invoice.invoice_date.isoformat() if invoice.invoice_date else ""
    return (
        _contains_folded(invoice.invoice_number, term)
        or _contains_folded(invoice.customer_details.name, term)
        or term in invoice_date
    )


def payment_matches_search(
    payment: Payment,
    term: str | None,
    customers_by_id: Mapping[str, Customer],
    invoices_by_id: Mapping[str, Invoice],
) -> bool:
    """
    Match customer name, invoice number, date, amount or payment mode.

    The customer name and invoice number are resolved through the given
    lookups; a payment whose customer or invoice no longer exists simply
    has nothing to match on those fields.
    """
    if _blank(term):
        return True
    customer = customers_by_id.get(payment.customer_id)
    invoice = invoices_by_id.get(payment.invoice_id) if payment.invoice_id else None
    payment_date = payment.date.isoformat() if payment.date else ""
    return (
        (customer is not None and _contains_folded(customer.name, term))
        or (invoice is not None and _contains_folded(invoice.invoice_number, term))
        or term in payment_date
        or term in str(payment.amount)
        or _contains_folded(payment.payment_mode.value, term)
    )


def customer_matches_search(customer: Customer, term: str | None) -> bool:
    """Match customer name (case-insensitive) or phone substring."""
    if _blank(term):
        return True
    return _contains_folded(customer.name, term) or term in customer.phone


def product_matches_search(product: Product, term: str | None) -> bool:
    """Match product name or description (case-insensitive) or HSN code."""
    if _blank(term):
        return True
    return (
        _contains_folded(product.name, term)
        or _contains_folded(product.description, term)
        or term in product.hsn_code
    )
