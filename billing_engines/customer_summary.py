"""
Module: billing_engines.customer_summary
Responsibility:
    Combine filtered invoices and payments into a per-customer balance
    sheet: invoice count, invoiced amount, paid amount and balance.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``balance == total_invoice_amount - total_payment_amount``.
    - A customer appears iff it has at least one invoice or a positive
      payment total in the filtered sets.
    - Output follows the order of the ``customers`` argument.
    - Over the same filtered sets with no customer filter, the summary's
      invoice and payment totals sum to the ledger's totals for every
      record whose customer still exists.

Failure modes:
    - None.  Invoices and payments whose customer is not in ``customers``
      are left out of the summary (they still count in the ledger totals).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from billing_kernel.domain.entities import Customer, Invoice, Payment
from billing_kernel.domain.values import ZERO
from billing_kernel.logging_config import get_logger
from billing_engines.tracer import traced_engine

logger = get_logger("engines.customer_summary")


@dataclass(frozen=True)
class CustomerSummary:
    """One customer's line in the customer summary report."""

    customer_id: str
    name: str
    invoice_count: int
    total_invoice_amount: Decimal
    total_payment_amount: Decimal
    balance: Decimal


@traced_engine("customer_summary", "1.0", fingerprint_fields=("customers",))
def build_customer_summary(
    customers: Sequence[Customer],
    filtered_invoices: Sequence[Invoice],
    filtered_payments: Sequence[Payment],
) -> tuple[CustomerSummary, ...]:
    """
    Build the per-customer summary over already-filtered records.

    Postconditions:
        - One entry per customer with ``invoice_count > 0`` or
          ``total_payment_amount > 0``, in ``customers`` order.
    """
    invoices_by_customer: dict[str, list[Invoice]] = defaultdict(list)
    for invoice in filtered_invoices:
        invoices_by_customer[invoice.customer_details.id].append(invoice)

    payments_by_customer: dict[str, list[Payment]] = defaultdict(list)
    for payment in filtered_payments:
        payments_by_customer[payment.customer_id].append(payment)

    summaries: list[CustomerSummary] = []
    for customer in customers:
        customer_invoices = invoices_by_customer.get(customer.id, [])
        customer_payments = payments_by_customer.get(customer.id, [])

        invoiced = sum((i.grand_total for i in customer_invoices), ZERO)
        paid = sum((p.amount for p in customer_payments), ZERO)

        if not customer_invoices and paid <= 0:
            continue

        summaries.append(CustomerSummary(
            customer_id=customer.id,
            name=customer.name,
            invoice_count=len(customer_invoices),
            total_invoice_amount=invoiced,
            total_payment_amount=paid,
            balance=invoiced - paid,
        ))

    logger.debug("customer_summary_built", extra={
        "customer_count": len(customers),
        "summary_count": len(summaries),
    })
    return tuple(summaries)
