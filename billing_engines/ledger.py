"""
Module: billing_engines.ledger
Responsibility:
    Filter invoices and payments by date range and/or customer and compute
    total sales, total payments and the outstanding amount over the
    filtered sets.  Also composes those filters with free-text search for
    the list views.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import billing_kernel.domain, sibling engines and the tracer.

Invariants enforced:
    - Date range is inclusive at both ends and compared by calendar date, so
      a record dated on ``end`` is included whatever its time of day.
    - Customer filter uses the invoice's frozen ``customer_details.id`` and
      the payment's ``customer_id``.
    - ``outstanding == total_sales - total_payments`` and both totals are
      sums over exactly the filtered sets returned alongside them.
    - Unallocated payments (no invoice link) count like any other payment.
    - Input order is preserved in the filtered sets.

Failure modes:
    - InvalidDateRangeError when ``start`` is after ``end``.
    - Records whose date could not be read never fall inside a date range;
      with no date range they are included.

Usage:
    from billing_engines.ledger import DateRange, query_ledger

    result = query_ledger(
        invoices=invoices,
        payments=payments,
        date_range=DateRange(date(2024, 3, 1), date(2024, 3, 31)),
        customer_id="c1",
    )
    result.outstanding
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Sequence

from billing_kernel.domain.entities import Customer, Invoice, Payment
from billing_kernel.domain.values import ZERO
from billing_kernel.exceptions import InvalidDateRangeError
from billing_kernel.logging_config import get_logger
from billing_engines.search import invoice_matches_search, payment_matches_search
from billing_engines.tracer import traced_engine

logger = get_logger("engines.ledger")


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive calendar date range ``[start, end]``.

    Guarantees:
        - start <= end.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidDateRangeError(self.start.isoformat(), self.end.isoformat())

    def contains(self, day: date | None) -> bool:
        if day is None:
            return False
        return self.start <= day <= self.end

    @classmethod
    def month_to_date(cls, today: date) -> DateRange:
        """First day of ``today``'s month through ``today``."""
        return cls(start=today.replace(day=1), end=today)


@dataclass(frozen=True)
class LedgerResult:
    """
    Filtered invoices and payments with their aggregate totals.

    Guarantees:
        - ``total_sales == sum(i.grand_total for i in filtered_invoices)``.
        - ``total_payments == sum(p.amount for p in filtered_payments)``.
        - ``outstanding == total_sales - total_payments``.
    """

    filtered_invoices: tuple[Invoice, ...]
    filtered_payments: tuple[Payment, ...]
    total_sales: Decimal
    total_payments: Decimal
    outstanding: Decimal

    @property
    def invoice_count(self) -> int:
        return len(self.filtered_invoices)

    @property
    def payment_count(self) -> int:
        return len(self.filtered_payments)


def sum_grand_totals(invoices: Sequence[Invoice]) -> Decimal:
    return sum((invoice.grand_total for invoice in invoices), ZERO)


def sum_payment_amounts(payments: Sequence[Payment]) -> Decimal:
    return sum((payment.amount for payment in payments), ZERO)


def invoice_in_scope(
    invoice: Invoice,
    date_range: DateRange | None,
    customer_id: str | None,
) -> bool:
    """Date and customer predicate for one invoice."""
    if date_range is not None and not date_range.contains(invoice.invoice_date):
        return False
    if customer_id and invoice.customer_details.id != customer_id:
        return False
    return True


def payment_in_scope(
    payment: Payment,
    date_range: DateRange | None,
    customer_id: str | None,
) -> bool:
    """Date and customer predicate for one payment."""
    if date_range is not None and not date_range.contains(payment.date):
        return False
    if customer_id and payment.customer_id != customer_id:
        return False
    return True


def filter_invoices(
    invoices: Sequence[Invoice],
    date_range: DateRange | None = None,
    customer_id: str | None = None,
    search: str | None = None,
) -> tuple[Invoice, ...]:
    """Invoices passing the date, customer and search predicates, in order."""
    return tuple(
        invoice
        for invoice in invoices
        if invoice_in_scope(invoice, date_range, customer_id)
        and invoice_matches_search(invoice, search)
    )


def filter_payments(
    payments: Sequence[Payment],
    date_range: DateRange | None = None,
    customer_id: str | None = None,
    search: str | None = None,
    customers: Sequence[Customer] = (),
    invoices: Sequence[Invoice] = (),
) -> tuple[Payment, ...]:
    """
    Payments passing the date, customer and search predicates, in order.

    ``customers`` and ``invoices`` are only consulted by the search
    predicate, to resolve customer names and invoice numbers.
    """
    customers_by_id = {customer.id: customer for customer in customers}
    invoices_by_id = {invoice.id: invoice for invoice in invoices}
    return tuple(
        payment
        for payment in payments
        if payment_in_scope(payment, date_range, customer_id)
        and payment_matches_search(payment, search, customers_by_id, invoices_by_id)
    )


@traced_engine("ledger", "1.0", fingerprint_fields=("date_range", "customer_id"))
def query_ledger(
    invoices: Sequence[Invoice],
    payments: Sequence[Payment],
    date_range: DateRange | None,
    customer_id: str | None = None,
) -> LedgerResult:
    """
    Filter invoices and payments and total them.

    Args:
        invoices: All invoices, in store order.
        payments: All payments, in store order.
        date_range: Inclusive range, or None for no date filter.
        customer_id: Restrict to one customer; None or "" for all.

    Returns:
        LedgerResult whose totals reconcile with its filtered sets.
    """
    t0 = time.monotonic()

    filtered_invoices = filter_invoices(invoices, date_range, customer_id)
    filtered_payments = filter_payments(payments, date_range, customer_id)

    total_sales = sum_grand_totals(filtered_invoices)
    total_payments = sum_payment_amounts(filtered_payments)

    duration_ms = round((time.monotonic() - t0) * 1000, 2)
    logger.info("ledger_query_completed", extra={
        "start_date": date_range.start.isoformat() if date_range else None,
        "end_date": date_range.end.isoformat() if date_range else None,
        "filter_customer_id": customer_id or None,
        "invoice_count": len(filtered_invoices),
        "payment_count": len(filtered_payments),
        "total_sales": str(total_sales),
        "total_payments": str(total_payments),
        "duration_ms": duration_ms,
    })

    return LedgerResult(
        filtered_invoices=filtered_invoices,
        filtered_payments=filtered_payments,
        total_sales=total_sales,
        total_payments=total_payments,
        outstanding=total_sales - total_payments,
    )
