"""
ReportService -- ledger report assembly for renderers and scripts.

Responsibility:
    Loads customers, invoices and payments, runs the ledger query and the
    customer summary over them, and shapes presentation rows for the
    sales and payment tables.

Architecture position:
    Services -- imperative shell.  All arithmetic is delegated to
    ``billing_engines``; this module only loads, wires and labels.

Invariants enforced:
    - Row lists follow the ledger's filtered sets one-to-one, in order.
    - Sales rows show the invoice's frozen customer name; payment rows
      show the payment's current customer name.
    - With no date range given, the report covers the first day of the
      clock's current month through today.

Failure modes:
    - InvalidDateRangeError propagates from ``DateRange``.
    - Collections that could not be read show up in ``degraded_collections``
      instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from billing_kernel.domain.clock import Clock
from billing_kernel.domain.entities import Customer, Invoice, Payment
from billing_kernel.logging_config import get_logger
from billing_engines.customer_summary import CustomerSummary, build_customer_summary
from billing_engines.ledger import DateRange, LedgerResult, query_ledger
from billing_services.store import CollectionName, EntityStore

logger = get_logger("services.report")

UNKNOWN_CUSTOMER = "Unknown"
NO_INVOICE = "N/A"
NO_REFERENCE = "-"


@dataclass(frozen=True)
class SalesReportRow:
    invoice_number: str
    invoice_date: date | None
    customer_name: str
    amount: Decimal


@dataclass(frozen=True)
class PaymentReportRow:
    payment_date: date | None
    customer_name: str
    invoice_number: str
    payment_mode: str
    reference: str
    amount: Decimal


@dataclass(frozen=True)
class LedgerReport:
    """Everything the report screen shows for one filter selection."""

    date_range: DateRange
    customer_id: str | None
    ledger: LedgerResult
    customer_summary: tuple[CustomerSummary, ...]
    sales_rows: tuple[SalesReportRow, ...]
    payment_rows: tuple[PaymentReportRow, ...]
    degraded_collections: tuple[CollectionName, ...] = ()

    @property
    def is_degraded(self) -> bool:
        return bool(self.degraded_collections)


class ReportService:
    """Builds ledger reports from the entity store."""

    def __init__(self, store: EntityStore, clock: Clock):
        self.store = store
        self.clock = clock

    def default_date_range(self) -> DateRange:
        return DateRange.month_to_date(self.clock.today())

    def ledger_report(
        self,
        date_range: DateRange | None = None,
        customer_id: str | None = None,
    ) -> LedgerReport:
        """
        Build the ledger report for a date range and optional customer.

        Args:
            date_range: Inclusive range; None for month-to-date.
            customer_id: Restrict to one customer; None or "" for all.
        """
        date_range = date_range or self.default_date_range()

        snapshots = {
            name: self.store.read_collection(name)
            for name in (
                CollectionName.CUSTOMERS,
                CollectionName.INVOICES,
                CollectionName.PAYMENTS,
            )
        }
        degraded = tuple(name for name, snap in snapshots.items() if snap.is_degraded)
        if degraded:
            logger.warning("ledger_report_degraded", extra={
                "collections": [name.value for name in degraded],
            })

        customers = [
            Customer.from_record(r) for r in snapshots[CollectionName.CUSTOMERS].records
        ]
        invoices = [
            Invoice.from_record(r) for r in snapshots[CollectionName.INVOICES].records
        ]
        payments = [
            Payment.from_record(r) for r in snapshots[CollectionName.PAYMENTS].records
        ]

        ledger = query_ledger(
            invoices=invoices,
            payments=payments,
            date_range=date_range,
            customer_id=customer_id,
        )
        summary = build_customer_summary(
            customers=customers,
            filtered_invoices=ledger.filtered_invoices,
            filtered_payments=ledger.filtered_payments,
        )

        customers_by_id = {c.id: c for c in customers}
        invoices_by_id = {i.id: i for i in invoices}

        return LedgerReport(
            date_range=date_range,
            customer_id=customer_id or None,
            ledger=ledger,
            customer_summary=summary,
            sales_rows=tuple(sales_row(i) for i in ledger.filtered_invoices),
            payment_rows=tuple(
                payment_row(p, customers_by_id, invoices_by_id)
                for p in ledger.filtered_payments
            ),
            degraded_collections=degraded,
        )


def sales_row(invoice: Invoice) -> SalesReportRow:
    return SalesReportRow(
        invoice_number=invoice.invoice_number,
        invoice_date=invoice.invoice_date,
        customer_name=invoice.customer_details.name,
        amount=invoice.grand_total,
    )


def payment_row(
    payment: Payment,
    customers_by_id: dict[str, Customer],
    invoices_by_id: dict[str, Invoice],
) -> PaymentReportRow:
    """Label a payment with its customer's current name and linked invoice."""
    customer = customers_by_id.get(payment.customer_id)
    invoice = invoices_by_id.get(payment.invoice_id) if payment.invoice_id else None
    return PaymentReportRow(
        payment_date=payment.date,
        customer_name=customer.name if customer is not None else UNKNOWN_CUSTOMER,
        invoice_number=invoice.invoice_number if invoice is not None else NO_INVOICE,
        payment_mode=payment.payment_mode.value,
        reference=payment.reference or NO_REFERENCE,
        amount=payment.amount,
    )
