"""
Module: billing_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    billing_services and the scripts.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import billing_kernel (domain, exceptions, logging).
    MUST NOT import billing_services or billing_config.

Invariants enforced:
    - Purity: engines never read the clock; dates come in as parameters.
    - Decimal-only arithmetic for every amount.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Invoice building, ledger queries and customer summaries are traced via
    ``@traced_engine`` (see ``billing_engines.tracer``), emitting
    BILLING_ENGINE_TRACE log records.
"""

from billing_engines.customer_summary import CustomerSummary, build_customer_summary
from billing_engines.invoice import (
    InvoiceDraft,
    InvoiceTotals,
    add_item,
    build_invoice,
    compute_invoice_totals,
    next_item_id,
    remove_item,
    replace_item,
)
from billing_engines.ledger import (
    DateRange,
    LedgerResult,
    filter_invoices,
    filter_payments,
    query_ledger,
)
from billing_engines.line_items import (
    LineItemChange,
    LineItemOutcome,
    apply_product,
    compute_line_total,
    new_line_item,
    update_item,
)
from billing_engines.search import (
    customer_matches_search,
    invoice_matches_search,
    payment_matches_search,
    product_matches_search,
)
from billing_engines.tracer import traced_engine

__all__ = [
    # Line items
    "LineItemChange",
    "LineItemOutcome",
    "apply_product",
    "compute_line_total",
    "new_line_item",
    "update_item",
    # Invoice
    "InvoiceDraft",
    "InvoiceTotals",
    "add_item",
    "build_invoice",
    "compute_invoice_totals",
    "next_item_id",
    "remove_item",
    "replace_item",
    # Ledger
    "DateRange",
    "LedgerResult",
    "filter_invoices",
    "filter_payments",
    "query_ledger",
    # Customer summary
    "CustomerSummary",
    "build_customer_summary",
    # Search
    "customer_matches_search",
    "invoice_matches_search",
    "payment_matches_search",
    "product_matches_search",
    # Tracing
    "traced_engine",
]
