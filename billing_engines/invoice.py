"""
Module: billing_engines.invoice
Responsibility:
    Derive an invoice's subtotal, tax and grand total from its line items,
    manage the ordered line-item list of an invoice being edited, and build
    the immutable Invoice record at save time.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import billing_kernel.domain, sibling engines and the tracer.

Invariants enforced:
    - ``sub_total == grand_total == sum(item.total)``; ``tax_amount`` is
      always zero (tax is disabled).
    - Recomputing totals on unchanged items yields identical totals.
    - An invoice being edited always has at least one line: removing the
      last line is a no-op.
    - Line ids are never reused within one draft, even after deletion
      (``last_item_id`` is the draft's high-water mark).
    - The customer snapshot is frozen at build time.

Failure modes:
    - EmptyInvoiceError from ``build_invoice`` when there are no lines.
    - CustomerRequiredError from ``build_invoice`` when
      ``require_customer=True`` and no customer was selected.

Usage:
    from billing_engines.invoice import InvoiceDraft, build_invoice

    draft = InvoiceDraft.new(invoice_date=date(2024, 3, 10), invoice_number="INV-1")
    draft = draft.update_item(1, quantity=2, price="100").add_item()
    draft = draft.update_item(2, quantity=1, price="50")
    draft.totals.grand_total                      # Decimal("250")
    invoice = build_invoice(draft=draft, customer=acme, invoice_id="1710057600000")
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Any, Sequence

from billing_kernel.domain.entities import (
    EMPTY_SNAPSHOT,
    Customer,
    Invoice,
    LineItem,
    Product,
)
from billing_kernel.domain.values import ZERO
from billing_kernel.exceptions import CustomerRequiredError, EmptyInvoiceError
from billing_kernel.logging_config import get_logger
from billing_engines.line_items import (
    apply_product,
    compute_line_total,
    new_line_item,
    update_item,
)
from billing_engines.tracer import traced_engine

logger = get_logger("engines.invoice")


@dataclass(frozen=True)
class InvoiceTotals:
    """Subtotal, tax and grand total of an invoice."""

    sub_total: Decimal
    tax_amount: Decimal
    grand_total: Decimal


def compute_invoice_totals(items: Sequence[LineItem]) -> InvoiceTotals:
    """
    Sum line totals into invoice totals.

    Postconditions:
        - ``sub_total == sum(quantity * price)`` exactly (Decimal).
        - ``tax_amount == 0`` and ``grand_total == sub_total``.
    """
    sub_total = sum(
        (compute_line_total(item.quantity, item.price) for item in items),
        ZERO,
    )
    return InvoiceTotals(sub_total=sub_total, tax_amount=ZERO, grand_total=sub_total)


def next_item_id(items: Sequence[LineItem], last_item_id: int = 0) -> int:
    """Id for a new line: one past the highest id ever handed out."""
    highest = max((item.id for item in items), default=0)
    return max(highest, last_item_id) + 1


def add_item(items: Sequence[LineItem], last_item_id: int = 0) -> tuple[LineItem, ...]:
    """Append a blank line with a fresh id."""
    return (*items, new_line_item(next_item_id(items, last_item_id)))


def remove_item(items: Sequence[LineItem], item_id: int) -> tuple[LineItem, ...]:
    """
    Drop the line with ``item_id``.

    A no-op (not an error) when only one line remains or the id is unknown.
    """
    if len(items) <= 1:
        logger.debug("remove_last_item_ignored", extra={"item_id": item_id})
        return tuple(items)
    return tuple(item for item in items if item.id != item_id)


def replace_item(items: Sequence[LineItem], updated: LineItem) -> tuple[LineItem, ...]:
    """Swap in ``updated`` for the line with the same id, keeping order."""
    return tuple(updated if item.id == updated.id else item for item in items)


@dataclass(frozen=True)
class InvoiceDraft:
    """
    An invoice being edited.

    Contract:
        Immutable; every edit returns a new draft.  Totals are derived from
        the current items on demand, so they are recomputed after any edit.
    Guarantees:
        - A draft made by ``new()`` has exactly one blank line with id 1.
        - ``last_item_id`` never decreases.
    """

    invoice_date: date | None
    invoice_number: str = ""
    customer_id: str = ""
    items: tuple[LineItem, ...] = field(default_factory=lambda: (new_line_item(1),))
    last_item_id: int = 1

    @classmethod
    def new(cls, invoice_date: date | None, invoice_number: str = "") -> InvoiceDraft:
        return cls(invoice_date=invoice_date, invoice_number=invoice_number)

    @property
    def totals(self) -> InvoiceTotals:
        return compute_invoice_totals(self.items)

    def get_item(self, item_id: int) -> LineItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    def with_customer(self, customer_id: str) -> InvoiceDraft:
        return replace(self, customer_id=customer_id)

    def add_item(self) -> InvoiceDraft:
        new_id = next_item_id(self.items, self.last_item_id)
        return replace(
            self,
            items=add_item(self.items, self.last_item_id),
            last_item_id=new_id,
        )

    def remove_item(self, item_id: int) -> InvoiceDraft:
        items = remove_item(self.items, item_id)
        if items == self.items:
            return self
        return replace(self, items=items)

    def update_item(
        self,
        item_id: int,
        *,
        quantity: Any = None,
        price: Any = None,
        name: str | None = None,
    ) -> InvoiceDraft:
        item = self.get_item(item_id)
        if item is None:
            return self
        updated = update_item(item, quantity=quantity, price=price, name=name)
        return replace(self, items=replace_item(self.items, updated))

    def select_product(
        self,
        item_id: int,
        product_id: str,
        products: Sequence[Product],
    ) -> InvoiceDraft:
        """
        Fill a line from a product.  Returns this same draft on a soft miss
        (unknown line id, or empty/unknown product id).
        """
        item = self.get_item(item_id)
        if item is None:
            return self
        change = apply_product(item, product_id, products)
        if change.is_soft_miss:
            return self
        return replace(self, items=replace_item(self.items, change.item))


@traced_engine("invoice", "1.0", fingerprint_fields=("draft", "invoice_id"))
def build_invoice(
    draft: InvoiceDraft,
    customer: Customer | None,
    invoice_id: str,
    require_customer: bool = False,
) -> Invoice:
    """
    Freeze a draft into a saved Invoice.

    Preconditions:
        - ``customer`` is the currently selected customer, or None.
    Postconditions:
        - ``customer_details`` is a snapshot of ``customer`` (all empty
          strings when None).
        - Totals satisfy ``sub_total == grand_total == sum(item.total)``.
    Raises:
        EmptyInvoiceError: the draft has no line items.
        CustomerRequiredError: no customer and ``require_customer`` is set.
    """
    if not draft.items:
        raise EmptyInvoiceError(draft.invoice_number)
    if customer is None and require_customer:
        raise CustomerRequiredError(draft.invoice_number)

    totals = compute_invoice_totals(draft.items)
    snapshot = customer.snapshot() if customer is not None else EMPTY_SNAPSHOT

    logger.info("invoice_built", extra={
        "invoice_id": invoice_id,
        "invoice_number": draft.invoice_number,
        "customer_id": snapshot.id,
        "item_count": len(draft.items),
        "grand_total": str(totals.grand_total),
    })

    return Invoice(
        id=invoice_id,
        invoice_number=draft.invoice_number,
        invoice_date=draft.invoice_date,
        customer_details=snapshot,
        items=tuple(draft.items),
        sub_total=totals.sub_total,
        tax_amount=totals.tax_amount,
        grand_total=totals.grand_total,
    )
