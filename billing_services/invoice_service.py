"""
Service layer for invoices.

Starts drafts dated from the injected clock, saves drafts as immutable
invoices (freezing the selected customer's details), and lists, searches
and deletes saved invoices.
"""

from __future__ import annotations

from billing_kernel.domain.clock import Clock, TimeBasedIdGenerator
from billing_kernel.domain.entities import Customer, Invoice, Payment
from billing_kernel.domain.policies import DeletePolicy
from billing_kernel.exceptions import HasDependentsError
from billing_kernel.logging_config import LogContext, get_logger
from billing_engines.invoice import InvoiceDraft, build_invoice
from billing_engines.ledger import filter_invoices
from billing_services.base import BaseService
from billing_services.store import CollectionName, EntityStore

logger = get_logger("services.invoice")


class InvoiceService(BaseService):
    """
    Service for creating and managing invoices.

    Contract:
        A saved invoice is never edited: customer edits, product edits and
        deletions leave it exactly as saved.
    """

    def __init__(
        self,
        store: EntityStore,
        clock: Clock,
        id_generator: TimeBasedIdGenerator | None = None,
        require_customer: bool = False,
        delete_policy: DeletePolicy = DeletePolicy.ORPHAN,
    ):
        super().__init__(store)
        self.clock = clock
        self.id_generator = id_generator or TimeBasedIdGenerator(clock)
        self.require_customer = require_customer
        self.delete_policy = delete_policy

    def _invoices(self) -> list[Invoice]:
        return self._load(CollectionName.INVOICES, Invoice.from_record)

    def new_draft(self, invoice_number: str = "") -> InvoiceDraft:
        """A fresh draft dated today with one blank line."""
        return InvoiceDraft.new(invoice_date=self.clock.today(), invoice_number=invoice_number)

    def _resolve_customer(self, customer_id: str) -> Customer | None:
        if not customer_id:
            return None
        customers = self._load(CollectionName.CUSTOMERS, Customer.from_record)
        customer = next((c for c in customers if c.id == customer_id), None)
        if customer is None:
            logger.warning("invoice_customer_not_found", extra={
                "selected_customer_id": customer_id,
            })
        return customer

    def save_invoice(self, draft: InvoiceDraft) -> Invoice:
        """
        Freeze ``draft`` into an invoice and append it to the collection.

        The draft's customer id is resolved against the stored customers; an
        id that no longer resolves is a soft miss and the invoice carries an
        empty customer snapshot (unless customers are required).

        Raises:
            EmptyInvoiceError: The draft has no line items.
            CustomerRequiredError: No resolvable customer while
                ``require_customer`` is set.
            StoreWriteError: The collection could not be saved.
        """
        invoice_id = self.id_generator.next_id()
        with LogContext.bind(invoice_id=invoice_id):
            invoice = build_invoice(
                draft=draft,
                customer=self._resolve_customer(draft.customer_id),
                invoice_id=invoice_id,
                require_customer=self.require_customer,
            )
            self._save(CollectionName.INVOICES, [*self._invoices(), invoice])
            logger.info("invoice_saved", extra={
                "invoice_number": invoice.invoice_number,
                "grand_total": str(invoice.grand_total),
            })
        return invoice

    def list_invoices(self, search: str | None = None) -> list[Invoice]:
        """Saved invoices in insertion order, optionally narrowed by search."""
        return list(filter_invoices(self._invoices(), search=search))

    def get_invoice(self, invoice_id: str) -> Invoice | None:
        return next((i for i in self._invoices() if i.id == invoice_id), None)

    def invoices_for_customer(self, customer_id: str) -> list[Invoice]:
        """Invoices whose frozen customer id matches; feeds payment allocation."""
        return list(filter_invoices(self._invoices(), customer_id=customer_id))

    def delete_invoice(self, invoice_id: str) -> bool:
        """
        Remove an invoice.

        Returns:
            True if an invoice was removed, False if none had that id.

        Raises:
            HasDependentsError: Under BLOCK, when payments are linked to it.
        """
        invoices = self._invoices()
        remaining = [i for i in invoices if i.id != invoice_id]
        if len(remaining) == len(invoices):
            return False

        payments = self._load(CollectionName.PAYMENTS, Payment.from_record)
        linked = sum(1 for p in payments if p.invoice_id == invoice_id)
        if linked and self.delete_policy == DeletePolicy.BLOCK:
            raise HasDependentsError(
                CollectionName.INVOICES.value, invoice_id, {"payments": linked},
            )

        self._save(CollectionName.INVOICES, remaining)
        if linked:
            logger.warning("invoice_deleted_with_dependents", extra={
                "invoice_id": invoice_id,
                "linked_payments": linked,
            })
        else:
            logger.info("invoice_deleted", extra={"invoice_id": invoice_id})
        return True
