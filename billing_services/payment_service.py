"""
PaymentService -- record, edit, list and delete customer payments.

Responsibility:
    Validates payment input, resolves the optional invoice allocation
    against the paying customer's invoices, and upserts the payment by id.

Architecture position:
    Services -- imperative shell.

Invariants enforced:
    - A stored payment always has a customer id, a positive amount and a
      readable date.
    - A payment's invoice link, when set, names an invoice of the same
      customer at the time it was saved. Moving a payment to another
      customer never carries the old customer's invoice link along.

Failure modes:
    - MissingPaymentFieldsError: customer, amount or date missing.
    - InvalidPaymentAmountError: amount not a positive number.
    - InvalidPaymentModeError: mode outside PaymentMode.
    - StoreWriteError: the collection could not be saved.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from billing_kernel.domain.clock import Clock, TimeBasedIdGenerator
from billing_kernel.domain.entities import Customer, Invoice, Payment, PaymentMode
from billing_kernel.domain.values import parse_calendar_date, parse_decimal
from billing_kernel.exceptions import (
    InvalidPaymentAmountError,
    InvalidPaymentModeError,
    MissingPaymentFieldsError,
)
from billing_kernel.logging_config import LogContext, get_logger
from billing_engines.ledger import filter_payments
from billing_services.base import BaseService
from billing_services.store import CollectionName, EntityStore

logger = get_logger("services.payment")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _payment_mode(value: PaymentMode | str) -> PaymentMode:
    try:
        return PaymentMode(value)
    except ValueError:
        raise InvalidPaymentModeError(str(value)) from None


class PaymentService(BaseService):
    """Service for recording payments against customers and invoices."""

    def __init__(
        self,
        store: EntityStore,
        clock: Clock,
        id_generator: TimeBasedIdGenerator | None = None,
    ):
        super().__init__(store)
        self.clock = clock
        self.id_generator = id_generator or TimeBasedIdGenerator(clock)

    def _payments(self) -> list[Payment]:
        return self._load(CollectionName.PAYMENTS, Payment.from_record)

    def _resolve_invoice_link(
        self,
        payment_id: str,
        customer_id: str,
        requested: str,
        previous: str,
    ) -> str:
        if not requested:
            return ""
        invoices = self._load(CollectionName.INVOICES, Invoice.from_record)
        owned = {i.id for i in invoices if i.customer_id == customer_id}
        if requested in owned:
            return requested
        # a link to another customer's invoice is dropped, not kept
        kept = previous if previous in owned else ""
        logger.warning("payment_invoice_not_found", extra={
            "payment_id": payment_id,
            "requested_invoice_id": requested,
            "kept_invoice_id": kept,
        })
        return kept

    def save_payment(
        self,
        customer_id: str,
        amount: Any,
        payment_date: date | str | None = None,
        invoice_id: str = "",
        payment_mode: PaymentMode | str = PaymentMode.CASH,
        reference: str = "",
        notes: str = "",
        payment_id: str | None = None,
    ) -> Payment:
        """
        Create a payment, or replace the stored payment with ``payment_id``.

        Args:
            customer_id: Paying customer; required.
            amount: Positive amount (Decimal, number or numeric text).
            payment_date: Calendar date or ISO text.  None means today;
                an explicit blank string counts as missing.
            invoice_id: Invoice of the same customer to allocate against,
                or "" for an unallocated payment.
            payment_id: Id of an existing payment to edit.  None (or an id
                not in the store) records a new payment.

        Returns:
            The stored Payment.
        """
        payment_id = payment_id or self.id_generator.next_id()
        if payment_date is None:
            payment_date = self.clock.today()

        missing = [
            field_name
            for field_name, value in (
                ("customerId", customer_id),
                ("amount", amount),
                ("date", payment_date),
            )
            if _is_blank(value)
        ]
        if missing:
            raise MissingPaymentFieldsError(payment_id, missing)

        parsed_amount = parse_decimal(amount)
        if parsed_amount is None or parsed_amount <= 0:
            raise InvalidPaymentAmountError(payment_id, str(amount))

        parsed_date = parse_calendar_date(payment_date)
        if parsed_date is None:
            raise MissingPaymentFieldsError(payment_id, ["date"])

        mode = _payment_mode(payment_mode)

        payments = self._payments()
        existing = next((p for p in payments if p.id == payment_id), None)

        with LogContext.bind(customer_id=customer_id):
            payment = Payment(
                id=payment_id,
                date=parsed_date,
                customer_id=customer_id,
                amount=parsed_amount,
                invoice_id=self._resolve_invoice_link(
                    payment_id,
                    customer_id,
                    invoice_id,
                    existing.invoice_id if existing is not None else "",
                ),
                payment_mode=mode,
                reference=reference,
                notes=notes,
            )

            if existing is None:
                self._save(CollectionName.PAYMENTS, [*payments, payment])
                logger.info("payment_recorded", extra={
                    "payment_id": payment.id,
                    "amount": str(payment.amount),
                    "unallocated": payment.is_unallocated,
                })
            else:
                self._save(
                    CollectionName.PAYMENTS,
                    [payment if p.id == payment.id else p for p in payments],
                )
                logger.info("payment_updated", extra={
                    "payment_id": payment.id,
                    "amount": str(payment.amount),
                })
        return payment

    def list_payments(self, search: str | None = None) -> list[Payment]:
        """
        Stored payments, optionally narrowed by search.

        The search term matches the payment's current customer name, the
        number of its linked invoice, its date, amount or mode.
        """
        payments = self._payments()
        if not search:
            return payments
        return list(filter_payments(
            payments,
            search=search,
            customers=self._load(CollectionName.CUSTOMERS, Customer.from_record),
            invoices=self._load(CollectionName.INVOICES, Invoice.from_record),
        ))

    def get_payment(self, payment_id: str) -> Payment | None:
        return next((p for p in self._payments() if p.id == payment_id), None)

    def delete_payment(self, payment_id: str) -> bool:
        """Remove a payment.  Returns False if none had that id."""
        payments = self._payments()
        remaining = [p for p in payments if p.id != payment_id]
        if len(remaining) == len(payments):
            return False
        self._save(CollectionName.PAYMENTS, remaining)
        logger.info("payment_deleted", extra={"payment_id": payment_id})
        return True
