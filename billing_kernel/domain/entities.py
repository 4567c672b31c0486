"""
Entities -- immutable billing records and their stored encoding.

Responsibility:
    Defines Customer, Product, LineItem, CustomerSnapshot, Invoice and
    Payment as frozen dataclasses, plus their conversion to and from the
    plain camelCase dicts held by the entity store.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    May only import billing_kernel.domain.values.

Invariants enforced:
    - ``LineItem.total == quantity * price`` always: the total is derived,
      never stored independently.
    - Invoices embed a ``CustomerSnapshot`` taken at save time; nothing
      here links an invoice back to a live Customer.
    - Amounts are Decimal; quantities are non-negative integers.

Failure modes:
    - ``from_record`` never raises on missing keys; absent text fields read
      as ``""`` and unreadable amounts as zero. Unreadable dates read as
      ``None`` and such records fall outside every date range.
    - Nested values of the wrong shape never raise either: a
      ``customerDetails`` that is not an object reads as an empty snapshot,
      and ``items`` entries that are not objects are skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from billing_kernel.domain.values import (
    ZERO,
    decimal_or_zero,
    parse_calendar_date,
    parse_non_negative_number,
    parse_quantity,
)


def _text(record: dict[str, Any], key: str) -> str:
    value = record.get(key)
    return "" if value is None else str(value)


def _mapping(value: Any) -> dict[str, Any]:
    """A nested stored object, or an empty one when it has the wrong shape."""
    return value if isinstance(value, dict) else {}


def _iso(value: date | None) -> str:
    return value.isoformat() if value is not None else ""


class PaymentMode(str, Enum):
    """Supported ways a customer can pay."""

    CASH = "Cash"
    CHEQUE = "Cheque"
    BANK_TRANSFER = "Bank Transfer"
    UPI = "UPI"
    OTHER = "Other"


@dataclass(frozen=True)
class CustomerSnapshot:
    """
    Copy of a customer's details frozen into an invoice at save time.

    Later edits or deletion of the Customer never reach an existing
    snapshot. All fields are empty strings when no customer was selected.
    """

    id: str = ""
    name: str = ""
    address: str = ""
    phone: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.id

    def to_record(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
        }

    @classmethod
    def from_record(cls, record: Any) -> CustomerSnapshot:
        record = _mapping(record)
        return cls(
            id=_text(record, "id"),
            name=_text(record, "name"),
            address=_text(record, "address"),
            phone=_text(record, "phone"),
        )


EMPTY_SNAPSHOT = CustomerSnapshot()


@dataclass(frozen=True)
class Customer:
    """A customer that can be invoiced and can pay."""

    id: str
    name: str
    address: str = ""
    phone: str = ""

    def snapshot(self) -> CustomerSnapshot:
        """Freeze the current details for embedding in an invoice."""
        return CustomerSnapshot(
            id=self.id,
            name=self.name,
            address=self.address,
            phone=self.phone,
        )

    def to_record(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Customer:
        return cls(
            id=_text(record, "id"),
            name=_text(record, "name"),
            address=_text(record, "address"),
            phone=_text(record, "phone"),
        )


@dataclass(frozen=True)
class Product:
    """A sellable product; ``price`` is the default unit price for line items."""

    id: str
    name: str
    price: Decimal
    product_code: str = ""
    description: str = ""
    hsn_code: str = ""

    def to_record(self) -> dict[str, str]:
        return {
            "id": self.id,
            "productCode": self.product_code,
            "name": self.name,
            "description": self.description,
            "price": str(self.price),
            "hsnCode": self.hsn_code,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Product:
        return cls(
            id=_text(record, "id"),
            product_code=_text(record, "productCode"),
            name=_text(record, "name"),
            description=_text(record, "description"),
            price=decimal_or_zero(record.get("price")),
            hsn_code=_text(record, "hsnCode"),
        )


@dataclass(frozen=True)
class LineItem:
    """
    One product/quantity/price row of an invoice.

    Contract:
        ``quantity`` and ``price`` are coerced on construction with the
        parse-or-zero rules, so a LineItem always holds a non-negative int
        quantity and a non-negative Decimal price.
    Guarantees:
        - ``total`` is ``quantity * price`` for every instance.
    """

    id: int
    product_id: str = ""
    name: str = ""
    quantity: int = 1
    price: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", parse_quantity(self.quantity))
        object.__setattr__(self, "price", parse_non_negative_number(self.price))

    @property
    def total(self) -> Decimal:
        return Decimal(self.quantity) * self.price

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "productId": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "price": str(self.price),
            "total": str(self.total),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> LineItem:
        return cls(
            id=parse_quantity(record.get("id")),
            product_id=_text(record, "productId"),
            name=_text(record, "name"),
            quantity=record.get("quantity"),
            price=record.get("price"),
        )


@dataclass(frozen=True)
class Invoice:
    """
    A saved invoice.

    Guarantees (for invoices produced by ``billing_engines.invoice``):
        - ``sub_total == grand_total == sum(item.total for item in items)``.
        - ``tax_amount`` is zero.
    """

    id: str
    invoice_number: str
    invoice_date: date | None
    customer_details: CustomerSnapshot
    items: tuple[LineItem, ...]
    sub_total: Decimal
    grand_total: Decimal
    tax_amount: Decimal = ZERO

    @property
    def customer_id(self) -> str:
        return self.customer_details.id

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "invoiceNumber": self.invoice_number,
            "invoiceDate": _iso(self.invoice_date),
            "customerDetails": self.customer_details.to_record(),
            "items": [item.to_record() for item in self.items],
            "subTotal": str(self.sub_total),
            "taxAmount": str(self.tax_amount),
            "grandTotal": str(self.grand_total),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Invoice:
        stored_items = record.get("items")
        if not isinstance(stored_items, list):
            stored_items = []
        return cls(
            id=_text(record, "id"),
            invoice_number=_text(record, "invoiceNumber"),
            invoice_date=parse_calendar_date(record.get("invoiceDate")),
            customer_details=CustomerSnapshot.from_record(record.get("customerDetails")),
            items=tuple(
                LineItem.from_record(item) for item in stored_items if isinstance(item, dict)
            ),
            sub_total=decimal_or_zero(record.get("subTotal")),
            tax_amount=decimal_or_zero(record.get("taxAmount")),
            grand_total=decimal_or_zero(record.get("grandTotal")),
        )


@dataclass(frozen=True)
class Payment:
    """
    Money received from a customer.

    ``invoice_id == ""`` marks an unallocated payment: a general credit on
    the customer's account rather than a payment against one invoice.
    """

    id: str
    date: date | None
    customer_id: str
    amount: Decimal
    invoice_id: str = ""
    payment_mode: PaymentMode = PaymentMode.CASH
    reference: str = ""
    notes: str = ""

    @property
    def is_unallocated(self) -> bool:
        return not self.invoice_id

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": _iso(self.date),
            "customerId": self.customer_id,
            "invoiceId": self.invoice_id,
            "amount": str(self.amount),
            "paymentMode": self.payment_mode.value,
            "reference": self.reference,
            "notes": self.notes,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Payment:
        mode = _text(record, "paymentMode")
        try:
            payment_mode = PaymentMode(mode)
        except ValueError:
            payment_mode = PaymentMode.OTHER
        return cls(
            id=_text(record, "id"),
            date=parse_calendar_date(record.get("date")),
            customer_id=_text(record, "customerId"),
            invoice_id=_text(record, "invoiceId"),
            amount=decimal_or_zero(record.get("amount")),
            payment_mode=payment_mode,
            reference=_text(record, "reference"),
            notes=_text(record, "notes"),
        )
