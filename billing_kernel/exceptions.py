"""
Typed exception hierarchy for the billing kernel.

Every error has a typed class (catch by type, not message), a class-level
``code`` attribute (machine-readable, API-safe) and structured attributes
carrying the offending data.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BillingError (base)
    |
    +-- ValidationFailedError
    |   +-- CustomerNameRequiredError
    |   +-- ProductNameRequiredError
    |   +-- InvalidPriceError
    |   +-- MissingPaymentFieldsError
    |   +-- InvalidPaymentAmountError
    |   +-- InvalidPaymentModeError
    |   +-- InvalidDateRangeError
    |   +-- EmptyInvoiceError
    |   +-- CustomerRequiredError
    |
    +-- ReferentialIntegrityError
    |   +-- HasDependentsError
    |
    +-- StoreError
        +-- UnknownCollectionError
        +-- StoreWriteError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                      | When Raised
-------------|---------------------------|----------------------------------------
Validation   | CUSTOMER_NAME_REQUIRED    | Customer saved with a blank name
             | PRODUCT_NAME_REQUIRED     | Product saved with a blank name
             | INVALID_PRICE             | Product price missing/non-numeric/negative
             | MISSING_PAYMENT_FIELDS    | Payment without customer, amount or date
             | INVALID_PAYMENT_AMOUNT    | Payment amount not a positive number
             | INVALID_PAYMENT_MODE      | Payment mode outside the fixed set
             | INVALID_DATE_RANGE        | Report start date after end date
             | EMPTY_INVOICE             | Invoice built with no line items
             | CUSTOMER_REQUIRED         | Invoice saved without a customer (opt-in)
-------------|---------------------------|----------------------------------------
Referential  | HAS_DEPENDENTS            | Delete blocked by dependent records
-------------|---------------------------|----------------------------------------
Store        | UNKNOWN_COLLECTION        | Collection name outside the fixed set
             | STORE_WRITE_FAILED        | Collection replacement was not persisted

Referential misses (unknown product id, unknown invoice link) are NOT
exceptions: they are soft misses that leave state unchanged and are logged.
A corrupt stored collection is NOT an exception either: it reads as empty
and is logged as ``collection_corrupt``.
"""


class BillingError(Exception):
    """
    Base exception for all billing kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "BILLING_ERROR"


# Validation failures: rejected before any collection is mutated


class ValidationFailedError(BillingError):
    """Base exception for input validation failures."""

    code: str = "VALIDATION_FAILED"


class CustomerNameRequiredError(ValidationFailedError):
    """Customer name is blank."""

    code: str = "CUSTOMER_NAME_REQUIRED"

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__("Customer name is required")


class ProductNameRequiredError(ValidationFailedError):
    """Product name is blank."""

    code: str = "PRODUCT_NAME_REQUIRED"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Product name is required")


class InvalidPriceError(ValidationFailedError):
    """Product price does not parse to a non-negative number."""

    code: str = "INVALID_PRICE"

    def __init__(self, product_id: str, price: str):
        self.product_id = product_id
        self.price = price
        super().__init__(f"Please enter a valid price: {price!r}")


class MissingPaymentFieldsError(ValidationFailedError):
    """Payment is missing one or more required fields."""

    code: str = "MISSING_PAYMENT_FIELDS"

    def __init__(self, payment_id: str, missing_fields: list[str]):
        self.payment_id = payment_id
        self.missing_fields = missing_fields
        super().__init__(
            f"Please fill all required fields: {', '.join(missing_fields)}"
        )


class InvalidPaymentAmountError(ValidationFailedError):
    """Payment amount is not a positive number."""

    code: str = "INVALID_PAYMENT_AMOUNT"

    def __init__(self, payment_id: str, amount: str):
        self.payment_id = payment_id
        self.amount = amount
        super().__init__(f"Payment amount must be a positive number: {amount!r}")


class InvalidPaymentModeError(ValidationFailedError):
    """Payment mode is not one of the supported modes."""

    code: str = "INVALID_PAYMENT_MODE"

    def __init__(self, payment_mode: str):
        self.payment_mode = payment_mode
        super().__init__(f"Unsupported payment mode: {payment_mode!r}")


class InvalidDateRangeError(ValidationFailedError):
    """Start date falls after end date."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start_date: str, end_date: str):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Start date {start_date} must be on or before end date {end_date}"
        )


class EmptyInvoiceError(ValidationFailedError):
    """Invoice has no line items."""

    code: str = "EMPTY_INVOICE"

    def __init__(self, invoice_number: str):
        self.invoice_number = invoice_number
        super().__init__(f"Invoice {invoice_number!r} must have at least one line item")


class CustomerRequiredError(ValidationFailedError):
    """Invoice saved without a selected customer while customers are required."""

    code: str = "CUSTOMER_REQUIRED"

    def __init__(self, invoice_number: str):
        self.invoice_number = invoice_number
        super().__init__(f"Invoice {invoice_number!r} requires a customer")


# Referential integrity


class ReferentialIntegrityError(BillingError):
    """Base exception for cross-collection reference problems."""

    code: str = "REFERENTIAL_INTEGRITY"


class HasDependentsError(ReferentialIntegrityError):
    """Delete refused because other records still reference the entity."""

    code: str = "HAS_DEPENDENTS"

    def __init__(self, collection: str, entity_id: str, dependents: dict[str, int]):
        self.collection = collection
        self.entity_id = entity_id
        self.dependents = dependents
        summary = ", ".join(f"{count} {name}" for name, count in dependents.items())
        super().__init__(
            f"Cannot delete {collection} record {entity_id}: referenced by {summary}"
        )


# Entity store


class StoreError(BillingError):
    """Base exception for entity store failures."""

    code: str = "STORE_ERROR"


class UnknownCollectionError(StoreError):
    """Collection name is not one of the fixed entity collections."""

    code: str = "UNKNOWN_COLLECTION"

    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(f"Unknown collection: {collection!r}")


class StoreWriteError(StoreError):
    """Replacement of a collection was not persisted."""

    code: str = "STORE_WRITE_FAILED"

    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(f"Failed to save collection: {collection}")
