"""
Service layer for customer and product master data.

Create, edit, delete and search the customers and products that invoices
and payments draw on.  Validation runs before any write; a rejected save
leaves the stored collection unchanged.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any

from billing_kernel.domain.clock import Clock, TimeBasedIdGenerator
from billing_kernel.domain.entities import Customer, Invoice, Payment, Product
from billing_kernel.domain.policies import DeletePolicy
from billing_kernel.domain.values import parse_decimal
from billing_kernel.exceptions import (
    CustomerNameRequiredError,
    HasDependentsError,
    InvalidPriceError,
    ProductNameRequiredError,
)
from billing_kernel.logging_config import get_logger
from billing_engines.search import customer_matches_search, product_matches_search
from billing_services.base import BaseService
from billing_services.store import CollectionName, EntityStore

logger = get_logger("services.master_data")


class CustomerService(BaseService):
    """
    Service for managing customers.

    Deleting a customer runs under ``delete_policy``: ORPHAN deletes
    unconditionally (existing invoices keep their snapshot, payments keep
    the dangling id); BLOCK refuses while invoices or payments refer to it.
    """

    def __init__(
        self,
        store: EntityStore,
        clock: Clock,
        id_generator: TimeBasedIdGenerator | None = None,
        delete_policy: DeletePolicy = DeletePolicy.ORPHAN,
    ):
        super().__init__(store)
        self.clock = clock
        self.id_generator = id_generator or TimeBasedIdGenerator(clock)
        self.delete_policy = delete_policy

    def _customers(self) -> list[Customer]:
        return self._load(CollectionName.CUSTOMERS, Customer.from_record)

    @staticmethod
    def _validate(customer: Customer) -> None:
        if not customer.name.strip():
            raise CustomerNameRequiredError(customer.id)

    def list_customers(self, search: str | None = None) -> list[Customer]:
        """All customers in insertion order, optionally narrowed by search."""
        return [c for c in self._customers() if customer_matches_search(c, search)]

    def get_customer(self, customer_id: str) -> Customer | None:
        return next((c for c in self._customers() if c.id == customer_id), None)

    def create_customer(self, name: str, address: str = "", phone: str = "") -> Customer:
        """
        Add a customer with a freshly generated id.

        Raises:
            CustomerNameRequiredError: If ``name`` is blank.
            StoreWriteError: If the collection could not be saved.
        """
        customer = Customer(
            id=self.id_generator.next_id(),
            name=name,
            address=address,
            phone=phone,
        )
        self._validate(customer)

        self._save(CollectionName.CUSTOMERS, [*self._customers(), customer])
        logger.info("customer_created", extra={"customer_id": customer.id})
        return customer

    def update_customer(self, customer: Customer) -> Customer | None:
        """
        Replace the stored customer with the same id.

        Existing invoices are not touched; they keep the snapshot taken
        when they were saved.

        Returns:
            The stored customer, or None when no customer has that id
            (soft miss, nothing written).
        """
        self._validate(customer)

        customers = self._customers()
        if not any(c.id == customer.id for c in customers):
            logger.warning("customer_update_missed", extra={"customer_id": customer.id})
            return None

        self._save(
            CollectionName.CUSTOMERS,
            [customer if c.id == customer.id else c for c in customers],
        )
        logger.info("customer_updated", extra={"customer_id": customer.id})
        return customer

    def _dependents(self, customer_id: str) -> dict[str, int]:
        invoices = self._load(CollectionName.INVOICES, Invoice.from_record)
        payments = self._load(CollectionName.PAYMENTS, Payment.from_record)
        return {
            "invoices": sum(1 for i in invoices if i.customer_details.id == customer_id),
            "payments": sum(1 for p in payments if p.customer_id == customer_id),
        }

    def delete_customer(self, customer_id: str) -> bool:
        """
        Remove a customer.

        Returns:
            True if a customer was removed, False if none had that id.

        Raises:
            HasDependentsError: Under BLOCK, when invoices or payments refer
                to the customer.
        """
        customers = self._customers()
        remaining = [c for c in customers if c.id != customer_id]
        if len(remaining) == len(customers):
            return False

        dependents = {k: v for k, v in self._dependents(customer_id).items() if v}
        if dependents and self.delete_policy == DeletePolicy.BLOCK:
            raise HasDependentsError(CollectionName.CUSTOMERS.value, customer_id, dependents)

        self._save(CollectionName.CUSTOMERS, remaining)
        if dependents:
            logger.warning("customer_deleted_with_dependents", extra={
                "customer_id": customer_id,
                "dependents": dependents,
            })
        else:
            logger.info("customer_deleted", extra={"customer_id": customer_id})
        return True


class ProductService(BaseService):
    """
    Service for managing products.

    Products carry no dependents: invoice lines copy name and price at
    selection time, so deleting or repricing a product never changes an
    invoice.
    """

    def __init__(
        self,
        store: EntityStore,
        clock: Clock,
        id_generator: TimeBasedIdGenerator | None = None,
    ):
        super().__init__(store)
        self.clock = clock
        self.id_generator = id_generator or TimeBasedIdGenerator(clock)

    def _products(self) -> list[Product]:
        return self._load(CollectionName.PRODUCTS, Product.from_record)

    @staticmethod
    def _validated(product_id: str, name: str, price: Any) -> Decimal:
        if not name.strip():
            raise ProductNameRequiredError(product_id)
        parsed = parse_decimal(price)
        if parsed is None or parsed < 0:
            raise InvalidPriceError(product_id, "" if price is None else str(price))
        return parsed

    def list_products(self, search: str | None = None) -> list[Product]:
        return [p for p in self._products() if product_matches_search(p, search)]

    def get_product(self, product_id: str) -> Product | None:
        return next((p for p in self._products() if p.id == product_id), None)

    def create_product(
        self,
        name: str,
        price: Any,
        product_code: str = "",
        description: str = "",
        hsn_code: str = "",
    ) -> Product:
        """
        Add a product with a freshly generated id.

        Raises:
            ProductNameRequiredError: If ``name`` is blank.
            InvalidPriceError: If ``price`` is missing, non-numeric or negative.
            StoreWriteError: If the collection could not be saved.
        """
        product_id = self.id_generator.next_id()
        product = Product(
            id=product_id,
            product_code=product_code,
            name=name,
            description=description,
            price=self._validated(product_id, name, price),
            hsn_code=hsn_code,
        )

        self._save(CollectionName.PRODUCTS, [*self._products(), product])
        logger.info("product_created", extra={"product_id": product.id})
        return product

    def update_product(self, product: Product) -> Product | None:
        """
        Replace the stored product with the same id.

        Returns:
            The stored product, or None when no product has that id
            (soft miss, nothing written).
        """
        product = replace(
            product,
            price=self._validated(product.id, product.name, product.price),
        )

        products = self._products()
        if not any(p.id == product.id for p in products):
            logger.warning("product_update_missed", extra={"product_id": product.id})
            return None

        self._save(
            CollectionName.PRODUCTS,
            [product if p.id == product.id else p for p in products],
        )
        logger.info("product_updated", extra={"product_id": product.id})
        return product

    def delete_product(self, product_id: str) -> bool:
        """Remove a product.  Returns False if none had that id."""
        products = self._products()
        remaining = [p for p in products if p.id != product_id]
        if len(remaining) == len(products):
            return False
        self._save(CollectionName.PRODUCTS, remaining)
        logger.info("product_deleted", extra={"product_id": product_id})
        return True
