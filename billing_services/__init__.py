"""
billing_services -- Package init and public API.

Responsibility:
    Stateful services that compose the pure billing engines with the
    entity store, the clock and id generation.  This is the **only** layer
    that reads or writes collections or asks for the current date.

Architecture position:
    Services -- imperative shell over engines + kernel.

    Dependency direction:
        billing_services/ -> billing_engines/  (allowed)
        billing_services/ -> billing_kernel/   (allowed)
        billing_engines/  -> billing_services/ (FORBIDDEN)
        billing_kernel/   -> billing_services/ (FORBIDDEN)

Invariants enforced:
    - DI transparency: ``BillingServices.from_config`` is the one place
      that wires store, clock, id generator and policies together; no
      service self-constructs its store.
    - All services built by ``from_config`` share one id generator, so
      ids stay unique across collections within a process.
"""

from __future__ import annotations

from dataclasses import dataclass

from billing_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from billing_kernel.domain.clock import Clock, SystemClock, TimeBasedIdGenerator
from billing_kernel.logging_config import get_logger
from billing_config.schema import BillingConfig
from billing_services.invoice_service import InvoiceService
from billing_services.master_data import CustomerService, ProductService
from billing_services.payment_service import PaymentService
from billing_services.report_service import LedgerReport, ReportService
from billing_services.store import (
    CollectionName,
    EntityStore,
    InMemoryEntityStore,
    SqlEntityStore,
)

logger = get_logger("services")


@dataclass(frozen=True)
class BillingServices:
    """The full set of services sharing one store and clock."""

    store: EntityStore
    clock: Clock
    customers: CustomerService
    products: ProductService
    invoices: InvoiceService
    payments: PaymentService
    reports: ReportService

    @classmethod
    def build(
        cls,
        store: EntityStore,
        clock: Clock,
        config: BillingConfig | None = None,
    ) -> BillingServices:
        """Wire services over an existing store."""
        config = config or BillingConfig()
        ids = TimeBasedIdGenerator(clock)
        return cls(
            store=store,
            clock=clock,
            customers=CustomerService(
                store, clock, ids,
                delete_policy=config.policies.customer_delete_policy,
            ),
            products=ProductService(store, clock, ids),
            invoices=InvoiceService(
                store, clock, ids,
                require_customer=config.policies.require_customer_on_invoice,
                delete_policy=config.policies.invoice_delete_policy,
            ),
            payments=PaymentService(store, clock, ids),
            reports=ReportService(store, clock),
        )

    @classmethod
    def from_config(
        cls,
        config: BillingConfig,
        store: EntityStore | None = None,
        clock: Clock | None = None,
    ) -> BillingServices:
        """
        Wire services from configuration.

        With no ``store`` given, initializes the SQL engine from
        ``config.store``, creates the collection table if needed and uses
        a ``SqlEntityStore``.  With no ``clock`` given, uses the system
        clock.
        """
        if store is None:
            init_engine_from_url(config.store.database_url, echo=config.store.echo)
            create_tables()
            store = SqlEntityStore(get_session_factory())
        services = cls.build(store, clock or SystemClock(), config)
        logger.info("billing_services_ready", extra={
            "store": type(store).__name__,
            "config_checksum": config.checksum or None,
        })
        return services


__all__ = [
    "BillingServices",
    "CollectionName",
    "CustomerService",
    "EntityStore",
    "InMemoryEntityStore",
    "InvoiceService",
    "LedgerReport",
    "PaymentService",
    "ProductService",
    "ReportService",
    "SqlEntityStore",
]
