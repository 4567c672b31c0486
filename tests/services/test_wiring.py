"""Tests for BillingServices wiring from configuration."""

from datetime import date
from decimal import Decimal

import pytest

from billing_config.schema import BillingConfig, PolicySettings, StoreSettings
from billing_kernel.db.engine import reset_engine
from billing_kernel.domain.policies import DeletePolicy
from billing_kernel.exceptions import HasDependentsError
from billing_services import BillingServices, SqlEntityStore


@pytest.fixture
def sqlite_config(tmp_path):
    config = BillingConfig(store=StoreSettings(database_url=f"sqlite:///{tmp_path / 'wired.db'}"))
    yield config
    reset_engine()


def test_from_config_uses_sql_store(sqlite_config, deterministic_clock):
    services = BillingServices.from_config(sqlite_config, clock=deterministic_clock)
    assert isinstance(services.store, SqlEntityStore)

    customer = services.customers.create_customer("Acme")
    draft = services.invoices.new_draft("INV-9").with_customer(customer.id)
    invoice = services.invoices.save_invoice(draft.update_item(1, quantity=3, price="40"))
    services.payments.save_payment(customer.id, "100", invoice_id=invoice.id)

    report = services.reports.ledger_report()
    assert report.ledger.total_sales == Decimal("120")
    assert report.ledger.outstanding == Decimal("20")


def test_data_persists_across_wirings(sqlite_config, deterministic_clock):
    first = BillingServices.from_config(sqlite_config, clock=deterministic_clock)
    first.customers.create_customer("Acme")
    second = BillingServices.from_config(sqlite_config, clock=deterministic_clock)
    assert [c.name for c in second.customers.list_customers()] == ["Acme"]


def test_policies_applied(acme_store, deterministic_clock):
    config = BillingConfig(policies=PolicySettings(
        require_customer_on_invoice=True,
        customer_delete_policy=DeletePolicy.BLOCK,
        invoice_delete_policy=DeletePolicy.BLOCK,
    ))
    services = BillingServices.from_config(config, store=acme_store, clock=deterministic_clock)
    assert services.invoices.require_customer is True
    with pytest.raises(HasDependentsError):
        services.customers.delete_customer("c1")
    with pytest.raises(HasDependentsError):
        services.invoices.delete_invoice("i1")


def test_shared_id_generator_gives_distinct_ids(services):
    customer = services.customers.create_customer("Acme")
    product = services.products.create_product("Widget", "1")
    payment = services.payments.save_payment(customer.id, "1", date(2024, 3, 1))
    assert len({customer.id, product.id, payment.id}) == 3


def test_default_clock_is_system(acme_store):
    services = BillingServices.from_config(BillingConfig(), store=acme_store)
    assert services.clock.now().tzinfo is not None
