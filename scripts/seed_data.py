#!/usr/bin/env python3
"""
Seed the configured store with a small, realistic billing history.

Replaces the customers, products, invoices and payments collections with
two customers, three products, three invoices and three payments dated in
March 2024, recorded through the services so every validation runs.

Usage:
    python3 scripts/seed_data.py
    python3 scripts/seed_data.py --config billing.yaml
"""

import argparse
import logging
import sys
from datetime import UTC, date, datetime
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
SEED_TIME = datetime(2024, 3, 20, 12, 0, 0, tzinfo=UTC)


def _invoice(services, number, day, customer_id, lines):
    """Build and save one invoice; ``lines`` is (product, quantity) pairs."""
    from billing_engines.invoice import InvoiceDraft

    products = services.products.list_products()
    draft = InvoiceDraft.new(invoice_date=day, invoice_number=number).with_customer(customer_id)
    for index, (product, quantity) in enumerate(lines):
        if index:
            draft = draft.add_item()
        item_id = draft.items[-1].id
        draft = draft.select_product(item_id, product.id, products)
        draft = draft.update_item(item_id, quantity=quantity)
    return services.invoices.save_invoice(draft)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed demo billing data.")
    parser.add_argument(
        "--config", type=Path, default=None,
        help="YAML config file merged over the packaged defaults",
    )
    args = parser.parse_args(argv)

    logging.disable(logging.CRITICAL)

    from billing_config import get_active_config
    from billing_kernel.domain.clock import DeterministicClock
    from billing_services import BillingServices, CollectionName

    config = get_active_config(args.config)
    clock = DeterministicClock(SEED_TIME)

    print()
    print(f"  [1/4] Connecting to {config.store.database_url} ...")
    services = BillingServices.from_config(config, clock=clock)

    print("  [2/4] Clearing collections...")
    for name in CollectionName:
        services.store.save_collection(name, [])

    print("  [3/4] Creating customers and products...")
    acme = services.customers.create_customer(
        "Acme Traders", address="12 Market Road, Pune", phone="9820012345",
    )
    globex = services.customers.create_customer(
        "Globex Supplies", address="4 Dock Street, Mumbai", phone="9930054321",
    )
    widget = services.products.create_product(
        "Widget", "100", product_code="WID-01", description="Steel widget", hsn_code="7326",
    )
    gadget = services.products.create_product(
        "Gadget", "50", product_code="GAD-01", description="Plastic gadget", hsn_code="3926",
    )
    bracket = services.products.create_product(
        "Bracket", "12.50", product_code="BRK-01", description="Wall bracket", hsn_code="7326",
    )

    print("  [4/4] Posting invoices and payments...")
    inv1 = _invoice(services, "INV-001", date(2024, 3, 5), acme.id, [(widget, 2), (gadget, 1)])
    inv2 = _invoice(services, "INV-002", date(2024, 3, 12), globex.id, [(bracket, 8)])
    _invoice(services, "INV-003", date(2024, 3, 18), acme.id, [(gadget, 3)])

    services.payments.save_payment(
        acme.id, "120", date(2024, 3, 10),
        invoice_id=inv1.id, payment_mode="UPI", reference="UPI-88213",
    )
    services.payments.save_payment(
        globex.id, "100", date(2024, 3, 15),
        invoice_id=inv2.id, payment_mode="Cheque", reference="CHQ-004512",
    )
    services.payments.save_payment(
        acme.id, "25", date(2024, 3, 19), payment_mode="Cash", notes="Advance",
    )

    report = services.reports.ledger_report()
    print()
    print(f"  Seeded {report.ledger.invoice_count} invoices and "
          f"{report.ledger.payment_count} payments.")
    print(f"  Outstanding for {report.date_range.start} to {report.date_range.end}: "
          f"{config.display.currency_symbol}{report.ledger.outstanding}")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
