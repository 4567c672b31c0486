#!/usr/bin/env python3
"""
View the ledger report from persisted billing data.

Loads configuration, connects to the configured store (run seed_data.py
first for demo data) and prints the ledger totals followed by the sales,
payment or customer summary table.

Usage:
    python3 scripts/billing_report.py
    python3 scripts/billing_report.py --start 2024-03-01 --end 2024-03-31
    python3 scripts/billing_report.py --report customer --config billing.yaml
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

# ===================================================================
# Pretty-print helpers
# ===================================================================

W = 78  # total line width
AMT_W = 14  # amount column width


def _hdr(title: str, subtitle: str = "") -> str:
    lines = ["", "=" * W, title.center(W)]
    if subtitle:
        lines.append(subtitle.center(W))
    lines.append("=" * W)
    return "\n".join(lines)


def _fmt(amount, symbol: str) -> str:
    from billing_kernel.domain.values import format_amount

    return f"{symbol}{format_amount(amount)}"


def _day(value) -> str:
    return value.isoformat() if value is not None else ""


def print_totals(report, symbol: str) -> None:
    ledger = report.ledger
    print(f"  {'Total Sales':<{W - AMT_W - 2}}{_fmt(ledger.total_sales, symbol):>{AMT_W}}")
    print(f"  {'Total Payments':<{W - AMT_W - 2}}{_fmt(ledger.total_payments, symbol):>{AMT_W}}")
    print(f"  {'Outstanding':<{W - AMT_W - 2}}{_fmt(ledger.outstanding, symbol):>{AMT_W}}")
    print()


def print_sales(report, symbol: str) -> None:
    print(f"  {'Invoice #':<14}{'Date':<12}{'Customer':<{W - 40}}{'Amount':>{AMT_W}}")
    print(f"  {'-' * (W - 2)}")
    if not report.sales_rows:
        print("  No invoices found for the selected period.")
    for row in report.sales_rows:
        print(
            f"  {row.invoice_number:<14}{_day(row.invoice_date):<12}"
            f"{row.customer_name:<{W - 40}}{_fmt(row.amount, symbol):>{AMT_W}}"
        )
    print()


def print_payments(report, symbol: str) -> None:
    print(
        f"  {'Date':<12}{'Customer':<20}{'Invoice #':<12}"
        f"{'Mode':<14}{'Reference':<{W - 72}}{'Amount':>{AMT_W}}"
    )
    print(f"  {'-' * (W - 2)}")
    if not report.payment_rows:
        print("  No payments found for the selected period.")
    for row in report.payment_rows:
        print(
            f"  {_day(row.payment_date):<12}{row.customer_name[:19]:<20}"
            f"{row.invoice_number:<12}{row.payment_mode:<14}"
            f"{row.reference[:W - 73]:<{W - 72}}{_fmt(row.amount, symbol):>{AMT_W}}"
        )
    print()


def print_customer_summary(report, symbol: str) -> None:
    name_w = W - 8 - 3 * AMT_W - 2
    print(
        f"  {'Customer':<{name_w}}{'Invoices':>8}{'Invoiced':>{AMT_W}}"
        f"{'Paid':>{AMT_W}}{'Balance':>{AMT_W}}"
    )
    print(f"  {'-' * (W - 2)}")
    if not report.customer_summary:
        print("  No customer activity in the selected period.")
    for line in report.customer_summary:
        print(
            f"  {line.name[:name_w - 1]:<{name_w}}{line.invoice_count:>8}"
            f"{_fmt(line.total_invoice_amount, symbol):>{AMT_W}}"
            f"{_fmt(line.total_payment_amount, symbol):>{AMT_W}}"
            f"{_fmt(line.balance, symbol):>{AMT_W}}"
        )
    print()


# ===================================================================
# Entry point
# ===================================================================


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print the billing ledger report.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  python3 scripts/billing_report.py --start 2024-03-01 --end 2024-03-31\n"
            "  python3 scripts/billing_report.py --report payments --customer 1710936000000\n"
        ),
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help="YAML config file merged over the packaged defaults",
    )
    parser.add_argument(
        "--start", type=date.fromisoformat, default=None,
        help="First day of the range (YYYY-MM-DD, default: first of this month)",
    )
    parser.add_argument(
        "--end", type=date.fromisoformat, default=None,
        help="Last day of the range (YYYY-MM-DD, default: today)",
    )
    parser.add_argument(
        "--customer", type=str, default=None,
        help="Restrict the report to one customer id",
    )
    parser.add_argument(
        "--report", choices=("sales", "payments", "customer"), default="sales",
        help="Which table to print under the totals (default: sales)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    logging.disable(logging.CRITICAL)

    from billing_config import get_active_config
    from billing_engines.ledger import DateRange
    from billing_kernel.exceptions import BillingError
    from billing_services import BillingServices

    config = get_active_config(args.config)
    services = BillingServices.from_config(config)

    date_range = None
    if args.start is not None or args.end is not None:
        default = services.reports.default_date_range()
        try:
            date_range = DateRange(
                start=args.start or default.start,
                end=args.end or default.end,
            )
        except BillingError as exc:
            print(f"  ERROR: {exc}", file=sys.stderr)
            return 2

    report = services.reports.ledger_report(date_range=date_range, customer_id=args.customer)
    symbol = config.display.currency_symbol

    subtitle = f"{report.date_range.start} to {report.date_range.end}"
    if config.company.name:
        subtitle = f"{subtitle}  |  {config.company.name}"
    print(_hdr("LEDGER REPORT", subtitle))
    if report.is_degraded:
        names = ", ".join(name.value for name in report.degraded_collections)
        print(f"  WARNING: could not read {names}; totals may be incomplete.")
        print()

    print_totals(report, symbol)
    if args.report == "sales":
        print_sales(report, symbol)
    elif args.report == "payments":
        print_payments(report, symbol)
    else:
        print_customer_summary(report, symbol)
    return 0


if __name__ == "__main__":
    sys.exit(main())
