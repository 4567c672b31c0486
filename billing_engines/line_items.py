"""
Module: billing_engines.line_items
Responsibility:
    Derive a single invoice line's total, coerce its entered quantity and
    price, and copy a product's name and price onto a line.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import billing_kernel.domain and billing_kernel.logging_config.

Invariants enforced:
    - ``total == quantity * price`` after every change.
    - Invalid numeric input collapses to zero (parse-or-zero) instead of
      failing the edit.
    - Product selection copies a snapshot: later product edits never reach
      an existing line.

Failure modes:
    - None raised.  An unknown or empty product id is a soft miss: the line
      comes back unchanged with ``outcome == LineItemOutcome.SOFT_MISS``.

Usage:
    from billing_engines.line_items import apply_product, compute_line_total

    compute_line_total(2, "100")            # Decimal("200")
    change = apply_product(item, "p1", products)
    if change.is_soft_miss:
        ...
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Sequence

from billing_kernel.domain.entities import LineItem, Product
from billing_kernel.domain.values import parse_non_negative_number, parse_quantity
from billing_kernel.logging_config import get_logger

logger = get_logger("engines.line_items")


class LineItemOutcome(str, Enum):
    """Result of an update that depends on resolving a reference."""

    APPLIED = "applied"
    SOFT_MISS = "soft_miss"


@dataclass(frozen=True)
class LineItemChange:
    """
    A line item after an attempted update.

    Contract:
        On SOFT_MISS, ``item`` is the input line, untouched.
    """

    item: LineItem
    outcome: LineItemOutcome

    @property
    def is_soft_miss(self) -> bool:
        return self.outcome == LineItemOutcome.SOFT_MISS


def compute_line_total(quantity: Any, price: Any) -> Decimal:
    """
    Total for one line: ``quantity * price``.

    Both inputs are coerced first, so ``compute_line_total("abc", 10)`` is
    zero rather than an error.
    """
    return Decimal(parse_quantity(quantity)) * parse_non_negative_number(price)


def new_line_item(item_id: int) -> LineItem:
    """A blank line: no product, quantity 1, price 0."""
    return LineItem(id=item_id, product_id="", name="", quantity=1, price=Decimal("0"))


def update_item(
    item: LineItem,
    *,
    quantity: Any = None,
    price: Any = None,
    name: str | None = None,
) -> LineItem:
    """
    Apply edited fields to a line.  Fields left as None keep their value.

    Quantity and price go through parse-or-zero; the total follows.
    """
    changes: dict[str, Any] = {}
    if quantity is not None:
        changes["quantity"] = parse_quantity(quantity)
    if price is not None:
        changes["price"] = parse_non_negative_number(price)
    if name is not None:
        changes["name"] = name
    if not changes:
        return item
    return replace(item, **changes)


def apply_product(
    item: LineItem,
    product_id: str,
    products: Sequence[Product],
) -> LineItemChange:
    """
    Copy a product's name and price onto a line and recompute its total.

    Postconditions:
        - APPLIED: ``product_id``, ``name`` and ``price`` come from the
          product; quantity is kept.
        - SOFT_MISS: the product id is empty or not in ``products``; the
          line is returned unchanged.
    """
    if not product_id:
        return LineItemChange(item=item, outcome=LineItemOutcome.SOFT_MISS)

    product = next((p for p in products if p.id == product_id), None)
    if product is None:
        logger.warning("product_not_found", extra={
            "line_item_id": item.id,
            "product_id": product_id,
            "product_count": len(products),
        })
        return LineItemChange(item=item, outcome=LineItemOutcome.SOFT_MISS)

    updated = replace(
        item,
        product_id=product.id,
        name=product.name,
        price=parse_non_negative_number(product.price),
    )
    logger.debug("product_applied", extra={
        "line_item_id": item.id,
        "product_id": product.id,
        "price": str(updated.price),
        "total": str(updated.total),
    })
    return LineItemChange(item=updated, outcome=LineItemOutcome.APPLIED)
