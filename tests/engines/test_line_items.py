"""
Tests for the line item calculator.

Covers line totals under parse-or-zero coercion, field edits and product
selection (applied and soft-miss).
"""

from decimal import Decimal

import pytest

from billing_kernel.domain.entities import LineItem, Product
from billing_engines.line_items import (
    LineItemOutcome,
    apply_product,
    compute_line_total,
    new_line_item,
    update_item,
)


@pytest.fixture
def products():
    return [
        Product(id="p1", name="Widget", price=Decimal("100")),
        Product(id="p2", name="Gadget", price=Decimal("50")),
    ]


class TestComputeLineTotal:

    def test_quantity_times_price(self):
        assert compute_line_total(2, Decimal("100")) == Decimal("200")

    def test_unparseable_quantity_is_zero(self):
        assert compute_line_total("", "100") == Decimal("0")

    def test_unparseable_price_is_zero(self):
        assert compute_line_total("3", "abc") == Decimal("0")

    def test_negative_inputs_clamp_to_zero(self):
        assert compute_line_total("-2", "10") == Decimal("0")
        assert compute_line_total("2", "-10") == Decimal("0")

    def test_decimal_exact(self):
        assert compute_line_total(3, "0.10") == Decimal("0.30")

    @pytest.mark.parametrize("quantity, price", [
        (2, "9e999999"),
        ("9" * 5000, "10"),
    ], ids=["huge_price", "huge_quantity"])
    def test_overflowing_inputs_coerce_to_zero(self, quantity, price):
        assert compute_line_total(quantity, price) == Decimal("0")


def test_new_line_item_is_blank():
    item = new_line_item(7)
    assert item.id == 7
    assert item.product_id == ""
    assert item.quantity == 1
    assert item.price == Decimal("0")
    assert item.total == Decimal("0")


class TestUpdateItem:

    def test_quantity_edit_recomputes_total(self):
        item = LineItem(id=1, quantity=2, price=Decimal("100"))
        updated = update_item(item, quantity="5")
        assert updated.quantity == 5
        assert updated.total == Decimal("500")

    def test_price_edit_recomputes_total(self):
        item = LineItem(id=1, quantity=2, price=Decimal("100"))
        assert update_item(item, price="12.5").total == Decimal("25.0")

    def test_cleared_field_reads_as_zero(self):
        item = LineItem(id=1, quantity=2, price=Decimal("100"))
        assert update_item(item, quantity="").total == Decimal("0")

    def test_no_changes_returns_same_item(self):
        item = LineItem(id=1, quantity=2, price=Decimal("100"))
        assert update_item(item) is item

    def test_name_edit_keeps_amounts(self):
        item = LineItem(id=1, quantity=2, price=Decimal("100"))
        updated = update_item(item, name="Custom")
        assert updated.name == "Custom"
        assert updated.total == Decimal("200")


class TestApplyProduct:

    def test_copies_name_and_price_keeps_quantity(self, products):
        item = LineItem(id=1, quantity=3)
        change = apply_product(item, "p1", products)
        assert change.outcome == LineItemOutcome.APPLIED
        assert change.item.product_id == "p1"
        assert change.item.name == "Widget"
        assert change.item.price == Decimal("100")
        assert change.item.quantity == 3
        assert change.item.total == Decimal("300")

    def test_empty_product_id_is_soft_miss(self, products):
        item = LineItem(id=1, quantity=3, price=Decimal("9"))
        change = apply_product(item, "", products)
        assert change.is_soft_miss
        assert change.item is item

    def test_unknown_product_is_soft_miss_and_logged(self, products, captured_logs):
        item = LineItem(id=4, quantity=1, price=Decimal("9"))
        change = apply_product(item, "missing", products)
        assert change.is_soft_miss
        assert change.item == item

        logs = captured_logs()
        miss = [r for r in logs if r["message"] == "product_not_found"]
        assert len(miss) == 1
        assert miss[0]["level"] == "WARNING"
        assert miss[0]["product_id"] == "missing"
        assert miss[0]["line_item_id"] == 4

    def test_switching_product_overwrites_name_and_price(self, products):
        first = apply_product(LineItem(id=1, quantity=2), "p1", products).item
        second = apply_product(first, "p2", products).item
        assert second.id == 1
        assert second.product_id == "p2"
        assert second.name == "Gadget"
        assert second.total == Decimal("100")
