"""
Tests for the cart aggregate and money helpers.
"""

from decimal import Decimal

import pytest

from goodstay.domain.checkout.cart import Cart, CartLine
from goodstay.exceptions import EmptyCartError
from goodstay.shared.money import format_amount, to_decimal, to_minor_units


class TestCartLine:
    def test_line_total(self):
        line = CartLine("p1", "Chew Rope", Decimal("10.00"), 2)
        assert line.line_total == Decimal("20.00")

    def test_rejects_zero_quantity(self):
        with pytest.raises(ValueError):
            CartLine("p1", "Chew Rope", Decimal("10.00"), 0)

    def test_float_price_is_normalized(self):
        line = CartLine("p1", "Chew Rope", 19.99, 1)
        assert line.unit_price == Decimal("19.99")


class TestCart:
    def test_add_merges_same_product(self):
        cart = Cart()
        cart.add("p1", "Chew Rope", Decimal("10.00"), 1)
        cart.add("p1", "Chew Rope", Decimal("10.00"), 2)

        assert len(cart.lines) == 1
        assert cart.get("p1").quantity == 3

    def test_add_keeps_first_captured_price(self):
        cart = Cart()
        cart.add("p1", "Chew Rope", Decimal("10.00"), 1)
        cart.add("p1", "Chew Rope", Decimal("12.50"), 1)

        assert cart.get("p1").unit_price == Decimal("10.00")

    def test_add_caps_at_available_stock(self):
        cart = Cart()
        cart.add("p1", "Chew Rope", Decimal("10.00"), 4, available_stock=3)
        assert cart.get("p1").quantity == 3

    def test_add_out_of_stock_raises(self):
        cart = Cart()
        with pytest.raises(ValueError):
            cart.add("p1", "Chew Rope", Decimal("10.00"), 1, available_stock=0)
        assert cart.is_empty

    def test_update_quantity_to_zero_removes_line(self):
        cart = Cart()
        cart.add("p1", "Chew Rope", Decimal("10.00"), 2)
        cart.update_quantity("p1", 0)
        assert cart.is_empty

    def test_subtotal_and_item_count(self):
        cart = Cart()
        cart.add("p1", "Chew Rope", Decimal("10.00"), 2)
        cart.add("p2", "Dog Bed", Decimal("45.50"), 1)

        assert cart.subtotal == Decimal("65.50")
        assert cart.item_count == 3

    def test_ensure_not_empty(self):
        with pytest.raises(EmptyCartError):
            Cart().ensure_not_empty()


class TestMoney:
    def test_minor_units_round_half_up(self):
        assert to_minor_units(Decimal("10.005")) == 1001
        assert to_minor_units(Decimal("20.00")) == 2000

    def test_to_decimal_from_float(self):
        assert to_decimal(0.1 + 0.2) == Decimal("0.30")

    def test_format_amount(self):
        assert format_amount(Decimal("7")) == "7.00"
