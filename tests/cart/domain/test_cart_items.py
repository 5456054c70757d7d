"""Tests for cart line management."""

import pytest
from protean.exceptions import ValidationError
from storefront.cart.cart import MAX_LINE_QUANTITY
from storefront.cart.events import CartCleared, CartItemAdded, CartItemQuantityUpdated, CartItemRemoved
from storefront.exceptions import NotFoundError


class TestAddItem:
    def test_add_item(self, cart):
        item = cart.add_item("prod-001", "Black", "M", 2, 20.0)
        assert len(cart.items) == 1
        assert item.quantity == 2
        assert item.total_price == 40.0
        assert cart.subtotal == 40.0
        assert cart.item_count == 2

    def test_add_item_raises_event(self, cart):
        cart.add_item("prod-001", "Black", "M", 1, 20.0)
        added = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert len(added) == 1
        assert added[0].product_id == "prod-001"
        assert added[0].quantity == 1

    def test_same_triple_merges_into_one_line(self, cart):
        cart.add_item("prod-001", "Black", "M", 4, 20.0)
        cart.add_item("prod-001", "Black", "M", 3, 20.0)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 7
        assert cart.item_count == 7

    def test_color_match_ignores_case(self, cart):
        cart.add_item("prod-001", "Black", "M", 1, 20.0)
        cart.add_item("prod-001", "black", "M", 1, 20.0)
        assert len(cart.items) == 1

    def test_merged_quantity_is_capped(self, cart):
        cart.add_item("prod-001", "Black", "M", 8, 20.0)
        cart.add_item("prod-001", "Black", "M", 5, 20.0)
        assert cart.items[0].quantity == MAX_LINE_QUANTITY

    def test_new_line_is_capped(self, cart):
        item = cart.add_item("prod-001", "Black", "M", 15, 20.0)
        assert item.quantity == MAX_LINE_QUANTITY
        assert item.total_price == 200.0

    def test_merge_takes_latest_unit_price(self, cart):
        cart.add_item("prod-001", "Black", "M", 1, 20.0)
        cart.add_item("prod-001", "Black", "M", 1, 18.0)
        assert cart.items[0].unit_price == 18.0
        assert cart.subtotal == 36.0

    def test_different_size_creates_new_line(self, cart):
        cart.add_item("prod-001", "Black", "M", 1, 20.0)
        cart.add_item("prod-001", "Black", "S", 1, 20.0)
        assert len(cart.items) == 2
        assert cart.subtotal == 40.0

    def test_zero_quantity_rejected(self, cart):
        with pytest.raises(ValidationError):
            cart.add_item("prod-001", "Black", "M", 0, 20.0)


class TestUpdateQuantity:
    def test_update_quantity(self, cart):
        item = cart.add_item("prod-001", "Black", "M", 1, 20.0)
        cart.update_item_quantity(item.id, 5)
        assert cart.items[0].quantity == 5
        assert cart.subtotal == 100.0

    def test_update_is_capped(self, cart):
        item = cart.add_item("prod-001", "Black", "M", 1, 20.0)
        cart.update_item_quantity(item.id, 12)
        assert cart.items[0].quantity == MAX_LINE_QUANTITY

    def test_update_raises_event(self, cart):
        item = cart.add_item("prod-001", "Black", "M", 1, 20.0)
        cart._events.clear()
        cart.update_item_quantity(item.id, 3)
        assert len(cart._events) == 1
        event = cart._events[0]
        assert isinstance(event, CartItemQuantityUpdated)
        assert event.previous_quantity == 1
        assert event.new_quantity == 3

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_removes_line(self, cart, quantity):
        item = cart.add_item("prod-001", "Black", "M", 2, 20.0)
        cart.update_item_quantity(item.id, quantity)
        assert len(cart.items) == 0
        assert cart.subtotal == 0.0
        assert cart.item_count == 0

    def test_update_unknown_item(self, cart):
        with pytest.raises(NotFoundError):
            cart.update_item_quantity("nonexistent", 5)


class TestRemoveAndClear:
    def test_remove_item(self, cart):
        item = cart.add_item("prod-001", "Black", "M", 1, 20.0)
        cart._events.clear()
        cart.remove_item(item.id)
        assert len(cart.items) == 0
        assert isinstance(cart._events[0], CartItemRemoved)

    def test_remove_unknown_item(self, cart):
        with pytest.raises(NotFoundError):
            cart.remove_item("nonexistent")

    def test_clear_empties_cart(self, cart):
        cart.add_item("prod-001", "Black", "M", 1, 20.0)
        cart.add_item("prod-002", "White", "L", 2, 30.0)
        cart._events.clear()
        cart.clear()
        assert cart.items == []
        assert cart.subtotal == 0.0
        assert cart.item_count == 0
        assert isinstance(cart._events[0], CartCleared)
