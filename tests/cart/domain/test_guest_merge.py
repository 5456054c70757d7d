"""Tests for folding a guest cart into a user's cart."""

from storefront.cart.events import GuestCartMerged


def _guest_line(product_id="prod-001", color="Black", size="M", quantity=1, unit_price=20.0):
    return {
        "product_id": product_id,
        "color": color,
        "size": size,
        "quantity": quantity,
        "unit_price": unit_price,
    }


class TestMergeGuestItems:
    def test_guest_lines_are_added(self, cart):
        cart.merge_guest_items([_guest_line(), _guest_line(product_id="prod-002", quantity=2)])
        assert len(cart.items) == 2
        assert cart.item_count == 3

    def test_matching_lines_merge_with_cap(self, cart):
        cart.add_item("prod-001", "Black", "M", 7, 20.0)
        cart.merge_guest_items([_guest_line(quantity=6)])
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 10

    def test_merge_raises_event(self, cart):
        cart.merge_guest_items([_guest_line()])
        merged = [e for e in cart._events if isinstance(e, GuestCartMerged)]
        assert len(merged) == 1
        assert merged[0].lines_merged == 1

    def test_empty_guest_cart_changes_nothing(self, cart):
        cart.merge_guest_items([])
        assert cart.items == []
        assert cart.subtotal == 0.0
