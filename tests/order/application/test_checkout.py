"""Application tests for checkout: cart to order in one unit of work."""

import re

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from storefront.cart.cart import Cart
from storefront.exceptions import InsufficientStockError, NotFoundError
from storefront.order.order import Order
from storefront.product.management import DeactivateProduct, UpdateProductDetails
from storefront.product.product import Product
from storefront.sequence.sequence import OrderSequence, day_key


def _product(product):
    return current_domain.repository_for(Product).get(product.id)


def _cart(user_id="user-001"):
    return current_domain.repository_for(Cart).for_user(user_id)


class TestPlaceOrder:
    def test_order_snapshots_cart_lines(self, shelf, fill_cart, checkout):
        fill_cart(shelf["tee"], quantity=2)
        fill_cart(shelf["cap"], quantity=1, color="White")
        order = checkout(shipping_cost=5.0, tax=2.5)

        assert order.status == "pending"
        assert len(order.items) == 2
        tee_line = next(line for line in order.items if line.name == "Checkout Tee")
        assert tee_line.unit_price == 20.0
        assert tee_line.total_price == 40.0
        assert order.pricing.subtotal == 55.0
        assert order.pricing.total == 62.5
        assert order.pricing.currency == "USD"

    def test_stock_is_decremented(self, shelf, fill_cart, checkout):
        fill_cart(shelf["tee"], quantity=3)
        fill_cart(shelf["tee"], quantity=2, size="S")
        checkout()
        tee = _product(shelf["tee"])
        assert tee.get_stock("Black", "M") == 7
        assert tee.get_stock("Black", "S") == 3
        assert tee.sales_count == 5

    def test_cart_is_emptied(self, shelf, fill_cart, checkout):
        fill_cart(shelf["tee"], quantity=2)
        checkout()
        cart = _cart()
        assert cart.items == []
        assert cart.subtotal == 0.0

    def test_order_number_format(self, shelf, fill_cart, checkout):
        fill_cart(shelf["tee"])
        order = checkout()
        assert re.fullmatch(r"ORD\d{6}\d{4}", order.order_number)
        assert order.order_number == f"ORD{day_key()}0001"

    def test_consecutive_orders_get_distinct_numbers(self, shelf, fill_cart, checkout):
        numbers = []
        for _ in range(5):
            fill_cart(shelf["tee"])
            numbers.append(checkout().order_number)
        assert len(set(numbers)) == 5
        assert numbers == sorted(numbers)
        assert current_domain.repository_for(OrderSequence).get(day_key()).last_value == 5

    def test_coupon_applied(self, shelf, fill_cart, checkout):
        fill_cart(shelf["tee"], quantity=2)
        order = checkout(coupon={"code": "SAVE10", "discount_type": "percentage", "discount_value": 10})
        assert order.pricing.discount == 4.0
        assert order.pricing.total == 36.0

    def test_order_price_survives_catalogue_changes(self, shelf, fill_cart, checkout):
        fill_cart(shelf["tee"])
        order = checkout()
        current_domain.process(
            UpdateProductDetails(product_id=shelf["tee"].id, base_price=99.0, clear_sale_price=True),
            asynchronous=False,
        )
        stored = current_domain.repository_for(Order).get(order.id)
        assert stored.items[0].unit_price == 20.0
        assert stored.pricing.total == 20.0


class TestCheckoutFailures:
    def test_empty_cart(self, checkout):
        with pytest.raises(ValidationError):
            checkout(user_id="user-without-cart")

    def test_insufficient_stock_rolls_everything_back(self, shelf, fill_cart, checkout):
        fill_cart(shelf["tee"], quantity=2)
        fill_cart(shelf["cap"], quantity=4, color="White")  # only 3 in stock

        with pytest.raises(InsufficientStockError):
            checkout()

        assert _product(shelf["tee"]).get_stock("Black", "M") == 10
        assert _product(shelf["cap"]).get_stock("White", "M") == 3
        assert len(_cart().items) == 2
        assert current_domain.repository_for(Order).query.all().total == 0
        assert current_domain.repository_for(OrderSequence).get_or_none(day_key()) is None

    def test_deactivated_product(self, shelf, fill_cart, checkout):
        fill_cart(shelf["tee"])
        current_domain.process(DeactivateProduct(product_id=shelf["tee"].id), asynchronous=False)
        with pytest.raises(NotFoundError):
            checkout()
        assert len(_cart().items) == 1

    def test_failed_checkout_does_not_burn_a_number(self, shelf, fill_cart, checkout):
        fill_cart(shelf["cap"], quantity=4, color="White")
        with pytest.raises(InsufficientStockError):
            checkout()

        cart = _cart()
        cart.update_item_quantity(cart.items[0].id, 1)
        current_domain.repository_for(Cart).add(cart)

        assert checkout().order_number == f"ORD{day_key()}0001"
