"""BDD tests for cart merge and quantity limits."""

from pytest_bdd import given, parsers, scenarios, then, when
from storefront.cart.cart import Cart

scenarios("features/cart_limits.feature")


@given("an empty cart", target_fixture="cart")
def empty_cart():
    return Cart.create(user_id="user-bdd")


@when(parsers.cfparse('{quantity:d} units of "{color}" size "{size}" are added at {price:f}'))
def add_units(cart, quantity, color, size, price):
    cart.add_item("prod-bdd", color, size, quantity, price)


@when(parsers.cfparse("the line quantity is set to {quantity:d}"))
def set_quantity(cart, quantity):
    cart.update_item_quantity(cart.items[0].id, quantity)


@then(parsers.re(r"the cart has (?P<count>\d+) lines?"))
def cart_has_lines(cart, count):
    assert len(cart.items) == int(count)


@then(parsers.cfparse("the line quantity is {quantity:d}"))
def line_quantity_is(cart, quantity):
    assert cart.items[0].quantity == quantity


@then(parsers.cfparse("the cart subtotal is {amount:f}"))
def subtotal_is(cart, amount):
    assert cart.subtotal == amount
