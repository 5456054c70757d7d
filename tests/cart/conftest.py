import pytest
from protean.utils.globals import current_domain
from storefront.cart.cart import Cart
from storefront.product.product import Product


@pytest.fixture()
def cart():
    cart = Cart.create(user_id="user-001")
    cart._events.clear()
    return cart


@pytest.fixture()
def stocked_product(make_product):
    """A persisted product priced at 25.00 with a 20.00 sale price."""
    product = make_product(sale_price=20.0)
    current_domain.repository_for(Product).add(product)
    return product
