import pytest
from protean.utils.globals import current_domain
from storefront.cart.items import AddToCart
from storefront.order.checkout import PlaceOrder
from storefront.order.order import Order
from storefront.product.product import Product

ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "street": "12 Analytical Row",
    "city": "London",
    "state": "Greater London",
    "zip_code": "N1 9GU",
    "country": "UK",
}


def order_lines(*quantities_and_prices):
    return [
        {
            "product_id": f"prod-{index:03d}",
            "name": f"Item {index}",
            "color": "Black",
            "size": "M",
            "quantity": quantity,
            "unit_price": price,
        }
        for index, (quantity, price) in enumerate(quantities_and_prices, start=1)
    ]


@pytest.fixture()
def address():
    return dict(ADDRESS)


@pytest.fixture()
def make_order():
    def _make(order_number="ORD2601010001", lines=None, **kwargs):
        kwargs.setdefault("shipping_address", dict(ADDRESS))
        order = Order.create(
            order_number=order_number,
            user_id="user-001",
            items=lines or order_lines((2, 20.0), (1, 15.0)),
            **kwargs,
        )
        return order

    return _make


@pytest.fixture()
def order(make_order):
    return make_order()


@pytest.fixture()
def shelf(make_product):
    """Two persisted products with distinct names and stock."""
    repo = current_domain.repository_for(Product)
    tee = make_product(sku="TEE-100", name="Checkout Tee", sale_price=20.0)
    cap = make_product(sku="CAP-100", name="Checkout Cap", base_price=15.0)
    repo.add(tee)
    repo.add(cap)
    return {"tee": tee, "cap": cap}


@pytest.fixture()
def fill_cart():
    def _fill(product, quantity=1, color="Black", size="M", user_id="user-001"):
        return current_domain.process(
            AddToCart(user_id=user_id, product_id=product.id, color=color, size=size, quantity=quantity),
            asynchronous=False,
        )

    return _fill


@pytest.fixture()
def checkout():
    def _checkout(user_id="user-001", **kwargs):
        kwargs.setdefault("shipping_address", dict(ADDRESS))
        order_id = current_domain.process(PlaceOrder(user_id=user_id, **kwargs), asynchronous=False)
        return current_domain.repository_for(Order).get(order_id)

    return _checkout


@pytest.fixture(name="order_lines")
def order_lines_fixture():
    """Builder for snapshot lines: ``order_lines((quantity, unit_price), ...)``."""
    return order_lines
