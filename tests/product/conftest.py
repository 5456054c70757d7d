import pytest
from protean.utils.globals import current_domain
from storefront.product.product import Product


@pytest.fixture()
def product(make_product):
    return make_product()


@pytest.fixture()
def saved_product(make_product):
    product = make_product()
    current_domain.repository_for(Product).add(product)
    return current_domain.repository_for(Product).get(product.id)
