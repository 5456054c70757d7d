"""Shared BDD fixtures and step definitions for products."""

import pytest
from pytest_bdd import given, parsers, then
from storefront.exceptions import InsufficientStockError, NotFoundError
from storefront.product.events import StockAdjusted


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


@given(
    parsers.cfparse('a product with "{color}" size "{size}" in stock {stock:d}'),
    target_fixture="product",
)
def product_with_stock(make_product, color, size, stock):
    product = make_product()
    variant = product.find_variant(color)
    variant.find_size(size).stock = stock
    return product


@then(parsers.cfparse('the stock of "{color}" size "{size}" is {stock:d}'))
def stock_is(product, color, size, stock):
    assert product.get_stock(color, size) == stock


@then("a StockAdjusted event is raised")
def stock_adjusted_raised(product):
    assert any(isinstance(e, StockAdjusted) for e in product._events)


@then("the stock change fails with insufficient stock")
def fails_with_insufficient_stock(error):
    assert isinstance(error["exc"], InsufficientStockError)


@then("the stock change fails because the size does not exist")
def fails_with_missing_size(error):
    assert isinstance(error["exc"], NotFoundError)
