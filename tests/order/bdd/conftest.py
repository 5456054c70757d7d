"""Shared BDD fixtures and step definitions for orders."""

import pytest
from pytest_bdd import given, parsers, then
from storefront.exceptions import InvalidTransitionError, ReturnWindowExpiredError


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


@given(parsers.cfparse("a pending order totalling {total:f}"), target_fixture="order")
def pending_order(make_order, total):
    order = make_order()
    assert order.pricing.total == total
    return order


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.re(r"the order history has (?P<count>\d+) entr(y|ies)"))
def history_length(order, count):
    assert len(order.status_history) == int(count)


@then("the order action fails with an invalid transition")
def fails_with_invalid_transition(error):
    assert isinstance(error["exc"], InvalidTransitionError)


@then("the order action fails because the return window expired")
def fails_with_expired_window(error):
    assert isinstance(error["exc"], ReturnWindowExpiredError)
