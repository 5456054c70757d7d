"""Shared BDD fixtures and step definitions for reviews."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@given("a review without a verified purchase", target_fixture="review")
def unverified_review(make_review):
    return make_review()


@given("a review of a verified purchase", target_fixture="review")
def verified_review(make_review):
    return make_review(purchase_verified=True)


@then(parsers.cfparse('the review status is "{status}"'))
def review_status_is(review, status):
    assert review.moderation_status == status


@then("the review is approved")
def review_is_approved(review):
    assert review.is_approved is True


@then("the review is not approved")
def review_is_not_approved(review):
    assert review.is_approved is False


@then("the review action fails with a validation error")
def review_action_fails(error):
    assert isinstance(error["exc"], ValidationError)


@then(parsers.re(r"the review has (?P<count>\d+) flags?"))
def review_has_flags(review, count):
    assert len(review.flags) == int(count)
