"""Keeping the product's rating aggregate in step with its approved reviews.

The product stores a running average that is updated incrementally. Any
operation that changes whether a review is approved calls
``sync_product_rating`` inside its own Unit of Work, so the review and the
product are saved together. ``reconcile_rating`` recomputes the aggregate
from scratch to detect drift; it reports, it never repairs.
"""

from protean.utils.globals import current_domain

from storefront.domain import logger
from storefront.product.product import Product
from storefront.review.review import Review

# Averages closer than this are considered equal
RATING_TOLERANCE = 0.01


def _apply(review, add):
    repo = current_domain.repository_for(Product)
    product = repo.get(review.product_id)
    if add:
        product.add_review(review.rating)
    else:
        product.remove_review(review.rating)
    repo.add(product)

    logger.info(
        "product_rating_synced",
        product_id=str(product.id),
        review_id=str(review.id),
        rating_average=round(product.rating_average, 2),
        rating_count=product.rating_count,
    )
    return product


def sync_product_rating(review, was_approved):
    """Add or remove ``review``'s rating if its approval changed; returns the product or ``None``."""
    if bool(was_approved) == bool(review.is_approved):
        return None
    return _apply(review, add=review.is_approved)


def withdraw_rating(review):
    """Take a review that is going away out of the aggregate, if it was counted."""
    if not review.is_approved:
        return None
    return _apply(review, add=False)


def reconcile_rating(product_id):
    """Compare the stored aggregate against a full scan of approved reviews."""
    product = current_domain.repository_for(Product).get(product_id)
    ratings = [r.rating for r in current_domain.repository_for(Review).approved_for_product(product_id)]

    expected_count = len(ratings)
    expected_average = sum(ratings) / expected_count if ratings else 0.0
    drifted = (
        product.rating_count != expected_count
        or abs((product.rating_average or 0.0) - expected_average) > RATING_TOLERANCE
    )

    report = {
        "product_id": str(product.id),
        "stored_average": product.rating_average,
        "stored_count": product.rating_count,
        "expected_average": round(expected_average, 2),
        "expected_count": expected_count,
        "drifted": drifted,
    }
    if drifted:
        logger.error("rating_drift_detected", **report)
    return report
