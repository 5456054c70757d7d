import pytest
from protean.utils.globals import current_domain
from storefront.product.product import Product
from storefront.review.review import Review


@pytest.fixture()
def make_review():
    def _make(user_id="user-001", rating=4, purchase_verified=False, **kwargs):
        review = Review.create(
            product_id=kwargs.pop("product_id", "prod-001"),
            user_id=user_id,
            rating=rating,
            title=kwargs.pop("title", "Great fit"),
            comment=kwargs.pop("comment", "Fits well and washes nicely."),
            purchase_verified=purchase_verified,
            **kwargs,
        )
        return review

    return _make


@pytest.fixture()
def review(make_review):
    return make_review()


@pytest.fixture()
def rated_product(make_product):
    """A persisted product with no reviews yet."""
    product = make_product(sku="REV-001", name="Reviewed Tee")
    current_domain.repository_for(Product).add(product)
    return product
