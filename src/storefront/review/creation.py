"""Review creation — command and handler.

A review may point at the order it came from. The link only counts as a
verified purchase when the order belongs to the reviewer and contains the
product; anything else is rejected rather than silently downgraded.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, Integer, List, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.exceptions import DuplicateError
from storefront.order.order import Order
from storefront.product.product import Product
from storefront.review.rating import sync_product_rating
from storefront.review.review import FitRating, Review


@storefront.command(part_of="Review")
class CreateReview:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    order_id = Identifier()
    rating = Integer(required=True, min_value=1, max_value=5)
    title = String(required=True, max_length=100)
    comment = String(required=True, max_length=1000)
    pros = List(content_type=String(max_length=200))
    cons = List(content_type=String(max_length=200))
    images = List()  # [{"url", "alt", "caption"}]
    size_purchased = String(max_length=10)
    color_purchased = String(max_length=50)
    fit_rating = String(max_length=20, choices=FitRating)
    quality_rating = Integer(min_value=1, max_value=5)
    value_rating = Integer(min_value=1, max_value=5)
    recommend_product = Boolean(default=True)


def _verify_purchase(order_id, user_id, product_id):
    order = current_domain.repository_for(Order).get(order_id)
    if str(order.user_id) != str(user_id):
        raise ValidationError({"order_id": ["Order does not belong to this user"]})
    if not any(str(item.product_id) == str(product_id) for item in order.items):
        raise ValidationError({"order_id": ["Order does not contain this product"]})
    return True


@storefront.command_handler(part_of=Review)
class CreateReviewHandler:
    @handle(CreateReview)
    def create_review(self, command):
        # Unknown products raise NotFoundError
        current_domain.repository_for(Product).get(command.product_id)

        repo = current_domain.repository_for(Review)
        if repo.by_user_and_product(command.user_id, command.product_id) is not None:
            raise DuplicateError(f"User {command.user_id} has already reviewed product {command.product_id}")

        verified = False
        if command.order_id:
            verified = _verify_purchase(command.order_id, command.user_id, command.product_id)

        details = {
            "pros": command.pros or [],
            "cons": command.cons or [],
            "size_purchased": command.size_purchased,
            "color_purchased": command.color_purchased,
            "quality_rating": command.quality_rating,
            "value_rating": command.value_rating,
            "recommend_product": command.recommend_product,
        }
        if command.fit_rating:
            details["fit_rating"] = command.fit_rating

        review = Review.create(
            product_id=command.product_id,
            user_id=command.user_id,
            rating=command.rating,
            title=command.title,
            comment=command.comment,
            order_id=command.order_id,
            purchase_verified=verified,
            images=command.images,
            **details,
        )
        repo.add(review)
        sync_product_rating(review, was_approved=False)

        logger.info(
            "review_created",
            review_id=str(review.id),
            product_id=str(command.product_id),
            rating=command.rating,
            auto_approved=review.is_approved,
        )
        return str(review.id)
