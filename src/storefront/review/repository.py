"""Review repository — listings and rating statistics."""

from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.review.review import ModerationStatus, Review
from storefront.utils.pagination import paginate

# Listing sort keys; ties fall back to newest first
_SORTS = {
    "newest": ["-created_at"],
    "helpful": ["-helpful_count", "-created_at"],
    "rating-high": ["-rating", "-created_at"],
    "rating-low": ["rating", "-created_at"],
}


@storefront.repository(part_of=Review)
class ReviewRepository:
    def get(self, identifier):
        try:
            return super().get(identifier)
        except ObjectNotFoundError:
            raise NotFoundError(f"Review {identifier} not found") from None

    def by_user_and_product(self, user_id, product_id):
        return self.query.filter(user_id=str(user_id), product_id=str(product_id)).all().first

    def approved_for_product(self, product_id):
        return self.query.filter(product_id=str(product_id), is_approved=True).limit(None).all().items

    def for_product(self, product_id, sort="newest", rating=None, page=1, per_page=None):
        """Approved reviews of a product, sorted by one of ``_SORTS``."""
        if sort not in _SORTS:
            raise ValidationError({"sort": [f"Unknown sort '{sort}', expected one of {sorted(_SORTS)}"]})

        queryset = self.query.filter(product_id=str(product_id), is_approved=True)
        if rating is not None:
            queryset = queryset.filter(rating=rating)
        return paginate(queryset.order_by(_SORTS[sort]), page=page, per_page=per_page)

    def pending_moderation(self, page=1, per_page=None):
        """Reviews waiting for a moderator: pending or flagged, newest first."""
        queryset = self.query.filter(
            moderation_status__in=[ModerationStatus.PENDING.value, ModerationStatus.FLAGGED.value]
        ).order_by("-created_at")
        return paginate(queryset, page=page, per_page=per_page)

    def product_stats(self, product_id):
        ratings = [review.rating for review in self.approved_for_product(product_id)]
        return {
            "total_reviews": len(ratings),
            "average_rating": round(sum(ratings) / len(ratings), 1) if ratings else 0.0,
            "rating_breakdown": {star: ratings.count(star) for star in range(1, 6)},
        }
