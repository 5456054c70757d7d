"""Domain events for the Review aggregate."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Review")
class ReviewCreated:
    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    purchase_verified = Boolean(default=False)
    created_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewApproved:
    """A verified-purchase review was approved without moderation."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    rating = Integer(required=True)


@storefront.event(part_of="Review")
class HelpfulVoteRecorded:
    __version__ = 1

    review_id = Identifier(required=True)
    user_id = Identifier(required=True)
    vote = String(required=True)
    helpful_count = Integer(required=True)
    not_helpful_count = Integer(required=True)


@storefront.event(part_of="Review")
class ReviewFlagged:
    __version__ = 1

    review_id = Identifier(required=True)
    user_id = Identifier(required=True)
    reason = String(required=True)
    flag_count = Integer(required=True)
    moderation_status = String(required=True)


@storefront.event(part_of="Review")
class ReviewModerated:
    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    moderation_status = String(required=True)
    moderated_by = Identifier(required=True)
    moderated_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewResponded:
    __version__ = 1

    review_id = Identifier(required=True)
    responded_by = Identifier(required=True)
    responded_at = DateTime(required=True)

