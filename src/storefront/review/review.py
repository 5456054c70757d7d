"""Review aggregate (CQRS) — a user's opinion of a product.

One review exists per (user, product) pair. ``is_approved`` always mirrors
``moderation_status == approved``; only approved reviews count towards the
product's rating, so every method that may flip approval leaves it to the
handler to compare before and after and update the product in the same
Unit of Work.

Moderation:
    PENDING → APPROVED (moderator, or automatically for a verified purchase)
    any → REJECTED | APPROVED | PENDING (moderator decision)
    any → FLAGGED (three flags, overriding an earlier approval)
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    List,
    String,
    ValueObject,
)

from storefront.domain import storefront
from storefront.review.events import (
    HelpfulVoteRecorded,
    ReviewApproved,
    ReviewCreated,
    ReviewFlagged,
    ReviewModerated,
    ReviewResponded,
)

FLAG_THRESHOLD = 3


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ModerationStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED = "flagged"


class VoteType(Enum):
    HELPFUL = "helpful"
    NOT_HELPFUL = "not-helpful"


class FlagReason(Enum):
    INAPPROPRIATE = "inappropriate"
    SPAM = "spam"
    FAKE = "fake"
    OFFENSIVE = "offensive"
    IRRELEVANT = "irrelevant"


class FitRating(Enum):
    RUNS_SMALL = "runs-small"
    TRUE_TO_SIZE = "true-to-size"
    RUNS_LARGE = "runs-large"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Review")
class ReviewResponse:
    """The store's public answer to a review."""

    comment = String(required=True, max_length=1000)
    responded_by = Identifier(required=True)
    responded_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Review")
class ReviewImage:
    url = String(required=True, max_length=500)
    alt = String(max_length=255)
    caption = String(max_length=255)


@storefront.entity(part_of="Review")
class HelpfulVote:
    """One user's verdict on a review; a later vote by the same user replaces it."""

    user_id = Identifier(required=True)
    vote = String(required=True, max_length=20, choices=VoteType)
    voted_at = DateTime(required=True)


@storefront.entity(part_of="Review")
class ReviewFlag:
    user_id = Identifier(required=True)
    reason = String(required=True, max_length=20, choices=FlagReason)
    note = String(max_length=500)
    flagged_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Review:
    # Core identifiers
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    order_id = Identifier()

    # Content
    rating = Integer(required=True, min_value=1, max_value=5)
    title = String(required=True, max_length=100)
    comment = String(required=True, max_length=1000)
    pros = List(content_type=String(max_length=200))
    cons = List(content_type=String(max_length=200))
    images = HasMany(ReviewImage)

    # Fit and detail ratings
    size_purchased = String(max_length=10)
    color_purchased = String(max_length=50)
    recommend_product = Boolean(default=True)
    fit_rating = String(max_length=20, choices=FitRating, default=FitRating.TRUE_TO_SIZE.value)
    quality_rating = Integer(min_value=1, max_value=5)
    value_rating = Integer(min_value=1, max_value=5)

    # Verification
    purchase_verified = Boolean(default=False)

    # Voting
    helpful_votes = HasMany(HelpfulVote)
    helpful_count = Integer(default=0, min_value=0)
    not_helpful_count = Integer(default=0, min_value=0)

    # Flagging
    flags = HasMany(ReviewFlag)

    # Moderation
    moderation_status = String(
        max_length=20, choices=ModerationStatus, default=ModerationStatus.PENDING.value
    )
    is_approved = Boolean(default=False)
    moderation_note = String(max_length=500)
    moderated_by = Identifier()
    moderated_at = DateTime()

    response = ValueObject(ReviewResponse)

    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def approval_must_mirror_status(self):
        if self.is_approved != (self.moderation_status == ModerationStatus.APPROVED.value):
            raise ValidationError({"is_approved": ["Approval flag is out of step with the moderation status"]})

    @invariant.post
    def title_must_not_be_blank(self):
        if self.title is not None and not self.title.strip():
            raise ValidationError({"title": ["Review title cannot be empty"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        product_id,
        user_id,
        rating,
        title,
        comment,
        order_id=None,
        purchase_verified=False,
        images=None,
        **details,
    ):
        """Create a pending review; a verified purchase is approved straight away.

        ``details`` carries the optional descriptive fields (pros, cons,
        size_purchased, color_purchased, fit_rating, quality_rating,
        value_rating, recommend_product).
        """
        now = datetime.now(UTC)
        review = cls(
            product_id=product_id,
            user_id=user_id,
            order_id=order_id,
            rating=rating,
            title=title,
            comment=comment,
            purchase_verified=purchase_verified,
            moderation_status=ModerationStatus.PENDING.value,
            is_approved=False,
            created_at=now,
            updated_at=now,
            **details,
        )
        for image in images or []:
            review.add_images(ReviewImage(url=image["url"], alt=image.get("alt"), caption=image.get("caption")))

        review.raise_(
            ReviewCreated(
                review_id=str(review.id),
                product_id=str(product_id),
                user_id=str(user_id),
                rating=rating,
                purchase_verified=purchase_verified,
                created_at=now,
            )
        )

        if purchase_verified:
            review.auto_approve()
        return review

    def auto_approve(self):
        """Approve a verified purchase, unless a moderator already decided otherwise."""
        if self.moderation_status != ModerationStatus.PENDING.value:
            return False

        with atomic_change(self):
            self.moderation_status = ModerationStatus.APPROVED.value
            self.is_approved = True
            self.updated_at = datetime.now(UTC)

        self.raise_(
            ReviewApproved(
                review_id=str(self.id),
                product_id=str(self.product_id),
                rating=self.rating,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Derived
    # -------------------------------------------------------------------
    @property
    def helpfulness_score(self):
        """Share of helpful votes, as a percentage."""
        total = self.helpful_count + self.not_helpful_count
        if total == 0:
            return 0.0
        return self.helpful_count / total * 100

    # -------------------------------------------------------------------
    # Voting
    # -------------------------------------------------------------------
    def add_helpful_vote(self, user_id, vote):
        """Record ``vote``; the user's previous vote, if any, is replaced."""
        vote = VoteType(vote).value
        if str(user_id) == str(self.user_id):
            raise ValidationError({"vote": ["Cannot vote on your own review"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            for existing in [v for v in self.helpful_votes if str(v.user_id) == str(user_id)]:
                self.remove_helpful_votes(existing)
            self.add_helpful_votes(HelpfulVote(user_id=user_id, vote=vote, voted_at=now))

            # Counters are always recomputed from the ledger
            self.helpful_count = sum(1 for v in self.helpful_votes if v.vote == VoteType.HELPFUL.value)
            self.not_helpful_count = sum(1 for v in self.helpful_votes if v.vote == VoteType.NOT_HELPFUL.value)
            self.updated_at = now

        self.raise_(
            HelpfulVoteRecorded(
                review_id=str(self.id),
                user_id=str(user_id),
                vote=vote,
                helpful_count=self.helpful_count,
                not_helpful_count=self.not_helpful_count,
            )
        )

    # -------------------------------------------------------------------
    # Flagging
    # -------------------------------------------------------------------
    def flag(self, user_id, reason, note=None):
        """Add a flag; reaching the threshold pulls the review from display."""
        reason = FlagReason(reason).value
        if any(str(f.user_id) == str(user_id) for f in self.flags):
            raise ValidationError({"flag": ["You have already flagged this review"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.add_flags(ReviewFlag(user_id=user_id, reason=reason, note=note, flagged_at=now))
            if len(self.flags) >= FLAG_THRESHOLD:
                self.moderation_status = ModerationStatus.FLAGGED.value
                self.is_approved = False
            self.updated_at = now

        self.raise_(
            ReviewFlagged(
                review_id=str(self.id),
                user_id=str(user_id),
                reason=reason,
                flag_count=len(self.flags),
                moderation_status=self.moderation_status,
            )
        )

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def moderate(self, status, moderator_id, note=None):
        status = ModerationStatus(status).value
        now = datetime.now(UTC)
        with atomic_change(self):
            self.moderation_status = status
            self.is_approved = status == ModerationStatus.APPROVED.value
            self.moderation_note = note
            self.moderated_by = moderator_id
            self.moderated_at = now
            self.updated_at = now

        self.raise_(
            ReviewModerated(
                review_id=str(self.id),
                product_id=str(self.product_id),
                moderation_status=status,
                moderated_by=str(moderator_id),
                moderated_at=now,
            )
        )

    def respond(self, comment, responded_by):
        now = datetime.now(UTC)
        self.response = ReviewResponse(comment=comment, responded_by=responded_by, responded_at=now)
        self.updated_at = now

        self.raise_(
            ReviewResponded(
                review_id=str(self.id),
                responded_by=str(responded_by),
                responded_at=now,
            )
        )
