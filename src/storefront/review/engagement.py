"""Helpfulness votes, flags and store responses — commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.review.rating import sync_product_rating
from storefront.review.review import FlagReason, Review, VoteType


@storefront.command(part_of="Review")
class VoteOnReview:
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)
    vote = String(required=True, max_length=20, choices=VoteType)


@storefront.command(part_of="Review")
class FlagReview:
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)
    reason = String(required=True, max_length=20, choices=FlagReason)
    note = String(max_length=500)


@storefront.command(part_of="Review")
class RespondToReview:
    review_id = Identifier(required=True)
    comment = String(required=True, max_length=1000)
    responded_by = Identifier(required=True)


@storefront.command_handler(part_of=Review)
class ReviewEngagementHandler:
    @handle(VoteOnReview)
    def vote_on_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.add_helpful_vote(command.user_id, command.vote)
        repo.add(review)
        return {"helpful": review.helpful_count, "not_helpful": review.not_helpful_count}

    @handle(FlagReview)
    def flag_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        was_approved = review.is_approved
        review.flag(command.user_id, command.reason, note=command.note)
        repo.add(review)
        sync_product_rating(review, was_approved)

        if review.is_approved != was_approved:
            logger.warning(
                "review_pulled_by_flags",
                review_id=str(review.id),
                flag_count=len(review.flags),
            )
        return str(review.id)

    @handle(RespondToReview)
    def respond_to_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.respond(command.comment, command.responded_by)
        repo.add(review)
        return str(review.id)
