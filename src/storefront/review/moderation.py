"""Review moderation and deletion — commands and handler.

Both can change whether a review counts towards the product's rating, so the
product aggregate is updated in the same Unit of Work.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.review.rating import sync_product_rating, withdraw_rating
from storefront.review.review import ModerationStatus, Review


@storefront.command(part_of="Review")
class ModerateReview:
    review_id = Identifier(required=True)
    status = String(required=True, max_length=20, choices=ModerationStatus)
    moderator_id = Identifier(required=True)
    note = String(max_length=500)


@storefront.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)
    deleted_by = Identifier()


@storefront.command_handler(part_of=Review)
class ModerateReviewHandler:
    @handle(ModerateReview)
    def moderate_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        was_approved = review.is_approved
        review.moderate(command.status, command.moderator_id, note=command.note)
        repo.add(review)
        sync_product_rating(review, was_approved)

        logger.info(
            "review_moderated",
            review_id=str(review.id),
            status=command.status,
            moderator_id=str(command.moderator_id),
        )
        return str(review.id)

    @handle(DeleteReview)
    def delete_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        withdraw_rating(review)
        repo._dao.delete(review)

        logger.info(
            "review_deleted",
            review_id=str(command.review_id),
            product_id=str(review.product_id),
            deleted_by=str(command.deleted_by) if command.deleted_by else None,
        )
        return str(command.review_id)
