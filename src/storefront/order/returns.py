"""Order returns — commands and handler.

Handles the return lifecycle: request, approval or rejection, completion.
Returned goods are inspected outside the system, so completing a return
books the refund but does not restock.
"""

from protean import handle
from protean.fields import Boolean, Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class RequestReturn:
    """Request a return of a delivered order, providing a reason."""

    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@storefront.command(part_of="Order")
class ProcessReturn:
    order_id = Identifier(required=True)
    approve = Boolean(required=True)
    refund_amount = Float(min_value=0.0)


@storefront.command(part_of="Order")
class CompleteReturn:
    order_id = Identifier(required=True)
    changed_by = Identifier()


@storefront.command_handler(part_of=Order)
class ManageReturnsHandler:
    @handle(RequestReturn)
    def request_return(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.request_return(reason=command.reason)
        repo.add(order)
        return str(order.id)

    @handle(ProcessReturn)
    def process_return(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.process_return(approve=command.approve, refund_amount=command.refund_amount)
        repo.add(order)
        return str(order.id)

    @handle(CompleteReturn)
    def complete_return(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.complete_return(changed_by=command.changed_by)
        repo.add(order)

        logger.info(
            "return_completed",
            order_id=str(order.id),
            order_number=order.order_number,
            refund_amount=order.return_request.refund_amount,
        )
        return str(order.id)
