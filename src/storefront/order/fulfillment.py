"""Shipping and admin status changes — commands and handler."""

from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.order.cancellation import restock_order
from storefront.order.order import Order, OrderStatus


@storefront.command(part_of="Order")
class UpdateShipping:
    order_id = Identifier(required=True)
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    estimated_delivery = DateTime()
    method = String(max_length=20)
    changed_by = Identifier()


@storefront.command(part_of="Order")
class MarkDelivered:
    order_id = Identifier(required=True)
    changed_by = Identifier()


@storefront.command(part_of="Order")
class AdvanceOrderStatus:
    """Move an order to any status its current one allows."""

    order_id = Identifier(required=True)
    status = String(required=True, max_length=20, choices=OrderStatus)
    note = String(max_length=500)
    changed_by = Identifier()


@storefront.command_handler(part_of=Order)
class FulfillOrderHandler:
    @handle(UpdateShipping)
    def update_shipping(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_shipping(
            tracking_number=command.tracking_number,
            carrier=command.carrier,
            estimated_delivery=command.estimated_delivery,
            method=command.method,
            changed_by=command.changed_by,
        )
        repo.add(order)
        return str(order.id)

    @handle(MarkDelivered)
    def mark_delivered(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_delivered(changed_by=command.changed_by)
        repo.add(order)
        return str(order.id)

    @handle(AdvanceOrderStatus)
    def advance_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        order.advance_status(command.status, note=command.note, changed_by=command.changed_by)
        if order.status == OrderStatus.CANCELLED.value:
            restock_order(order)
        repo.add(order)

        logger.info(
            "order_status_advanced",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.status,
        )
        return str(order.id)
