"""Order payment — commands and handler.

The payment gateway itself lives outside the system; these commands record
what it reported.
"""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class ProcessPayment:
    order_id = Identifier(required=True)
    transaction_id = String(required=True, max_length=255)
    payment_intent_id = String(max_length=255)


@storefront.command(part_of="Order")
class RecordPaymentFailure:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@storefront.command(part_of="Order")
class RefundOrder:
    order_id = Identifier(required=True)
    amount = Float(min_value=0.0)  # Defaults to the refundable balance


@storefront.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(ProcessPayment)
    def process_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.process_payment(
            transaction_id=command.transaction_id,
            payment_intent_id=command.payment_intent_id,
        )
        repo.add(order)

        logger.info(
            "payment_processed",
            order_id=str(order.id),
            order_number=order.order_number,
            amount=order.pricing.total,
        )
        return str(order.id)

    @handle(RecordPaymentFailure)
    def record_payment_failure(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_payment_failure(reason=command.reason)
        repo.add(order)

        logger.warning("payment_failed", order_id=str(order.id), reason=command.reason)
        return str(order.id)

    @handle(RefundOrder)
    def refund_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.refund(command.amount)
        repo.add(order)
        return str(order.id)
