"""Order cancellation — command and handler.

Cancelling puts every line's quantity back on the product it came from, in
the same Unit of Work as the status change.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.order.order import Order
from storefront.product.product import Product


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
    cancelled_by = Identifier()


def restock_order(order):
    """Return the quantities of every line of ``order`` to stock."""
    product_repo = current_domain.repository_for(Product)
    products = {}
    for item in order.items:
        product = products.get(item.product_id)
        if product is None:
            product = products[item.product_id] = product_repo.get(item.product_id)
        product.update_stock(item.color, item.size, item.quantity)

    for product in products.values():
        product_repo.add(product)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.cancel(reason=command.reason, cancelled_by=command.cancelled_by)
        restock_order(order)
        repo.add(order)

        logger.info(
            "order_cancelled",
            order_id=str(order.id),
            order_number=order.order_number,
            reason=command.reason,
        )
        return str(order.id)
