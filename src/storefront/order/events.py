"""Domain events for the Order aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out into a new pending order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    item_count = Integer(required=True)
    total = Float(required=True)
    currency = String(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    note = String()
    changed_by = Identifier()
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    reason = String(required=True)
    cancelled_by = Identifier()
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class ShippingUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    carrier = String()
    tracking_number = String()
    status = String(required=True)


@storefront.event(part_of="Order")
class PaymentProcessed:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    transaction_id = String(required=True)
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentFailed:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    reason = String()


@storefront.event(part_of="Order")
class PaymentRefunded:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    amount = Float(required=True)
    total_refunded = Float(required=True)
    refunded_at = DateTime(required=True)


@storefront.event(part_of="Order")
class ReturnRequested:
    """The customer asked to send a delivered order back."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    reason = String(required=True)
    requested_at = DateTime(required=True)


@storefront.event(part_of="Order")
class ReturnProcessed:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    approved = Boolean(required=True)
    refund_amount = Float()


@storefront.event(part_of="Order")
class ReturnCompleted:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    refund_amount = Float(default=0.0)
    completed_at = DateTime(required=True)
