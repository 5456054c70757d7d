"""Order aggregate (CQRS) — the record of a checkout and its lifecycle.

Line items and prices are snapshots taken at checkout; later catalogue edits
never reach an order. The primary ``status`` follows a closed transition
table, and every change of it appends exactly one ``StatusChange`` in the same
method, so the status and its history are always saved together.

State Machine:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    PENDING → PROCESSING (manual fulfilment without payment confirmation)
    PENDING | CONFIRMED | PROCESSING → CANCELLED
    DELIVERED → RETURNED (after an approved return completes)
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.exceptions import (
    InvalidStateError,
    InvalidTransitionError,
    ReturnWindowExpiredError,
)
from storefront.order.events import (
    OrderCancelled,
    OrderPlaced,
    OrderStatusChanged,
    PaymentFailed,
    PaymentProcessed,
    PaymentRefunded,
    ReturnCompleted,
    ReturnProcessed,
    ReturnRequested,
    ShippingUpdated,
)

RETURN_WINDOW_DAYS = 30


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class PaymentMethod(Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"


class PaymentStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class ShippingMethod(Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"
    PICKUP = "pickup"


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class ReturnStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: {OrderStatus.RETURNED},
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.RETURNED: set(),  # Terminal
}

# Targets that need data of their own, so the generic admin move refuses them
_DEDICATED_TRANSITIONS = {
    OrderStatus.SHIPPED: "update_shipping with a tracking number",
    OrderStatus.RETURNED: "complete_return",
}

# Payment states from which money can still be refunded
_REFUNDABLE_PAYMENT_STATES = {PaymentStatus.COMPLETED, PaymentStatus.PARTIALLY_REFUNDED}


def can_transition(current, target):
    return OrderStatus(target) in _VALID_TRANSITIONS[OrderStatus(current)]


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class Address:
    """A postal address captured at checkout time."""

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(max_length=30)


@storefront.value_object(part_of="Order")
class OrderPricing:
    """Financial summary: ``total = subtotal + shipping + tax - discount``."""

    subtotal = Float(default=0.0, min_value=0.0)
    shipping = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0, min_value=0.0)
    currency = String(max_length=3, default="USD")

    @invariant.post
    def total_must_add_up(self):
        expected = round(self.subtotal + self.shipping + self.tax - self.discount, 2)
        if abs(self.total - expected) > 0.005:
            raise ValidationError({"total": [f"Total {self.total} does not equal {expected}"]})


@storefront.value_object(part_of="Order")
class Payment:
    method = String(max_length=20, choices=PaymentMethod)
    status = String(max_length=20, choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    transaction_id = String(max_length=255)
    payment_intent_id = String(max_length=255)
    paid_at = DateTime()
    refunded_at = DateTime()
    refund_amount = Float(default=0.0, min_value=0.0)


@storefront.value_object(part_of="Order")
class Shipment:
    method = String(max_length=20, choices=ShippingMethod, default=ShippingMethod.STANDARD.value)
    carrier = String(max_length=100)
    tracking_number = String(max_length=255)
    estimated_delivery = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()


@storefront.value_object(part_of="Order")
class Coupon:
    code = String(required=True, max_length=50)
    discount_type = String(required=True, max_length=20, choices=DiscountType)
    discount_value = Float(required=True, min_value=0.0)
    applied_discount = Float(default=0.0, min_value=0.0)

    @invariant.post
    def percentage_must_not_exceed_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and self.discount_value > 100:
            raise ValidationError({"discount_value": ["A percentage discount cannot exceed 100"]})

    def discount_for(self, subtotal):
        if self.discount_type == DiscountType.PERCENTAGE.value:
            return round(subtotal * self.discount_value / 100, 2)
        return round(min(self.discount_value, subtotal), 2)


@storefront.value_object(part_of="Order")
class ReturnRequest:
    requested_at = DateTime(required=True)
    reason = String(required=True, max_length=500)
    status = String(max_length=20, choices=ReturnStatus, default=ReturnStatus.PENDING.value)
    processed_at = DateTime()
    refund_amount = Float(min_value=0.0)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A line of the order, copied from the product at checkout."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    image = String(max_length=500)
    color = String(required=True, max_length=50)
    size = String(required=True, max_length=10)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    total_price = Float(required=True, min_value=0.0)


@storefront.entity(part_of="Order")
class StatusChange:
    """One entry of the append-only status history."""

    status = String(required=True, max_length=20, choices=OrderStatus)
    changed_at = DateTime(required=True)
    note = String(max_length=500)
    changed_by = Identifier()


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    pricing = ValueObject(OrderPricing)
    shipping_address = ValueObject(Address, required=True)
    billing_address = ValueObject(Address)
    billing_same_as_shipping = Boolean(default=True)
    payment = ValueObject(Payment)
    shipping = ValueObject(Shipment)
    coupon = ValueObject(Coupon)
    return_request = ValueObject(ReturnRequest)
    status = String(max_length=20, choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = HasMany(StatusChange)
    customer_notes = Text()
    internal_notes = Text()
    cancellation_reason = String(max_length=500)
    cancelled_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number,
        user_id,
        items,
        shipping_address,
        billing_address=None,
        billing_same_as_shipping=True,
        shipping_cost=0.0,
        tax=0.0,
        coupon=None,
        payment_method=None,
        shipping_method=None,
        customer_notes=None,
        currency="USD",
    ):
        """Build a pending order from snapshot lines.

        Args:
            items: list of dicts with product_id, name, image, color, size,
                quantity and unit_price.
            shipping_address / billing_address: dicts of ``Address`` fields.
            coupon: optional dict with code, discount_type and discount_value.
        """
        if not items:
            raise ValidationError({"items": ["Cannot place an order without items"]})

        lines = [
            OrderItem(
                product_id=item["product_id"],
                name=item["name"],
                image=item.get("image"),
                color=item["color"],
                size=item["size"],
                quantity=item["quantity"],
                unit_price=item["unit_price"],
                total_price=round(item["quantity"] * item["unit_price"], 2),
            )
            for item in items
        ]
        subtotal = round(sum(line.total_price for line in lines), 2)

        coupon_vo = None
        discount = 0.0
        if coupon:
            coupon_vo = Coupon(
                code=coupon["code"],
                discount_type=coupon["discount_type"],
                discount_value=coupon["discount_value"],
            )
            discount = coupon_vo.discount_for(subtotal)
            coupon_vo = coupon_vo.replace(applied_discount=discount)

        shipping_vo = Address(**shipping_address)
        # Billing falls back to the shipping address unless a distinct one is given
        use_shipping = billing_same_as_shipping or not (billing_address or {}).get("street")
        billing_vo = shipping_vo if use_shipping else Address(**billing_address)

        pricing = OrderPricing(
            subtotal=subtotal,
            shipping=shipping_cost,
            tax=tax,
            discount=discount,
            total=round(subtotal + shipping_cost + tax - discount, 2),
            currency=currency,
        )

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            user_id=user_id,
            items=lines,
            pricing=pricing,
            shipping_address=shipping_vo,
            billing_address=billing_vo,
            billing_same_as_shipping=use_shipping,
            payment=Payment(method=payment_method),
            shipping=Shipment(method=shipping_method or ShippingMethod.STANDARD.value),
            coupon=coupon_vo,
            status=OrderStatus.PENDING.value,
            customer_notes=customer_notes,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                user_id=str(user_id),
                item_count=sum(line.quantity for line in lines),
                total=pricing.total,
                currency=currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status machine
    # -------------------------------------------------------------------
    def _transition_to(self, new_status, note=None, changed_by=None):
        """Change the primary status and record it; the only writer of ``status``."""
        current = OrderStatus(self.status)
        target = OrderStatus(new_status)
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransitionError(current.value, target.value)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            self.add_status_history(
                StatusChange(
                    status=target.value,
                    changed_at=now,
                    note=note or f"Status changed to {target.value}",
                    changed_by=changed_by,
                )
            )
            self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                new_status=target.value,
                note=note,
                changed_by=str(changed_by) if changed_by else None,
                changed_at=now,
            )
        )
        return now

    def advance_status(self, new_status, note=None, changed_by=None):
        """Apply a transition the table allows (admin action).

        Moving to ``cancelled`` goes through ``cancel`` so the reason and the
        cancellation event are recorded the same way. ``shipped`` and
        ``returned`` carry data of their own and are only reachable through
        ``update_shipping`` (a tracking number) and ``complete_return``.
        """
        target = OrderStatus(new_status)
        if target == OrderStatus.CANCELLED:
            self.cancel(note or "Cancelled by administrator", cancelled_by=changed_by)
            return
        if target in _DEDICATED_TRANSITIONS:
            raise InvalidTransitionError(
                self.status,
                target.value,
                f"An order becomes '{target.value}' through {_DEDICATED_TRANSITIONS[target]}",
            )

        now = self._transition_to(target.value, note=note, changed_by=changed_by)
        if target == OrderStatus.DELIVERED:
            self.shipping = (self.shipping or Shipment()).replace(delivered_at=now)

    def cancel(self, reason, cancelled_by=None):
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["A cancellation reason is required"]})

        current = OrderStatus(self.status)
        if not can_transition(current, OrderStatus.CANCELLED):
            raise InvalidTransitionError(
                current.value,
                OrderStatus.CANCELLED.value,
                f"Order in '{current.value}' status cannot be cancelled",
            )

        now = self._transition_to(OrderStatus.CANCELLED.value, note=f"Cancelled: {reason}", changed_by=cancelled_by)
        self.cancellation_reason = reason
        self.cancelled_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                reason=reason,
                cancelled_by=str(cancelled_by) if cancelled_by else None,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Shipping
    # -------------------------------------------------------------------
    def update_shipping(
        self,
        tracking_number=None,
        carrier=None,
        estimated_delivery=None,
        method=None,
        changed_by=None,
    ):
        """Record shipping details; a tracking number ships a processing order."""
        if OrderStatus(self.status) in (OrderStatus.CANCELLED, OrderStatus.RETURNED):
            raise InvalidStateError(f"Cannot update shipping of a {self.status} order")

        changes = {}
        if tracking_number is not None:
            changes["tracking_number"] = tracking_number
        if carrier is not None:
            changes["carrier"] = carrier
        if estimated_delivery is not None:
            changes["estimated_delivery"] = estimated_delivery
        if method is not None:
            changes["method"] = method

        shipment = self.shipping or Shipment()
        if tracking_number and OrderStatus(self.status) == OrderStatus.PROCESSING:
            now = self._transition_to(
                OrderStatus.SHIPPED.value,
                note=f"Order shipped with tracking number {tracking_number}",
                changed_by=changed_by,
            )
            changes["shipped_at"] = now

        self.shipping = shipment.replace(**changes)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ShippingUpdated(
                order_id=str(self.id),
                order_number=self.order_number,
                carrier=self.shipping.carrier,
                tracking_number=self.shipping.tracking_number,
                status=self.status,
            )
        )

    def mark_delivered(self, changed_by=None):
        now = self._transition_to(OrderStatus.DELIVERED.value, note="Order delivered", changed_by=changed_by)
        self.shipping = (self.shipping or Shipment()).replace(delivered_at=now)

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def process_payment(self, transaction_id, payment_intent_id=None, changed_by=None):
        """Record a successful charge; confirms the order if it is still pending."""
        if OrderStatus(self.status) in (OrderStatus.CANCELLED, OrderStatus.RETURNED):
            raise InvalidStateError(f"Cannot take payment for a {self.status} order")
        if PaymentStatus(self.payment.status) not in (
            PaymentStatus.PENDING,
            PaymentStatus.PROCESSING,
            PaymentStatus.FAILED,
        ):
            raise InvalidStateError(f"Payment is already {self.payment.status}")

        now = datetime.now(UTC)
        self.payment = self.payment.replace(
            status=PaymentStatus.COMPLETED.value,
            transaction_id=transaction_id,
            payment_intent_id=payment_intent_id,
            paid_at=now,
        )
        if OrderStatus(self.status) == OrderStatus.PENDING:
            self._transition_to(
                OrderStatus.CONFIRMED.value,
                note="Payment processed successfully",
                changed_by=changed_by,
            )
        self.updated_at = now

        self.raise_(
            PaymentProcessed(
                order_id=str(self.id),
                order_number=self.order_number,
                transaction_id=transaction_id,
                amount=self.pricing.total,
                paid_at=now,
            )
        )

    def record_payment_failure(self, reason=None):
        if PaymentStatus(self.payment.status) not in (PaymentStatus.PENDING, PaymentStatus.PROCESSING):
            raise InvalidStateError(f"Cannot fail a payment that is {self.payment.status}")

        self.payment = self.payment.replace(status=PaymentStatus.FAILED.value)
        self.updated_at = datetime.now(UTC)
        self.raise_(PaymentFailed(order_id=str(self.id), order_number=self.order_number, reason=reason))

    @property
    def refundable_amount(self):
        return round(self.pricing.total - (self.payment.refund_amount or 0.0), 2)

    def refund(self, amount=None):
        """Refund ``amount`` (default: everything still refundable)."""
        if PaymentStatus(self.payment.status) not in _REFUNDABLE_PAYMENT_STATES:
            raise InvalidStateError(f"Cannot refund a payment that is {self.payment.status}")

        amount = self.refundable_amount if amount is None else round(amount, 2)
        if amount <= 0 or amount > self.refundable_amount:
            raise ValidationError(
                {"amount": [f"Refund must be between 0 and {self.refundable_amount}, got {amount}"]}
            )

        refunded = round((self.payment.refund_amount or 0.0) + amount, 2)
        fully_refunded = refunded >= self.pricing.total
        now = datetime.now(UTC)
        self.payment = self.payment.replace(
            status=(PaymentStatus.REFUNDED if fully_refunded else PaymentStatus.PARTIALLY_REFUNDED).value,
            refund_amount=refunded,
            refunded_at=now,
        )
        self.updated_at = now

        self.raise_(
            PaymentRefunded(
                order_id=str(self.id),
                order_number=self.order_number,
                amount=amount,
                total_refunded=refunded,
                refunded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Returns
    # -------------------------------------------------------------------
    def request_return(self, reason, requested_at=None):
        if OrderStatus(self.status) != OrderStatus.DELIVERED:
            raise InvalidStateError(f"Only delivered orders can be returned, order is {self.status}")
        if self.return_request is not None and ReturnStatus(self.return_request.status) in (
            ReturnStatus.PENDING,
            ReturnStatus.APPROVED,
        ):
            raise InvalidStateError("A return request is already open for this order")
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["A return reason is required"]})

        requested_at = requested_at or datetime.now(UTC)
        delivered_at = self.shipping.delivered_at if self.shipping else None
        if delivered_at is None or requested_at > delivered_at + timedelta(days=RETURN_WINDOW_DAYS):
            raise ReturnWindowExpiredError(
                f"Return window of {RETURN_WINDOW_DAYS} days has expired for order {self.order_number}"
            )

        self.return_request = ReturnRequest(requested_at=requested_at, reason=reason)
        self.updated_at = requested_at

        self.raise_(
            ReturnRequested(
                order_id=str(self.id),
                order_number=self.order_number,
                reason=reason,
                requested_at=requested_at,
            )
        )

    def process_return(self, approve, refund_amount=None):
        """Approve or reject the open return request."""
        if self.return_request is None or ReturnStatus(self.return_request.status) != ReturnStatus.PENDING:
            raise InvalidStateError("There is no pending return request to process")

        now = datetime.now(UTC)
        if approve:
            amount = self.pricing.total if refund_amount is None else round(refund_amount, 2)
            if amount > self.pricing.total:
                raise ValidationError({"refund_amount": ["Refund cannot exceed the order total"]})
            self.return_request = self.return_request.replace(
                status=ReturnStatus.APPROVED.value,
                processed_at=now,
                refund_amount=amount,
            )
        else:
            self.return_request = self.return_request.replace(status=ReturnStatus.REJECTED.value, processed_at=now)
        self.updated_at = now

        self.raise_(
            ReturnProcessed(
                order_id=str(self.id),
                order_number=self.order_number,
                approved=approve,
                refund_amount=self.return_request.refund_amount,
            )
        )

    def complete_return(self, changed_by=None):
        """Close an approved return: the order becomes ``returned`` and the refund is booked."""
        if self.return_request is None or ReturnStatus(self.return_request.status) != ReturnStatus.APPROVED:
            raise InvalidStateError("Only an approved return can be completed")

        now = self._transition_to(OrderStatus.RETURNED.value, note="Return completed", changed_by=changed_by)
        self.return_request = self.return_request.replace(status=ReturnStatus.COMPLETED.value, processed_at=now)

        refund_amount = min(self.return_request.refund_amount or 0.0, self.refundable_amount)
        if refund_amount > 0 and PaymentStatus(self.payment.status) in _REFUNDABLE_PAYMENT_STATES:
            self.refund(refund_amount)

        self.raise_(
            ReturnCompleted(
                order_id=str(self.id),
                order_number=self.order_number,
                refund_amount=refund_amount,
                completed_at=now,
            )
        )
