"""Order repository — read access by number, owner and date range."""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.query import Q

from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.order.order import Order, OrderStatus, PaymentStatus
from storefront.utils.pagination import paginate


@storefront.repository(part_of=Order)
class OrderRepository:
    def get(self, identifier):
        try:
            return super().get(identifier)
        except ObjectNotFoundError:
            raise NotFoundError(f"Order {identifier} not found") from None

    def by_number(self, order_number):
        order = self.query.filter(order_number=order_number).all().first
        if order is None:
            raise NotFoundError(f"Order {order_number} not found")
        return order

    def number_taken(self, order_number):
        return self.exists(Q(order_number=order_number))

    def for_user(self, user_id, status=None, page=1, per_page=None):
        """A user's orders, newest first, optionally narrowed to one status."""
        queryset = self.query.filter(user_id=str(user_id))
        if status is not None:
            if status not in {s.value for s in OrderStatus}:
                raise ValidationError({"status": [f"Unknown order status '{status}'"]})
            queryset = queryset.filter(status=status)
        return paginate(queryset.order_by("-created_at"), page=page, per_page=per_page)

    def between(self, start, end):
        """All orders created in ``[start, end]``, oldest first."""
        return (
            self.query.filter(created_at__gte=start, created_at__lte=end)
            .order_by("created_at")
            .limit(None)
            .all()
            .items
        )

    def sales_stats(self, start, end):
        """Revenue figures over the paid orders created in ``[start, end]``."""
        paid = [order for order in self.between(start, end) if order.payment.status == PaymentStatus.COMPLETED.value]

        total_revenue = round(sum(order.pricing.total for order in paid), 2)
        return {
            "total_orders": len(paid),
            "total_revenue": total_revenue,
            "average_order_value": round(total_revenue / len(paid), 2) if paid else 0.0,
            "total_items": sum(item.quantity for order in paid for item in order.items),
        }
