"""Checkout — turns the user's cart into a pending order.

Everything happens in the handler's single Unit of Work: stock for every
line is decremented, the day's order-number counter is advanced, the order
is stored and the cart emptied. Any failure (an inactive product, one line
short of stock, a version conflict) rolls the whole checkout back.
"""

from protean import handle
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.fields import Boolean, Dict, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import logger, storefront
from storefront.exceptions import NotFoundError
from storefront.order.order import Order
from storefront.product.product import Product
from storefront.sequence.sequence import next_order_number


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    shipping_address = Dict(required=True)
    billing_address = Dict()
    billing_same_as_shipping = Boolean(default=True)
    payment_method = String(max_length=20)
    shipping_method = String(max_length=20)
    shipping_cost = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    coupon = Dict()  # {"code", "discount_type", "discount_value"}
    customer_notes = Text()


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.for_user(command.user_id)
        if cart is None or not cart.items:
            raise ValidationError({"cart": ["Cannot check out an empty cart"]})

        product_repo = current_domain.repository_for(Product)
        products = {}
        lines = []
        for item in cart.items:
            product = products.get(item.product_id)
            if product is None:
                product = product_repo.get(item.product_id)
                if not product.is_active:
                    raise NotFoundError(f"Product {product.name} is no longer available")
                products[item.product_id] = product

            product.update_stock(item.color, item.size, -item.quantity)
            product.record_sale(item.quantity)

            image = product.primary_image
            lines.append(
                {
                    "product_id": item.product_id,
                    "name": product.name,
                    "image": image.url if image else None,
                    "color": item.color,
                    "size": item.size,
                    "quantity": item.quantity,
                    "unit_price": product.effective_price(item.color, item.size),
                }
            )

        order_number = next_order_number()
        order_repo = current_domain.repository_for(Order)
        if order_repo.number_taken(order_number):
            # Another checkout committed this number; re-run with a fresh counter
            raise ExpectedVersionError(f"Order number {order_number} is already taken")

        order = Order.create(
            order_number=order_number,
            user_id=command.user_id,
            items=lines,
            shipping_address=command.shipping_address,
            billing_address=command.billing_address,
            billing_same_as_shipping=command.billing_same_as_shipping,
            shipping_cost=command.shipping_cost or 0.0,
            tax=command.tax or 0.0,
            coupon=command.coupon or None,
            payment_method=command.payment_method,
            shipping_method=command.shipping_method,
            customer_notes=command.customer_notes,
            currency=current_domain.config["custom"]["DEFAULT_CURRENCY"],
        )

        for product in products.values():
            product_repo.add(product)
        order_repo.add(order)

        cart.clear()
        cart_repo.add(cart)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order_number,
            user_id=str(command.user_id),
            item_count=sum(line["quantity"] for line in lines),
            total=order.pricing.total,
        )
        return str(order.id)
