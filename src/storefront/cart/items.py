"""Cart item management — commands and handler.

``AddToCart`` prices the line from the live product at the moment of adding.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.product.product import Product


@storefront.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    color = String(required=True, max_length=50)
    size = String(required=True, max_length=10)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class UpdateCartItemQuantity:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)  # <= 0 removes the line


@storefront.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        if not product.is_active:
            raise NotFoundError(f"Product {command.product_id} is not available")

        variant = product.find_variant(command.color)
        unit_price = product.effective_price(command.color, command.size)

        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create_for_user(command.user_id)
        item = cart.add_item(
            product_id=command.product_id,
            color=variant.color,
            size=command.size,
            quantity=command.quantity,
            unit_price=unit_price,
        )
        repo.add(cart)
        return str(item.id)

    @handle(UpdateCartItemQuantity)
    def update_item_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_for_user(command.user_id)
        cart.update_item_quantity(command.item_id, command.quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_for_user(command.user_id)
        cart.remove_item(command.item_id)
        repo.add(cart)
