"""Cart management — opening, clearing and guest-cart merging."""

from protean import handle
from protean.fields import Identifier, List
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import logger, storefront


@storefront.command(part_of="Cart")
class OpenCart:
    """Get-or-create the cart of a user."""

    user_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class MergeGuestCart:
    """Fold the lines of an anonymous session cart into a user's cart on login."""

    user_id = Identifier(required=True)
    guest_items = List(required=True)  # [{product_id, color, size, quantity, unit_price}]


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(OpenCart)
    def open_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is None:
            cart = Cart.create(user_id=command.user_id)
            repo.add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_for_user(command.user_id)
        cart.clear()
        repo.add(cart)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create_for_user(command.user_id)
        cart.merge_guest_items(command.guest_items)
        repo.add(cart)

        logger.info("guest_cart_merged", user_id=str(command.user_id), lines=len(command.guest_items))
        return str(cart.id)
