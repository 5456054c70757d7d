"""Cart repository — carts are looked up by their owner."""

from protean.exceptions import ObjectNotFoundError

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.exceptions import NotFoundError


@storefront.repository(part_of=Cart)
class CartRepository:
    def get(self, identifier):
        try:
            return super().get(identifier)
        except ObjectNotFoundError:
            raise NotFoundError(f"Cart {identifier} not found") from None

    def for_user(self, user_id):
        """The user's cart, or ``None`` if they have never had one."""
        return self.query.filter(user_id=str(user_id)).all().first

    def get_for_user(self, user_id):
        cart = self.for_user(user_id)
        if cart is None:
            raise NotFoundError(f"No cart for user {user_id}")
        return cart

    def get_or_create_for_user(self, user_id):
        """The user's cart, creating (but not persisting) an empty one if needed."""
        return self.for_user(user_id) or Cart.create(user_id=user_id)
