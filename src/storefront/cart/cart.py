"""Cart aggregate (CQRS) — one mutable basket per user.

Lines are identified by ``(product, color, size)``: adding the same triple
again merges into the existing line. Every line holds at most
``MAX_LINE_QUANTITY`` units. ``subtotal`` and ``item_count`` are derived from
the lines and recomputed on every mutation.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
    GuestCartMerged,
)
from storefront.domain import storefront
from storefront.exceptions import NotFoundError

MAX_LINE_QUANTITY = 10


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    color = String(required=True, max_length=50)
    size = String(required=True, max_length=10)
    quantity = Integer(required=True, min_value=1, max_value=MAX_LINE_QUANTITY)
    unit_price = Float(required=True, min_value=0.0)
    total_price = Float(required=True, min_value=0.0)
    added_at = DateTime()

    def matches(self, product_id, color, size):
        return (
            str(self.product_id) == str(product_id) and self.color.lower() == color.lower() and self.size == size
        )


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    subtotal = Float(default=0.0)
    item_count = Integer(default=0)
    created_at = DateTime()
    last_updated = DateTime()

    @invariant.post
    def totals_must_match_lines(self):
        subtotal = round(sum(i.total_price for i in self.items), 2)
        count = sum(i.quantity for i in self.items)
        if abs((self.subtotal or 0.0) - subtotal) > 0.005 or (self.item_count or 0) != count:
            raise ValidationError({"totals": ["Cart totals are out of sync with its lines"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, subtotal=0.0, item_count=0, created_at=now, last_updated=now)

    def find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found in cart")
        return item

    def _recompute_totals(self):
        self.subtotal = round(sum(i.total_price for i in self.items), 2)
        self.item_count = sum(i.quantity for i in self.items)
        self.last_updated = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, color, size, quantity, unit_price):
        """Add ``quantity`` units, merging into an existing line for the same triple."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = next((i for i in self.items if i.matches(product_id, color, size)), None)

        with atomic_change(self):
            if existing:
                existing.quantity = min(existing.quantity + quantity, MAX_LINE_QUANTITY)
                existing.unit_price = unit_price
                existing.total_price = round(existing.quantity * unit_price, 2)
                item = existing
            else:
                capped = min(quantity, MAX_LINE_QUANTITY)
                item = CartItem(
                    product_id=product_id,
                    color=color,
                    size=size,
                    quantity=capped,
                    unit_price=unit_price,
                    total_price=round(capped * unit_price, 2),
                    added_at=datetime.now(UTC),
                )
                self.add_items(item)
            self._recompute_totals()

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                item_id=str(item.id),
                product_id=str(product_id),
                color=color,
                size=size,
                quantity=item.quantity,
                unit_price=unit_price,
            )
        )
        return item

    def update_item_quantity(self, item_id, quantity):
        """Set a line's quantity (capped); zero or less removes the line."""
        item = self.find_item(item_id)
        if quantity <= 0:
            self.remove_item(item_id)
            return

        previous_quantity = item.quantity
        with atomic_change(self):
            item.quantity = min(quantity, MAX_LINE_QUANTITY)
            item.total_price = round(item.quantity * item.unit_price, 2)
            self._recompute_totals()

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=item.quantity,
            )
        )

    def remove_item(self, item_id):
        item = self.find_item(item_id)
        with atomic_change(self):
            self.remove_items(item)
            self._recompute_totals()

        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))

    def clear(self):
        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
            self._recompute_totals()

        self.raise_(CartCleared(cart_id=str(self.id), user_id=str(self.user_id)))

    # -------------------------------------------------------------------
    # Guest cart merging
    # -------------------------------------------------------------------
    def merge_guest_items(self, guest_items):
        """Add every guest line in order, with the usual merge semantics.

        Args:
            guest_items: list of dicts with product_id, color, size, quantity, unit_price.
        """
        for guest_item in guest_items:
            self.add_item(
                product_id=guest_item["product_id"],
                color=guest_item["color"],
                size=guest_item["size"],
                quantity=guest_item["quantity"],
                unit_price=guest_item["unit_price"],
            )

        self.raise_(
            GuestCartMerged(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                lines_merged=len(guest_items),
            )
        )
