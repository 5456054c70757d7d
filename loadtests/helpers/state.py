"""What a simulated shopper remembers between Locust tasks.

Ids come from the creation responses; nothing is shared between users.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks one simulated shopper from browsing through review."""

    user_id: str | None = None
    product_id: str | None = None
    colors: list[str] = field(default_factory=list)
    item_ids: list[str] = field(default_factory=list)
    order_id: str | None = None
    review_id: str | None = None
