"""Storefront domain — catalogue, carts, orders and reviews.

A single Protean domain hosts every aggregate so that checkout can decrement
stock across several products and persist the order in one Unit of Work.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
