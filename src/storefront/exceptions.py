"""Typed errors raised by the storefront domain.

Each error extends the Protean exception that carries the matching HTTP
semantics, so ``register_exception_handlers`` maps them without extra wiring:

    NotFoundError             → ObjectNotFoundError    (404)
    ValidationError           → Protean ValidationError (400)
    InvalidTransitionError    → InvalidStateError      (409)
    ConflictError             → InvalidStateError      (409)
    DuplicateError            → InvalidStateError      (409)
    InsufficientStockError    → InvalidOperationError  (422)
    ReturnWindowExpiredError  → InvalidOperationError  (422)
"""

from protean.exceptions import (
    InvalidOperationError,
    InvalidStateError,
    ObjectNotFoundError,
    ValidationError,
)

__all__ = [
    "ConflictError",
    "DuplicateError",
    "InsufficientStockError",
    "InvalidStateError",
    "InvalidTransitionError",
    "NotFoundError",
    "ReturnWindowExpiredError",
    "ValidationError",
]


class NotFoundError(ObjectNotFoundError):
    """A product, variant, size, cart line, order or review does not exist."""


class InvalidTransitionError(InvalidStateError):
    """A status change that the transition table does not allow."""

    def __init__(self, current, target, message=None):
        self.current = current
        self.target = target
        super().__init__(message or f"Cannot transition from '{current}' to '{target}'")


class InsufficientStockError(InvalidOperationError):
    """A stock adjustment would leave a size with negative stock."""

    def __init__(self, color, size, available, requested):
        self.color = color
        self.size = size
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {color}/{size}: {available} available, {requested} requested"
        )


class ReturnWindowExpiredError(InvalidOperationError):
    """A return was requested after the return window closed."""


class ConflictError(InvalidStateError):
    """A concurrent write kept winning until the retry budget ran out."""


class DuplicateError(InvalidStateError):
    """A uniqueness rule (SKU, slug, one review per user and product) was violated."""
