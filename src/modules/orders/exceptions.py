"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.  The API
layer (Views) catches these and translates them into HTTP responses.

Stock failures (``InsufficientStock``, ``VariantInactive``,
``VariantNotFound``) belong to the catalog and live in
``modules.catalog.exceptions``.
"""

from __future__ import annotations


class OrderNotFound(Exception):
    """The requested order does not exist (or is not visible to the caller)."""


class InvalidOrderStatus(Exception):
    """An invalid status transition was attempted."""


class InvalidPaymentStatus(Exception):
    """An invalid payment status transition was attempted."""


class Unauthenticated(Exception):
    """Order placement was attempted without an authenticated user."""


class TransactionFault(Exception):
    """Storage failed during placement; nothing was committed.

    Safe to retry: the transaction was rolled back as a whole.
    """

    retryable = True


class EmptyCart(Exception):
    """Checkout was submitted with nothing in the cart."""


class CartAdjusted(Exception):
    """The cart changed against live stock and must be reviewed before checkout."""

    def __init__(self, messages: list[str]) -> None:
        self.messages = list(messages)
        super().__init__("Your cart was updated to match available stock.")
