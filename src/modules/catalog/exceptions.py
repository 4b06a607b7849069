"""Catalog and stock domain exceptions.

Raised by the Service Layer (and the order placement transaction) when a
variant cannot satisfy a request.  Each stock failure carries the failing
variant id and the quantity that is still available so callers can tell the
shopper exactly what can be bought.
"""

from __future__ import annotations

from typing import Optional


class ProductNotFound(Exception):
    """The requested product does not exist or is not active."""


class StockError(Exception):
    """Base class for failures that name a variant and its available quantity."""

    def __init__(
        self,
        variant_id: object,
        available_quantity: int = 0,
        message: Optional[str] = None,
    ) -> None:
        self.variant_id = str(variant_id)
        self.available_quantity = max(int(available_quantity), 0)
        super().__init__(message or self.default_message())

    def default_message(self) -> str:
        return f"Variant {self.variant_id} is unavailable."


class InsufficientStock(StockError):
    """Requested quantity exceeds live stock for a variant."""

    def __init__(
        self,
        variant_id: object,
        available_quantity: int,
        requested_quantity: Optional[int] = None,
    ) -> None:
        self.requested_quantity = requested_quantity
        super().__init__(variant_id, available_quantity)

    def default_message(self) -> str:
        if self.requested_quantity is None:
            return (
                f"Variant {self.variant_id}: only "
                f"{self.available_quantity} available."
            )
        return (
            f"Variant {self.variant_id}: requested {self.requested_quantity}, "
            f"only {self.available_quantity} available."
        )


class VariantInactive(StockError):
    """The variant has been deactivated and can no longer be sold."""

    def default_message(self) -> str:
        return f"Variant {self.variant_id} is no longer available for sale."


class VariantNotFound(StockError):
    """The variant does not exist."""

    def default_message(self) -> str:
        return f"Variant {self.variant_id} not found."


class InvalidStockAdjustment(Exception):
    """A stock adjustment would leave the variant with negative stock."""
