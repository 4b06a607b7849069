"""Cart service layer.

Enforces the add-to-cart ceiling ``delta + already_in_cart <= live_stock``
against stock re-read from storage on every call.  Decreasing demand
(``set_quantity`` downwards, ``remove_line``) never needs a stock check;
raising a quantity through ``set_quantity`` is held to live stock too.

The ceiling is advisory: two shoppers can both pass it for the last unit.
The order placement transaction is the authority on stock.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, List

import structlog

from modules.cart.cart import Cart, CartLine
from modules.catalog.exceptions import (
    InsufficientStock,
    VariantInactive,
    VariantNotFound,
)

if TYPE_CHECKING:
    from modules.catalog.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class CartService:
    """Cart use-cases; receives the catalog repository via injection."""

    def __init__(self, product_repository: IProductRepository) -> None:
        self._products = product_repository

    def add_line(self, cart: Cart, variant_id: str, delta: int = 1) -> CartLine:
        """Add *delta* units of a variant, failing past live stock.

        Raises:
            VariantNotFound: unknown variant.
            VariantInactive: variant or product is no longer sold.
            InsufficientStock: carries the remaining addable quantity.
        """
        if delta < 1:
            raise ValueError("Quantity to add must be at least 1.")

        log = logger.bind(variant_id=str(variant_id), delta=delta)
        variant = self._products.get_variant(variant_id)
        if variant is None:
            raise VariantNotFound(variant_id)
        if not variant.is_active or not variant.product.is_active:
            raise VariantInactive(variant.id)

        in_cart = cart.quantity_of(variant.id)
        if delta + in_cart > variant.stock:
            addable = max(variant.stock - in_cart, 0)
            log.info(
                "cart.add_rejected",
                in_cart=in_cart,
                live_stock=variant.stock,
                addable=addable,
            )
            raise InsufficientStock(variant.id, addable, delta)

        line = cart.get(variant.id)
        if line is None:
            line = CartLine(
                variant_id=str(variant.id),
                product_id=str(variant.product_id),
                quantity=delta,
                unit_price=variant.unit_price,
                title=variant.product.title,
                sku=variant.sku,
                image=variant.product.image_url,
                size=variant.size,
                color=variant.color,
            )
        else:
            line = replace(line, quantity=line.quantity + delta)
        cart.put(line)
        log.info("cart.line_added", quantity=line.quantity)
        return line

    def set_quantity(self, cart: Cart, variant_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line.

        Raising a quantity re-reads the variant and fails past live stock,
        the same way ``add_line`` does.  Lowering it never touches storage.
        """
        line = cart.get(variant_id)
        if line is not None and quantity > line.quantity:
            variant = self._products.get_variant(line.variant_id)
            if variant is None:
                raise VariantNotFound(line.variant_id)
            if not variant.is_active or not variant.product.is_active:
                raise VariantInactive(variant.id)
            if quantity > variant.stock:
                logger.info(
                    "cart.quantity_rejected",
                    variant_id=line.variant_id,
                    requested=quantity,
                    live_stock=variant.stock,
                )
                raise InsufficientStock(variant.id, variant.stock, quantity)
        cart.set_quantity(variant_id, quantity)

    def remove_line(self, cart: Cart, variant_id: str) -> None:
        cart.remove(variant_id)

    def clear(self, cart: Cart) -> None:
        cart.clear()

    def revalidate(self, cart: Cart) -> List[str]:
        """Reconcile the cart with live catalog state.

        Drops lines whose variant is gone, inactive or sold out, clamps
        quantities to live stock and refreshes unit price snapshots.  Returns
        human-readable messages describing each adjustment (empty when the
        cart was already consistent).
        """
        messages: List[str] = []
        live = self._products.get_variants(cart.lines.keys())

        for line in cart.ordered_lines():
            label = _describe(line)
            variant = live.get(line.variant_id)
            if variant is None or not (variant.is_active and variant.product.is_active):
                cart.remove(line.variant_id)
                messages.append(f"{label} is no longer available and was removed.")
                continue
            if variant.stock == 0:
                cart.remove(line.variant_id)
                messages.append(f"{label} is out of stock and was removed.")
                continue

            updated = line
            if line.quantity > variant.stock:
                updated = replace(updated, quantity=variant.stock)
                messages.append(
                    f"Only {variant.stock} of {label} available; "
                    f"quantity reduced from {line.quantity}."
                )
            if variant.unit_price != line.unit_price:
                updated = replace(updated, unit_price=variant.unit_price)
                messages.append(
                    f"The price of {label} changed from {line.unit_price} "
                    f"to {variant.unit_price}."
                )
            if updated is not line:
                cart.put(updated)

        if messages:
            logger.info("cart.revalidated", adjustments=len(messages))
        return messages


def _describe(line: CartLine) -> str:
    axes = ", ".join(part for part in (line.size, line.color) if part)
    return f"{line.title} ({axes})" if axes else line.title
