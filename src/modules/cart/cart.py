"""Session-scoped shopping cart.

The cart is a plain value object owned by one shopper's session; there is no
process-wide cart state.  Lines are keyed by variant id and carry a snapshot
of what the shopper saw (title, price, size, color) for display.  Snapshots
are advisory: stock is re-checked on every add and again, authoritatively,
inside the order placement transaction.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class CartLine:
    variant_id: str
    product_id: str
    quantity: int
    unit_price: Decimal
    title: str
    sku: str = ""
    image: str = ""
    size: str = ""
    color: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["unit_price"] = str(self.unit_price)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartLine":
        return cls(
            variant_id=str(data["variant_id"]),
            product_id=str(data["product_id"]),
            quantity=int(data["quantity"]),
            unit_price=Decimal(str(data["unit_price"])),
            title=data.get("title", ""),
            sku=data.get("sku", ""),
            image=data.get("image", ""),
            size=data.get("size", ""),
            color=data.get("color", ""),
        )


@dataclass
class Cart:
    lines: Dict[str, CartLine] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def get(self, variant_id: object) -> Optional[CartLine]:
        return self.lines.get(str(variant_id))

    def quantity_of(self, variant_id: object) -> int:
        line = self.get(variant_id)
        return line.quantity if line else 0

    def quantities(self) -> Dict[str, int]:
        return {vid: line.quantity for vid, line in self.lines.items()}

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines.values())

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.lines.values()), Decimal("0.00"))

    def ordered_lines(self) -> List[CartLine]:
        return list(self.lines.values())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def put(self, line: CartLine) -> None:
        self.lines[line.variant_id] = line

    def set_quantity(self, variant_id: object, quantity: int) -> None:
        key = str(variant_id)
        if key not in self.lines:
            return
        if quantity <= 0:
            self.lines.pop(key)
            return
        self.lines[key] = replace(self.lines[key], quantity=quantity)

    def remove(self, variant_id: object) -> None:
        self.lines.pop(str(variant_id), None)

    def clear(self) -> None:
        self.lines.clear()

    # ------------------------------------------------------------------
    # Serialisation (JSON-safe for the session backend)
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {"lines": [line.to_dict() for line in self.lines.values()]}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Cart":
        cart = cls()
        for raw in (data or {}).get("lines", []):
            try:
                line = CartLine.from_dict(raw)
            except (KeyError, TypeError, ValueError, ArithmeticError):
                continue
            if line.quantity > 0:
                cart.put(line)
        return cart
