"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  DTOs are
immutable (``frozen=True``).

- ``AddressDTO``: shipping / billing address with customer contact.
- ``OrderLineDTO``: one requested variant with its cart price snapshot.
- ``PlaceOrderDTO``: input to the order placement transaction.
- ``PlacementResultDTO``: ``{order_id, order_number}`` returned on success.
- ``StatusUpdateDTO`` / ``PaymentStatusUpdateDTO``: admin transitions.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from django.conf import settings
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.orders.constants import OrderStatus, PaymentStatus

PaymentMethodLiteral = Literal["payhere", "bank", "cod"]
ShippingMethodLiteral = Literal["standard", "express"]


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class AddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    email: str
    phone: str
    line1: str
    line2: str = ""
    city: str
    postal_code: str = ""
    country: str = "Sri Lanka"

    @field_validator("first_name", "last_name", "phone", "line1", "city")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("This field must not be blank.")
        return v.strip()

    @field_validator("email")
    @classmethod
    def email_must_look_valid(cls, v: str) -> str:
        v = v.strip()
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("Enter a valid email address.")
        return v.lower()


class OrderLineDTO(BaseModel):
    """A requested line; ``unit_price`` is the cart snapshot."""

    model_config = ConfigDict(frozen=True)

    variant_id: UUID
    quantity: int
    unit_price: Decimal

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v

    @field_validator("unit_price")
    @classmethod
    def price_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Unit price must be greater than zero.")
        return v

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class PlaceOrderDTO(BaseModel):
    """Immutable input to the order placement transaction.

    Validates:
    - ``lines`` is non-empty and names each variant once.
    - ``shipping_cost`` matches the configured rate for ``shipping_method``.
    - ``total`` equals the sum of line totals plus ``shipping_cost``.
    - ``currency`` is the store currency (one currency per order).
    """

    model_config = ConfigDict(frozen=True)

    lines: List[OrderLineDTO]
    payment_method: PaymentMethodLiteral
    shipping_method: ShippingMethodLiteral
    shipping_cost: Decimal
    total: Decimal
    currency: str = "LKR"
    shipping_address: AddressDTO
    billing_address: Optional[AddressDTO] = None

    @field_validator("lines")
    @classmethod
    def lines_must_not_be_empty(cls, v: List[OrderLineDTO]) -> List[OrderLineDTO]:
        if not v:
            raise ValueError("Order must have at least one line.")
        return v

    @model_validator(mode="after")
    def no_duplicate_variants(self):
        variant_ids = [line.variant_id for line in self.lines]
        if len(variant_ids) != len(set(variant_ids)):
            raise ValueError("Duplicate variants are not allowed in the same order.")
        return self

    @model_validator(mode="after")
    def shipping_cost_matches_method(self):
        expected = settings.SHIPPING_RATES[self.shipping_method]
        if self.shipping_cost != expected:
            raise ValueError(
                f"Shipping cost for '{self.shipping_method}' must be {expected}."
            )
        return self

    @model_validator(mode="after")
    def total_matches_lines(self):
        if self.total != self.subtotal + self.shipping_cost:
            raise ValueError(
                f"Total {self.total} does not match lines plus shipping "
                f"({self.subtotal + self.shipping_cost})."
            )
        return self

    @model_validator(mode="after")
    def currency_is_store_currency(self):
        if self.currency != settings.STORE_CURRENCY:
            raise ValueError(f"Orders must be placed in {settings.STORE_CURRENCY}.")
        return self

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0.00"))

    @property
    def effective_billing_address(self) -> AddressDTO:
        return self.billing_address or self.shipping_address


class StatusUpdateDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    notes: str = ""

    @field_validator("status")
    @classmethod
    def status_must_be_known(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in OrderStatus.values:
            raise ValueError(f"Unknown status '{v}'.")
        return v


class PaymentStatusUpdateDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    payment_status: str
    notes: str = ""
    reference: Optional[str] = None

    @field_validator("payment_status")
    @classmethod
    def payment_status_must_be_known(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in PaymentStatus.values:
            raise ValueError(f"Unknown payment status '{v}'.")
        return v


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class PlacementResultDTO(BaseModel):
    """What the placement transaction returns on success."""

    model_config = ConfigDict(frozen=True)

    order_id: UUID
    order_number: str
