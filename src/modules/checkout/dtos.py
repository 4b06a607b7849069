"""Checkout DTOs."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from modules.orders.dtos import AddressDTO, PaymentMethodLiteral, ShippingMethodLiteral
from modules.payments.dtos import DispatchResult


class CheckoutRequestDTO(BaseModel):
    """What the shopper submits; lines come from the session cart."""

    model_config = ConfigDict(frozen=True)

    payment_method: PaymentMethodLiteral
    shipping_method: ShippingMethodLiteral
    shipping_address: AddressDTO
    billing_address: Optional[AddressDTO] = None
    expected_total: Optional[Decimal] = None


class CheckoutResultDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: UUID
    order_number: str
    total: Decimal
    currency: str
    payment: DispatchResult
