"""Payment DTOs.

``PaymentInstruction`` is a closed tagged union discriminated by ``method``:
exactly one settlement branch exists per order and the set of branches is
fixed.  Results are equally closed: a gateway redirect or a manual
settlement acknowledgement.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CustomerContact(BaseModel):
    """Customer details the hosted gateway checkout requires."""

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    country: str = "Sri Lanka"

    @classmethod
    def from_address(cls, address) -> "CustomerContact":
        street = ", ".join(part for part in (address.line1, address.line2) if part)
        return cls(
            first_name=address.first_name,
            last_name=address.last_name,
            email=address.email,
            phone=address.phone,
            address=street,
            city=address.city,
            country=address.country,
        )


# ---------------------------------------------------------------------------
# Instructions (input to the dispatcher)
# ---------------------------------------------------------------------------


class GatewayRedirect(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: Literal["payhere"] = "payhere"
    customer: CustomerContact
    return_url: str
    cancel_url: str


class BankTransfer(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: Literal["bank"] = "bank"


class CashOnDelivery(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: Literal["cod"] = "cod"


PaymentInstruction = Annotated[
    Union[GatewayRedirect, BankTransfer, CashOnDelivery],
    Field(discriminator="method"),
]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class GatewayRedirectResult(BaseModel):
    """The browser must POST ``fields`` to ``checkout_url``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["gateway_redirect"] = "gateway_redirect"
    checkout_url: str
    fields: Dict[str, str]


class ManualSettlementResult(BaseModel):
    """Bank transfer or cash on delivery: no gateway involved."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["manual_settlement"] = "manual_settlement"
    display_status: str
    instructions: str


DispatchResult = Union[GatewayRedirectResult, ManualSettlementResult]


# ---------------------------------------------------------------------------
# Gateway notification
# ---------------------------------------------------------------------------


class PayHereNotificationDTO(BaseModel):
    """Server-to-server payment notification posted by PayHere."""

    model_config = ConfigDict(frozen=True)

    merchant_id: str
    order_id: str
    payment_id: str = ""
    payhere_amount: str
    payhere_currency: str
    status_code: int
    md5sig: str
    status_message: str = ""
    method: str = ""

    @field_validator("payhere_amount")
    @classmethod
    def amount_must_be_decimal(cls, v: str) -> str:
        try:
            Decimal(v)
        except (InvalidOperation, TypeError):
            raise ValueError("payhere_amount must be a decimal amount.")
        return v

    @property
    def amount(self) -> Decimal:
        return Decimal(self.payhere_amount)

    def signed_fields(self) -> Dict[str, str]:
        return {
            "merchant_id": self.merchant_id,
            "order_id": self.order_id,
            "payhere_amount": self.payhere_amount,
            "payhere_currency": self.payhere_currency,
            "status_code": str(self.status_code),
            "md5sig": self.md5sig,
        }


class NotificationOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_number: str
    applied: bool
    payment_status: str
    status: str
    notes: List[str] = Field(default_factory=list)
    reason: Optional[str] = None
