"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderPlaced(DomainEvent):
    """Raised when the placement transaction inserts an order."""

    order_number: str = ""
    payment_method: str = ""
    total: str = ""


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised when an order's fulfilment status changes."""

    old_status: str = ""
    new_status: str = ""


@dataclass(frozen=True)
class PaymentStatusChanged(DomainEvent):
    """Raised when an order's payment status changes."""

    old_status: str = ""
    new_status: str = ""
