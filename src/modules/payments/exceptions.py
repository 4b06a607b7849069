"""Payment domain exceptions."""

from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    """The payment gateway payload could not be produced."""


class GatewayConfigurationError(GatewayError):
    """Merchant credentials are missing or invalid."""


class DispatchFault(Exception):
    """The order was placed but its payment hand-off did not complete.

    The order is committed and the cart is kept, so the shopper can be told
    which order exists.  Not retryable automatically: resubmitting checkout
    would place a second order.
    """

    retryable = False
    error_type = "dispatch_fault"

    def __init__(self, order_id: Any, order_number: str, reason: str = "") -> None:
        self.order_id = str(order_id)
        self.order_number = order_number
        self.reason = reason
        super().__init__(self.default_message())

    def default_message(self) -> str:
        return (
            f"Order {self.order_number} was created but could not be completed. "
            f"Please contact support quoting your order number."
        )


class GatewayDispatchFault(DispatchFault):
    """The gateway payload could not be built; the order stays pending/unpaid."""

    error_type = "gateway_dispatch_fault"

    def default_message(self) -> str:
        return (
            f"Order {self.order_number} was created but the payment gateway could not "
            f"be reached. Please contact support quoting your order number."
        )


class ManualSettlementFault(DispatchFault):
    """A bank or cash on delivery order could not be confirmed."""

    error_type = "manual_settlement_fault"


class PaymentMethodMismatch(Exception):
    """The dispatch instruction does not match the method stored on the order."""


class InvalidNotification(Exception):
    """A gateway notification failed verification and was ignored."""
