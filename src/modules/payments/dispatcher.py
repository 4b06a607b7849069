"""Payment method dispatcher.

Runs after the placement transaction committed and branches on the
order's payment method:

- ``payhere``: build the signed gateway form.  The order stays
  ``pending`` / ``unpaid`` until the gateway notifies us.  A failure here
  raises ``GatewayDispatchFault``; the order is kept.
- ``bank``: confirm the order; it displays as awaiting transfer until an
  admin marks it paid.
- ``cod``: confirm the order; it displays as pay on delivery.

A storage failure while confirming a bank or cash on delivery order raises
``ManualSettlementFault``; the order is kept as ``pending`` / ``unpaid``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.conf import settings
from django.db import DatabaseError

from modules.orders.constants import OrderStatus
from modules.payments.dtos import (
    BankTransfer,
    CashOnDelivery,
    DispatchResult,
    GatewayRedirect,
    GatewayRedirectResult,
    ManualSettlementResult,
)
from modules.payments.exceptions import (
    GatewayDispatchFault,
    GatewayError,
    ManualSettlementFault,
    PaymentMethodMismatch,
)

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.services import OrderStatusService
    from modules.payments.dtos import PaymentInstruction
    from modules.payments.payhere import PayHereGateway

logger = structlog.get_logger(__name__)

COD_INSTRUCTIONS = "Please have the order total ready for the courier on delivery."


class PaymentDispatcher:
    """Dispatches a placed order to exactly one settlement branch."""

    def __init__(
        self, gateway: PayHereGateway, status_service: OrderStatusService
    ) -> None:
        self._gateway = gateway
        self._status_service = status_service

    def dispatch(self, order: Order, instruction: PaymentInstruction) -> DispatchResult:
        if instruction.method != order.payment_method:
            raise PaymentMethodMismatch(
                f"Order {order.order_number} was placed with "
                f"'{order.payment_method}', not '{instruction.method}'."
            )

        log = logger.bind(
            order_id=str(order.id),
            order_number=order.order_number,
            payment_method=order.payment_method,
        )

        if isinstance(instruction, GatewayRedirect):
            return self._dispatch_gateway(order, instruction, log)
        if isinstance(instruction, BankTransfer):
            return self._confirm_manual(
                order,
                notes="Awaiting bank transfer",
                instructions=settings.BANK_TRANSFER_INSTRUCTIONS,
                log=log,
            )
        if isinstance(instruction, CashOnDelivery):
            return self._confirm_manual(
                order,
                notes="Pay on delivery",
                instructions=COD_INSTRUCTIONS,
                log=log,
            )
        raise PaymentMethodMismatch(
            f"Unsupported payment method '{instruction.method}'."
        )

    def _dispatch_gateway(
        self, order: Order, instruction: GatewayRedirect, log
    ) -> GatewayRedirectResult:
        try:
            fields = self._gateway.build_checkout_fields(
                order,
                instruction.customer,
                return_url=instruction.return_url,
                cancel_url=instruction.cancel_url,
            )
        except GatewayError as exc:
            log.error("checkout.gateway_dispatch_failed", error=str(exc))
            raise GatewayDispatchFault(order.id, order.order_number, str(exc)) from exc

        checkout_url = self._gateway.checkout_url
        log.info("checkout.gateway_payload_built", checkout_url=checkout_url)
        return GatewayRedirectResult(checkout_url=checkout_url, fields=fields)

    def _confirm_manual(
        self, order: Order, notes: str, instructions: str, log
    ) -> ManualSettlementResult:
        try:
            confirmed = self._status_service.update_status(
                order.id, OrderStatus.CONFIRMED, notes=notes
            )
        except DatabaseError as exc:
            log.error("checkout.manual_settlement_failed", error=str(exc))
            raise ManualSettlementFault(order.id, order.order_number, str(exc)) from exc

        log.info("checkout.manual_settlement", display_status=confirmed.display_status)
        return ManualSettlementResult(
            display_status=confirmed.display_status,
            instructions=instructions,
        )
