"""Gateway notification handling.

PayHere posts the payment outcome to our notify URL.  A notification is
applied only when the merchant id and ``md5sig`` verify, the order exists,
was placed for the gateway, and the notified amount and currency match the
order.  Re-delivered notifications are no-ops.  Notifications never touch
stock: stock was reserved when the order was placed.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import structlog
from django.db import transaction

from modules.orders.constants import OrderStatus, PaymentMethod, PaymentStatus
from modules.payments.dtos import NotificationOutcome
from modules.payments.exceptions import InvalidNotification
from modules.payments.payhere import NO_CHANGE_CODES, STATUS_SUCCESS

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.orders.services import OrderStatusService
    from modules.payments.dtos import PayHereNotificationDTO
    from modules.payments.payhere import PayHereGateway

logger = structlog.get_logger(__name__)


class PaymentNotificationService:
    def __init__(
        self,
        gateway: PayHereGateway,
        order_repository: IOrderRepository,
        status_service: OrderStatusService,
    ) -> None:
        self._gateway = gateway
        self._order_repo = order_repository
        self._status_service = status_service

    @transaction.atomic
    def handle_payhere_notification(
        self, dto: PayHereNotificationDTO
    ) -> NotificationOutcome:
        """Verify and apply one PayHere notification.

        Raises:
            InvalidNotification: signature, merchant, order, method, amount
                or currency did not check out.  Nothing is changed.
        """
        log = logger.bind(
            order_number=dto.order_id,
            status_code=dto.status_code,
            payment_id=dto.payment_id,
        )

        if not self._gateway.verify_notification(dto.signed_fields()):
            log.warning("payment.notification_rejected", reason="signature")
            raise InvalidNotification("Signature verification failed.")

        order = self._order_repo.get_by_number_for_update(dto.order_id)
        if order is None:
            log.warning("payment.notification_rejected", reason="unknown_order")
            raise InvalidNotification(f"Unknown order {dto.order_id}.")
        if order.payment_method != PaymentMethod.PAYHERE:
            log.warning("payment.notification_rejected", reason="method")
            raise InvalidNotification("Order was not placed for gateway payment.")
        if dto.amount != Decimal(order.total) or dto.payhere_currency != order.currency:
            log.warning(
                "payment.notification_rejected",
                reason="amount_mismatch",
                notified_amount=dto.payhere_amount,
                notified_currency=dto.payhere_currency,
                order_total=str(order.total),
            )
            raise InvalidNotification("Notified amount or currency does not match.")

        log = log.bind(order_id=str(order.id))

        if dto.status_code == STATUS_SUCCESS:
            return self._settle(order, dto, log)
        if dto.status_code in NO_CHANGE_CODES:
            log.info("payment.notification_no_change")
            return self._outcome(order, applied=False, reason="pending")
        return self._fail(order, dto, log)

    def _settle(
        self, order: Order, dto: PayHereNotificationDTO, log
    ) -> NotificationOutcome:
        if order.payment_status == PaymentStatus.PAID:
            log.info("payment.notification_duplicate")
            return self._outcome(order, applied=False, reason="already_paid")
        if not order.can_transition_payment_to(PaymentStatus.PAID):
            return self._ignored(order, log)

        self._status_service.apply_payment_status(
            order,
            PaymentStatus.PAID,
            notes=f"PayHere payment {dto.payment_id} received",
            reference=dto.payment_id,
        )
        notes = ["payment_status: paid"]
        if order.status == OrderStatus.PENDING:
            order = self._status_service.update_status(
                order.id, OrderStatus.CONFIRMED, notes="Payment received"
            )
            notes.append("status: confirmed")
        log.info("payment.settled")
        return self._outcome(order, applied=True, notes=notes)

    def _fail(
        self, order: Order, dto: PayHereNotificationDTO, log
    ) -> NotificationOutcome:
        if order.payment_status == PaymentStatus.FAILED:
            log.info("payment.notification_duplicate")
            return self._outcome(order, applied=False, reason="already_failed")
        if not order.can_transition_payment_to(PaymentStatus.FAILED):
            return self._ignored(order, log)

        reported = f"PayHere reported status {dto.status_code}: {dto.status_message}"
        self._status_service.apply_payment_status(
            order,
            PaymentStatus.FAILED,
            notes=reported.strip(),
            reference=dto.payment_id,
        )
        log.info("payment.failed")
        return self._outcome(order, applied=True, notes=["payment_status: failed"])

    def _ignored(self, order: Order, log) -> NotificationOutcome:
        log.warning("payment.notification_ignored", payment_status=order.payment_status)
        return self._outcome(
            order, applied=False, reason=f"payment_{order.payment_status}"
        )

    @staticmethod
    def _outcome(
        order: Order, applied: bool, notes=None, reason=None
    ) -> NotificationOutcome:
        return NotificationOutcome(
            order_number=order.order_number,
            applied=applied,
            payment_status=order.payment_status,
            status=order.status,
            notes=notes or [],
            reason=reason,
        )
