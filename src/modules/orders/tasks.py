"""Periodic order maintenance tasks."""

from datetime import timedelta

import structlog
from celery import shared_task
from django.conf import settings
from django.utils import timezone

from modules.orders.repositories.django_repository import OrderDjangoRepository

logger = structlog.get_logger(__name__)


@shared_task(name="orders.flag_stale_gateway_orders")
def flag_stale_gateway_orders(timeout_minutes=None):
    """List gateway orders still pending/unpaid past the timeout.

    Nothing is cancelled and no stock moves; the orders are logged for
    manual follow-up.
    """
    minutes = timeout_minutes or settings.GATEWAY_PENDING_TIMEOUT_MINUTES
    cutoff = timezone.now() - timedelta(minutes=minutes)
    stale = OrderDjangoRepository().list_stale_gateway_orders(cutoff)

    for order in stale:
        logger.warning(
            "orders.stale_gateway_order",
            order_id=str(order.id),
            order_number=order.order_number,
            created_at=order.created_at.isoformat(),
        )
    logger.info("orders.stale_gateway_sweep_completed", count=len(stale))
    return {"count": len(stale), "order_numbers": [o.order_number for o in stale]}
