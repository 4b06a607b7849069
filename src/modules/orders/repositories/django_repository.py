"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Write
operations run inside ``transaction.atomic()`` so the Order aggregate
(order + line snapshots) is persisted as a unit.

Domain events collected on the aggregate are handed to the in-process bus
from ``transaction.on_commit``: handlers never observe an order that was
rolled back.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.orders.constants import OrderStatus, PaymentMethod, PaymentStatus
from modules.orders.models import Order, OrderLine, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        data = dict(data)
        lines = data.pop("lines", [])
        order = Order(**data)
        order.save()

        subtotal = Decimal("0.00")
        for line_data in lines:
            line = OrderLine(order=order, **line_data)
            line.save()
            subtotal += line.line_total

        order.subtotal = subtotal
        order.save(update_fields=["subtotal"])

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            order_number=order.order_number,
            line_count=len(lines),
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def queryset(self) -> "models.QuerySet[Order]":
        return Order.objects.select_related("user").prefetch_related(
            "lines", "status_history"
        )

    def get_by_id(self, id: str) -> Optional[Order]:
        """Returns ``None`` for non-existent or malformed IDs."""
        try:
            return self.queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_number(self, order_number: str) -> Optional[Order]:
        return self.queryset().filter(order_number=order_number).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        queryset = self.queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def get_for_update(self, id: str) -> Optional[Order]:
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_number_for_update(self, order_number: str) -> Optional[Order]:
        return Order.objects.select_for_update().filter(order_number=order_number).first()

    def list_stale_gateway_orders(self, cutoff: datetime) -> List[Order]:
        return list(
            Order.objects.filter(
                payment_method=PaymentMethod.PAYHERE,
                status=OrderStatus.PENDING,
                payment_status=PaymentStatus.UNPAID,
                created_at__lt=cutoff,
            ).order_by("created_at")
        )

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order and publish its pending domain events on commit."""
        entity.save()

        events = entity.domain_events
        for event in events:
            transaction.on_commit(lambda e=event: event_bus.publish(e))
        entity.clear_domain_events()

        logger.info("order.saved", order_id=str(entity.id), event_count=len(events))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        order = self.get_by_id(id)
        if not order:
            return False
        order.delete()
        logger.info("order.deleted", order_id=str(id))
        return True

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_history(
        self,
        order_id: Any,
        new_status: str,
        old_status: Optional[str] = None,
        dimension: str = "status",
        notes: str = "",
        user: Any = None,
    ) -> OrderStatusHistory:
        history = OrderStatusHistory(
            order_id=order_id,
            dimension=dimension,
            old_status=old_status,
            new_status=new_status,
            notes=notes,
            user=user if getattr(user, "is_authenticated", False) else None,
        )
        history.save()

        logger.info(
            "order.history_added",
            order_id=str(order_id),
            dimension=dimension,
            old_status=old_status,
            new_status=new_status,
        )
        return history
