"""Order, OrderLine and OrderStatusHistory models.

Business rules implemented:
- Order number auto-generated as a human-readable identifier.
- An order starts ``pending`` / ``unpaid``; ``payment_method`` never changes
  after placement.
- OrderLine is an immutable snapshot of what was bought (title, size, color,
  sku, unit price, quantity); catalog edits never alter placed orders.
- Every status or payment status change appends an OrderStatusHistory row.
- User FK uses PROTECT to preserve financial history.
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import (
    AWAITING_TRANSFER,
    ORDER_NUMBER_MAX_RETRIES,
    PAY_ON_DELIVERY,
    PAYMENT_TRANSITIONS,
    STRICT_TRANSITIONS,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    HistoryDimension,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ShippingMethod,
)
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    ``order_number`` (``ORD-YYYYMMDD-XXXXXX``) is what shoppers and the
    payment gateway see; the UUIDv7 ``id`` is used for API look-ups.
    Addresses are stored as JSON snapshots of what was submitted at checkout.
    """

    order_number = models.CharField(max_length=20, unique=True, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    payment_provider = models.CharField(max_length=32, blank=True, default="")
    payment_provider_reference = models.CharField(
        max_length=128, blank=True, default=""
    )
    shipping_method = models.CharField(max_length=20, choices=ShippingMethod.choices)
    shipping_cost = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    subtotal = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="LKR")
    shipping_address = models.JSONField(default=dict)
    billing_address = models.JSONField(default=dict)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["payment_status"], name="orders_payment_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total__gte=0),
                name="orders_total_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # State machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str, strict: bool = False) -> bool:
        table = STRICT_TRANSITIONS if strict else VALID_TRANSITIONS
        return new_status in table.get(self.status, set())

    def can_transition_payment_to(self, new_payment_status: str) -> bool:
        return new_payment_status in PAYMENT_TRANSITIONS.get(self.payment_status, set())

    @property
    def display_status(self) -> str:
        """Shopper-facing label; distinguishes the manual settlement paths."""
        if (
            self.status == OrderStatus.CONFIRMED
            and self.payment_status == PaymentStatus.UNPAID
        ):
            if self.payment_method == PaymentMethod.BANK:
                return AWAITING_TRANSFER
            if self.payment_method == PaymentMethod.COD:
                return PAY_ON_DELIVERY
        return self.status

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        """Generate a human-readable order number: ``ORD-YYYYMMDD-XXXXXX``."""
        now = timezone.now()
        suffix = secrets.token_hex(3).upper()
        return f"ORD-{now:%Y%m%d}-{suffix}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            for _ in range(ORDER_NUMBER_MAX_RETRIES):
                candidate = self.generate_order_number()
                if not Order.objects.filter(order_number=candidate).exists():
                    self.order_number = candidate
                    break
            else:
                raise RuntimeError(
                    f"Failed to generate unique order_number after "
                    f"{ORDER_NUMBER_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderLine(BaseModel):
    """Immutable purchase snapshot for one variant of an order.

    ``variant`` keeps a reference for reporting; every displayed attribute
    is copied at placement time.  Once inserted the row cannot be saved
    again.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="lines",
    )
    variant = models.ForeignKey(
        "catalog.ProductVariant",
        on_delete=models.PROTECT,
        related_name="order_lines",
    )
    product_title = models.CharField(max_length=255)
    size = models.CharField(max_length=32, blank=True, default="")
    color = models.CharField(max_length=64, blank=True, default="")
    sku = models.CharField(max_length=64)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    line_total = models.DecimalField(max_digits=12, decimal_places=2, editable=False)

    class Meta:
        db_table = "order_lines"
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_lines_quantity_positive",
            ),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise ValidationError("Order lines are immutable once placed.")
        self.line_total = self.unit_price * self.quantity
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.sku} x{self.quantity} ({self.line_total})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for status and payment status changes.

    ``dimension`` tells which of the two independent fields changed.
    ``user`` is ``None`` when the change came from the system (placement or
    a gateway notification).
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    dimension = models.CharField(
        max_length=10,
        choices=HistoryDimension.choices,
        default=HistoryDimension.STATUS,
    )
    old_status = models.CharField(max_length=20, null=True, blank=True)  # noqa: DJ01
    new_status = models.CharField(max_length=20)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["order", "-created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order} [{self.dimension}]: {self.old_status} -> {self.new_status}"
