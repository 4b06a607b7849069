"""Order domain constants.

Status choices, the two transition tables of the order state machine and
the display labels that distinguish the manual settlement paths.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"
    REFUNDED = "refunded", "Refunded"


class PaymentStatus(models.TextChoices):
    UNPAID = "unpaid", "Unpaid"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class PaymentMethod(models.TextChoices):
    PAYHERE = "payhere", "PayHere"
    BANK = "bank", "Bank transfer"
    COD = "cod", "Cash on delivery"


class ShippingMethod(models.TextChoices):
    STANDARD = "standard", "Standard"
    EXPRESS = "express", "Express"


class HistoryDimension(models.TextChoices):
    STATUS = "status", "Order status"
    PAYMENT = "payment", "Payment status"


FULFILMENT_PIPELINE: list[str] = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]

PRE_DELIVERY_STATES: set[str] = set(FULFILMENT_PIPELINE[:-1])


def _build_transitions(strict: bool) -> dict[str, set[str]]:
    transitions: dict[str, set[str]] = {}
    for index, current in enumerate(FULFILMENT_PIPELINE):
        following = FULFILMENT_PIPELINE[index + 1 :]
        allowed = set(following[:1] if strict else following)
        if not strict:
            allowed.update(FULFILMENT_PIPELINE[:index])
        if current in PRE_DELIVERY_STATES:
            allowed.add(OrderStatus.CANCELLED)
        transitions[current] = allowed
    transitions[OrderStatus.DELIVERED].add(OrderStatus.REFUNDED)
    transitions[OrderStatus.CANCELLED] = {OrderStatus.REFUNDED}
    transitions[OrderStatus.REFUNDED] = set()
    return transitions


# Admins may jump forward or back along the pipeline (e.g. pending -> shipped).
VALID_TRANSITIONS: dict[str, set[str]] = _build_transitions(strict=False)

# Used when ORDER_STRICT_TRANSITIONS is enabled: adjacent forward steps only.
STRICT_TRANSITIONS: dict[str, set[str]] = _build_transitions(strict=True)

PAYMENT_TRANSITIONS: dict[str, set[str]] = {
    PaymentStatus.UNPAID: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: set(),
    PaymentStatus.REFUNDED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.REFUNDED}

# Display labels for confirmed-but-unpaid manual settlement orders.
AWAITING_TRANSFER = "awaiting_transfer"
PAY_ON_DELIVERY = "pay_on_delivery"

ORDER_NUMBER_MAX_RETRIES = 5
