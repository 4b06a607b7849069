"""Order service layer (Use Cases).

``OrderPlacementService`` is the only code path that decrements variant
stock.  It runs as a single transaction:

1. Lock every requested variant row (``SELECT FOR UPDATE``) in ascending id
   order, so concurrent checkouts acquire locks in the same order.
2. Re-read ``stock`` and ``is_active`` under the lock; abort the whole
   transaction on the first inactive or short variant.
3. Decrement with a conditional ``UPDATE ... WHERE stock >= qty``.
4. Insert the order (``pending`` / ``unpaid``) and one line snapshot per
   variant.

Any storage failure surfaces as ``TransactionFault`` with nothing committed.

``OrderStatusService`` drives the two independent state machines (status
and payment status), recording history for every change.  No transition
moves stock, including cancellation and refund.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.conf import settings
from django.db import DatabaseError, transaction

from modules.catalog.exceptions import (
    InsufficientStock,
    VariantInactive,
    VariantNotFound,
)
from modules.orders.constants import (
    HistoryDimension,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from modules.orders.dtos import PlacementResultDTO
from modules.orders.events import OrderPlaced, OrderStatusChanged, PaymentStatusChanged
from modules.orders.exceptions import (
    InvalidOrderStatus,
    InvalidPaymentStatus,
    OrderNotFound,
    TransactionFault,
    Unauthenticated,
)

if TYPE_CHECKING:
    from modules.catalog.repositories.interfaces import IProductRepository
    from modules.orders.dtos import PlaceOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderPlacementService:
    """Converts a validated cart into a durable order with stock reserved."""

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._order_repo = order_repository
        self._product_repo = product_repository

    def place_order(self, user: Any, dto: PlaceOrderDTO) -> PlacementResultDTO:
        """Place an order atomically.

        Raises:
            Unauthenticated: no authenticated user.
            VariantNotFound / VariantInactive / InsufficientStock: carry the
                failing variant id and its available quantity.
            TransactionFault: storage failure; nothing was committed.
        """
        if user is None or not getattr(user, "is_authenticated", False):
            raise Unauthenticated("Sign in to place an order.")

        log = logger.bind(
            user_id=str(user.pk),
            payment_method=dto.payment_method,
            line_count=len(dto.lines),
        )
        log.info("order.placement_started")

        try:
            with transaction.atomic():
                order = self._place(user, dto, log)
        except DatabaseError as exc:
            log.error("order.placement_storage_fault", error=str(exc))
            raise TransactionFault(
                "We could not save your order. Nothing was charged; please try again."
            ) from exc

        log.info(
            "order.placed",
            order_id=str(order.id),
            order_number=order.order_number,
            total=str(order.total),
        )
        return PlacementResultDTO(order_id=order.id, order_number=order.order_number)

    def _place(self, user: Any, dto: PlaceOrderDTO, log: Any) -> Order:
        requested = {str(line.variant_id): line for line in dto.lines}
        locked = {str(v.id): v for v in self._product_repo.lock_variants(requested)}

        line_rows: List[Dict[str, Any]] = []
        for variant_id in sorted(requested):
            line = requested[variant_id]
            variant = locked.get(variant_id)
            if variant is None:
                log.warning("order.variant_missing", variant_id=variant_id)
                raise VariantNotFound(variant_id)
            if not variant.is_active or not variant.product.is_active:
                log.warning("order.variant_inactive", variant_id=variant_id)
                raise VariantInactive(variant_id)
            if variant.stock < line.quantity:
                log.warning(
                    "order.insufficient_stock",
                    variant_id=variant_id,
                    requested=line.quantity,
                    available=variant.stock,
                )
                raise InsufficientStock(variant_id, variant.stock, line.quantity)

            if not self._product_repo.decrement_stock(variant.id, line.quantity):
                variant.refresh_from_db(fields=["stock"])
                raise InsufficientStock(variant_id, variant.stock, line.quantity)

            log.info(
                "order.stock_reserved",
                variant_id=variant_id,
                quantity=line.quantity,
                remaining=variant.stock - line.quantity,
            )
            line_rows.append(
                {
                    "variant": variant,
                    "product_title": variant.product.title,
                    "size": variant.size,
                    "color": variant.color,
                    "sku": variant.sku,
                    "unit_price": line.unit_price,
                    "quantity": line.quantity,
                }
            )

        billing = dto.effective_billing_address
        order = self._order_repo.create(
            {
                "user": user,
                "status": OrderStatus.PENDING,
                "payment_status": PaymentStatus.UNPAID,
                "payment_method": dto.payment_method,
                "payment_provider": (
                    PaymentMethod.PAYHERE
                    if dto.payment_method == PaymentMethod.PAYHERE
                    else ""
                ),
                "shipping_method": dto.shipping_method,
                "shipping_cost": dto.shipping_cost,
                "total": dto.total,
                "currency": dto.currency,
                "shipping_address": dto.shipping_address.model_dump(),
                "billing_address": billing.model_dump(),
                "lines": line_rows,
            }
        )
        self._order_repo.add_history(
            order_id=order.id,
            new_status=OrderStatus.PENDING,
            notes="Order placed",
            user=user,
        )
        order.add_domain_event(
            OrderPlaced(
                aggregate_id=order.id,
                order_number=order.order_number,
                payment_method=order.payment_method,
                total=str(order.total),
            )
        )
        return self._order_repo.save(order)


class OrderStatusService:
    """Application service for order status and payment status changes."""

    def __init__(self, order_repository: IOrderRepository) -> None:
        self._order_repo = order_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def update_status(
        self,
        order_id: Any,
        new_status: str,
        user: Any = None,
        notes: str = "",
    ) -> Order:
        """Move an order along the fulfilment state machine.

        Admins may jump forward or back along the pipeline unless
        ``ORDER_STRICT_TRANSITIONS`` is enabled, which allows only the next
        step.  Nothing leaves ``refunded`` and ``cancelled`` only refunds.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: transition is not allowed.
        """
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(
            order_id=str(order.id),
            current_status=order.status,
            new_status=new_status,
        )
        strict = getattr(settings, "ORDER_STRICT_TRANSITIONS", False)
        if not order.can_transition_to(new_status, strict=strict):
            log.warning("order.invalid_transition", strict=strict)
            raise InvalidOrderStatus(
                f"Cannot transition from {order.status} to {new_status}."
            )

        old_status = order.status
        order.status = new_status
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id, old_status=old_status, new_status=new_status
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            new_status=new_status,
            old_status=old_status,
            dimension=HistoryDimension.STATUS,
            notes=notes,
            user=user,
        )
        log.info("order.status_updated")
        return self._order_repo.get_by_id(str(order.id))

    @transaction.atomic
    def update_payment_status(
        self,
        order_id: Any,
        new_payment_status: str,
        user: Any = None,
        notes: str = "",
        reference: Optional[str] = None,
    ) -> Order:
        """Move an order along the payment state machine.

        Raises:
            OrderNotFound: order does not exist.
            InvalidPaymentStatus: transition is not allowed.
        """
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return self.apply_payment_status(order, new_payment_status, user, notes, reference)

    def apply_payment_status(
        self,
        order: Order,
        new_payment_status: str,
        user: Any = None,
        notes: str = "",
        reference: Optional[str] = None,
    ) -> Order:
        """Apply a payment transition to an order already locked by the caller."""
        log = logger.bind(
            order_id=str(order.id),
            current_payment_status=order.payment_status,
            new_payment_status=new_payment_status,
        )
        if not order.can_transition_payment_to(new_payment_status):
            log.warning("order.invalid_payment_transition")
            raise InvalidPaymentStatus(
                f"Cannot change payment status from {order.payment_status} "
                f"to {new_payment_status}."
            )

        old_payment_status = order.payment_status
        order.payment_status = new_payment_status
        if reference:
            order.payment_provider_reference = reference
        order.add_domain_event(
            PaymentStatusChanged(
                aggregate_id=order.id,
                old_status=old_payment_status,
                new_status=new_payment_status,
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            new_status=new_payment_status,
            old_status=old_payment_status,
            dimension=HistoryDimension.PAYMENT,
            notes=notes,
            user=user,
        )
        log.info("order.payment_status_updated")
        return order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str, user: Any = None) -> Order:
        """Retrieve an order; non-staff users only see their own.

        Raises:
            OrderNotFound: missing, or owned by someone else.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order or not _can_view(user, order):
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def visible_orders(self, user: Any):
        queryset = self._order_repo.queryset()
        if user is not None and getattr(user, "is_staff", False):
            return queryset
        return queryset.filter(user_id=getattr(user, "pk", None))


def _can_view(user: Any, order: Order) -> bool:
    if user is None:
        return True
    if getattr(user, "is_staff", False):
        return True
    return order.user_id == getattr(user, "pk", None)
