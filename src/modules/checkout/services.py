"""Checkout orchestration.

Cart -> revalidation -> order placement transaction -> payment dispatch ->
cart cleared.  The cart is cleared only once the dispatcher has finished:
for the gateway that means the signed payload exists, for bank and cash on
delivery that the order is confirmed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from django.conf import settings

from modules.checkout.dtos import CheckoutResultDTO
from modules.orders.constants import PaymentMethod
from modules.orders.dtos import OrderLineDTO, PlaceOrderDTO
from modules.orders.exceptions import CartAdjusted, EmptyCart, OrderNotFound
from modules.payments.dtos import (
    BankTransfer,
    CashOnDelivery,
    CustomerContact,
    GatewayRedirect,
)

if TYPE_CHECKING:
    from modules.cart.cart import Cart
    from modules.cart.services import CartService
    from modules.checkout.dtos import CheckoutRequestDTO
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.orders.services import OrderPlacementService
    from modules.payments.dispatcher import PaymentDispatcher
    from modules.payments.dtos import PaymentInstruction

logger = structlog.get_logger(__name__)


class CheckoutService:
    def __init__(
        self,
        cart_service: CartService,
        placement_service: OrderPlacementService,
        dispatcher: PaymentDispatcher,
        order_repository: IOrderRepository,
    ) -> None:
        self._cart_service = cart_service
        self._placement = placement_service
        self._dispatcher = dispatcher
        self._order_repo = order_repository

    def checkout(
        self, user: Any, cart: Cart, dto: CheckoutRequestDTO
    ) -> CheckoutResultDTO:
        """Place and dispatch an order for the contents of *cart*.

        Raises:
            EmptyCart: nothing to buy.
            CartAdjusted: the cart was clamped to live stock (or the total
                moved); the shopper must review it.
            Unauthenticated, InsufficientStock, VariantInactive,
            VariantNotFound, TransactionFault: from placement; cart intact.
            DispatchFault: order placed, gateway hand-off or manual
                confirmation failed; cart intact.
        """
        if cart.is_empty:
            raise EmptyCart("Your cart is empty.")

        messages = self._cart_service.revalidate(cart)
        if messages:
            raise CartAdjusted(messages)

        shipping_cost = settings.SHIPPING_RATES[dto.shipping_method]
        total = cart.subtotal + shipping_cost
        if dto.expected_total is not None and dto.expected_total != total:
            raise CartAdjusted(
                [f"Your order total is now {total} {settings.STORE_CURRENCY}."]
            )

        place_dto = PlaceOrderDTO(
            lines=[
                OrderLineDTO(
                    variant_id=line.variant_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in cart.ordered_lines()
            ],
            payment_method=dto.payment_method,
            shipping_method=dto.shipping_method,
            shipping_cost=shipping_cost,
            total=total,
            currency=settings.STORE_CURRENCY,
            shipping_address=dto.shipping_address,
            billing_address=dto.billing_address,
        )
        placed = self._placement.place_order(user, place_dto)

        order = self._order_repo.get_by_id(str(placed.order_id))
        if order is None:
            raise OrderNotFound(f"Order {placed.order_id} not found.")

        payment = self._dispatcher.dispatch(order, self._instruction_for(place_dto))
        self._cart_service.clear(cart)

        logger.info(
            "checkout.completed",
            order_id=str(order.id),
            order_number=order.order_number,
            payment_method=order.payment_method,
            result=payment.kind,
        )
        return CheckoutResultDTO(
            order_id=order.id,
            order_number=order.order_number,
            total=order.total,
            currency=order.currency,
            payment=payment,
        )

    @staticmethod
    def _instruction_for(dto: PlaceOrderDTO) -> PaymentInstruction:
        if dto.payment_method == PaymentMethod.PAYHERE:
            return GatewayRedirect(
                customer=CustomerContact.from_address(dto.effective_billing_address),
                return_url=settings.PAYHERE_RETURN_URL,
                cancel_url=settings.PAYHERE_CANCEL_URL,
            )
        if dto.payment_method == PaymentMethod.BANK:
            return BankTransfer()
        return CashOnDelivery()
