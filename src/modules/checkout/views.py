"""Checkout API view.

Translates checkout failures into the documented contract:

- 201 ``{order_id, order_number, payment: ...}`` on success.
- 409 ``{failing_variant_id, available_quantity}`` for stock failures.
- 409 with adjustment messages when the cart had to be clamped first.
- 503 ``retryable: true`` for storage faults (nothing was committed).
- 502 ``retryable: false`` with the order reference when the order exists
  but the gateway hand-off or the manual confirmation failed.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.cart.serializers import CartSerializer
from modules.cart.services import CartService
from modules.cart.store import SessionCartStore
from modules.catalog.exceptions import StockError
from modules.catalog.repositories.django_repository import ProductDjangoRepository
from modules.catalog.responses import stock_conflict_response
from modules.checkout.dtos import CheckoutRequestDTO
from modules.checkout.serializers import CheckoutSerializer
from modules.checkout.services import CheckoutService
from modules.core.responses import error_response, validation_error
from modules.orders.exceptions import (
    CartAdjusted,
    EmptyCart,
    TransactionFault,
    Unauthenticated,
)
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderPlacementService, OrderStatusService
from modules.payments.dispatcher import PaymentDispatcher
from modules.payments.exceptions import DispatchFault
from modules.payments.payhere import PayHereGateway


class CheckoutView(APIView):
    """POST /api/v1/checkout/"""

    permission_classes = [IsAuthenticated]
    throttle_scope = "checkout"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        product_repository = ProductDjangoRepository()
        order_repository = OrderDjangoRepository()
        self._cart_service = CartService(product_repository=product_repository)
        self._service = CheckoutService(
            cart_service=self._cart_service,
            placement_service=OrderPlacementService(
                order_repository=order_repository,
                product_repository=product_repository,
            ),
            dispatcher=PaymentDispatcher(
                gateway=PayHereGateway(),
                status_service=OrderStatusService(order_repository=order_repository),
            ),
            order_repository=order_repository,
        )

    def post(self, request: Request) -> Response:
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = CheckoutRequestDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            error = exc.errors()[0]
            attr = ".".join(str(part) for part in error.get("loc", ())) or None
            return validation_error(error["msg"], attr=attr)

        store = SessionCartStore(request.session)
        cart = store.load()

        try:
            result = self._service.checkout(request.user, cart, dto)
        except EmptyCart as exc:
            return validation_error(str(exc), attr="cart")
        except CartAdjusted as exc:
            store.save(cart)
            return error_response(
                "cart_adjusted",
                str(exc),
                status.HTTP_409_CONFLICT,
                messages=exc.messages,
                cart=CartSerializer(cart).data,
            )
        except StockError as exc:
            return stock_conflict_response(exc)
        except Unauthenticated as exc:
            return error_response(
                "authentication_error",
                str(exc),
                status.HTTP_401_UNAUTHORIZED,
                code="not_authenticated",
            )
        except TransactionFault as exc:
            return error_response(
                "transaction_fault",
                str(exc),
                status.HTTP_503_SERVICE_UNAVAILABLE,
                retryable=True,
            )
        except DispatchFault as exc:
            return error_response(
                exc.error_type,
                str(exc),
                status.HTTP_502_BAD_GATEWAY,
                retryable=False,
                order_id=exc.order_id,
                order_number=exc.order_number,
            )
        except PydanticValidationError as exc:
            return validation_error(exc.errors()[0]["msg"])

        store.save(cart)
        return Response(result.model_dump(mode="json"), status=status.HTTP_201_CREATED)
