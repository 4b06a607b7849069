"""Order API views.

Exposes ``OrderStatusService`` via HTTP using a DRF ViewSet.  Shoppers see
their own orders; staff see every order and drive the two state machines.
Domain exceptions are translated into HTTP responses here.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.core.responses import error_response, not_found, validation_error
from modules.orders.dtos import PaymentStatusUpdateDTO, StatusUpdateDTO
from modules.orders.exceptions import (
    InvalidOrderStatus,
    InvalidPaymentStatus,
    OrderNotFound,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    OrderListSerializer,
    OrderSerializer,
    PaymentStatusUpdateSerializer,
    StatusUpdateSerializer,
)
from modules.orders.services import OrderStatusService


class OrderViewSet(GenericViewSet):
    """ViewSet for Order reads and admin transitions.

    Orders are created only through ``POST /api/v1/checkout/``.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    search_fields = ["order_number"]
    ordering_fields = ["created_at", "total", "status", "payment_status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderStatusService(order_repository=OrderDjangoRepository())

    def get_permissions(self):
        if self.action in {"partial_update", "payment_status"}:
            return [IsAdminUser()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttle scope per action."""
        listing = self.action in {"list", "retrieve"}
        self.throttle_scope = "order_listing" if listing else None
        return super().get_throttles()

    def get_queryset(self):
        return self._service.visible_orders(getattr(self.request, "user", None))

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/"""
        queryset = self.filter_queryset(self.get_queryset())

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = OrderListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(pk, user=request.user)
        except OrderNotFound:
            return not_found("Order not found.")
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Admin transitions
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/ (admin): change ``status``."""
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = StatusUpdateDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return validation_error(exc.errors()[0]["msg"], attr="status")

        try:
            order = self._service.update_status(
                pk, dto.status, user=request.user, notes=dto.notes
            )
        except OrderNotFound:
            return not_found("Order not found.")
        except InvalidOrderStatus as exc:
            return error_response(
                "invalid_transition",
                str(exc),
                status.HTTP_400_BAD_REQUEST,
                attr="status",
            )
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="payment-status")
    def payment_status(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/payment-status/ (admin)"""
        serializer = PaymentStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = PaymentStatusUpdateDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return validation_error(exc.errors()[0]["msg"], attr="payment_status")

        try:
            self._service.update_payment_status(
                pk,
                dto.payment_status,
                user=request.user,
                notes=dto.notes,
                reference=dto.reference or None,
            )
        except OrderNotFound:
            return not_found("Order not found.")
        except InvalidPaymentStatus as exc:
            return error_response(
                "invalid_transition",
                str(exc),
                status.HTTP_400_BAD_REQUEST,
                attr="payment_status",
            )
        order = self._service.get_order(pk)
        return Response(OrderSerializer(order).data)
