"""Cart API views.

The cart lives in the caller's session, so these endpoints are open to
anonymous shoppers.  Every add re-reads live stock through ``CartService``.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.cart.serializers import (
    AddCartLineSerializer,
    CartSerializer,
    SetCartLineQuantitySerializer,
)
from modules.cart.services import CartService
from modules.cart.store import SessionCartStore
from modules.catalog.exceptions import StockError
from modules.catalog.repositories.django_repository import ProductDjangoRepository
from modules.catalog.responses import stock_conflict_response


class CartViewSet(ViewSet):
    """Session cart: read, add, change, remove, clear and revalidate."""

    permission_classes = [AllowAny]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CartService(product_repository=ProductDjangoRepository())

    def _store(self, request: Request) -> SessionCartStore:
        return SessionCartStore(request.session)

    def retrieve(self, request: Request) -> Response:
        """GET /api/v1/cart/"""
        cart = self._store(request).load()
        return Response(CartSerializer(cart).data)

    def destroy(self, request: Request) -> Response:
        """DELETE /api/v1/cart/"""
        self._store(request).clear()
        return Response(status=status.HTTP_204_NO_CONTENT)

    def add_line(self, request: Request) -> Response:
        """POST /api/v1/cart/lines/"""
        serializer = AddCartLineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        store = self._store(request)
        cart = store.load()
        try:
            self._service.add_line(cart, str(data["variant_id"]), data["quantity"])
        except StockError as exc:
            return stock_conflict_response(exc)
        store.save(cart)
        return Response(CartSerializer(cart).data, status=status.HTTP_201_CREATED)

    def set_quantity(self, request: Request, variant_id: str) -> Response:
        """PATCH /api/v1/cart/lines/{variant_id}/"""
        serializer = SetCartLineQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        store = self._store(request)
        cart = store.load()
        quantity = serializer.validated_data["quantity"]
        try:
            self._service.set_quantity(cart, variant_id, quantity)
        except StockError as exc:
            return stock_conflict_response(exc)
        store.save(cart)
        return Response(CartSerializer(cart).data)

    def remove_line(self, request: Request, variant_id: str) -> Response:
        """DELETE /api/v1/cart/lines/{variant_id}/"""
        store = self._store(request)
        cart = store.load()
        self._service.remove_line(cart, variant_id)
        store.save(cart)
        return Response(CartSerializer(cart).data)

    def validate(self, request: Request) -> Response:
        """POST /api/v1/cart/validate/

        Clamps the cart to live stock and reports every adjustment made.
        """
        store = self._store(request)
        cart = store.load()
        messages = self._service.revalidate(cart)
        store.save(cart)
        return Response(
            {
                "adjusted": bool(messages),
                "messages": messages,
                "cart": CartSerializer(cart).data,
            }
        )
