"""Catalog API views.

Product detail and availability are public reads; the stock endpoint is an
admin action.  Domain exceptions are translated into HTTP responses here.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.cart.store import SessionCartStore
from modules.catalog.dtos import AvailabilityQueryDTO, StockAdjustmentDTO
from modules.catalog.exceptions import (
    InvalidStockAdjustment,
    ProductNotFound,
    VariantNotFound,
)
from modules.catalog.models import Product, ProductVariant
from modules.catalog.repositories.django_repository import ProductDjangoRepository
from modules.catalog.serializers import (
    AvailabilityQuerySerializer,
    AvailabilitySerializer,
    ProductSerializer,
    ProductVariantSerializer,
    StockAdjustmentSerializer,
)
from modules.catalog.services import CatalogService
from modules.core.responses import error_response, not_found, validation_error


class ProductViewSet(GenericViewSet):
    """Read-only product detail plus variant availability."""

    queryset = Product.objects.all()
    serializer_class = ProductSerializer
    permission_classes = [AllowAny]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CatalogService(repository=ProductDjangoRepository())

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        try:
            product = self._service.get_product(pk)
        except ProductNotFound:
            return not_found("Product not found.")
        return Response(ProductSerializer(product).data)

    @action(detail=True, methods=["get"])
    def availability(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/availability/?size=&color="""
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        dto = AvailabilityQueryDTO(**query.validated_data)

        in_cart = SessionCartStore(request.session).load().quantities()
        try:
            resolution = self._service.resolve_availability(
                pk, size=dto.size, color=dto.color, in_cart=in_cart
            )
        except ProductNotFound:
            return not_found("Product not found.")
        return Response(AvailabilitySerializer(resolution).data)


class VariantViewSet(GenericViewSet):
    """Admin stock adjustments on individual variants."""

    queryset = ProductVariant.objects.all()
    serializer_class = ProductVariantSerializer
    permission_classes = [IsAdminUser]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CatalogService(repository=ProductDjangoRepository())

    @action(detail=True, methods=["patch"], url_path="stock")
    def stock(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/variants/{pk}/stock/

        Accepts ``{"stock": N}`` (absolute) or ``{"delta": N}`` (relative).
        """
        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = StockAdjustmentDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return validation_error(exc.errors()[0]["msg"])

        try:
            variant = self._service.adjust_stock(pk, dto)
        except VariantNotFound:
            return not_found("Variant not found.")
        except InvalidStockAdjustment as exc:
            return error_response(
                "stock_conflict",
                str(exc),
                status.HTTP_409_CONFLICT,
                code="invalid_stock_adjustment",
                attr="delta",
            )
        return Response(ProductVariantSerializer(variant).data)
