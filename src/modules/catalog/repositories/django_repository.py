"""Django ORM implementation of the catalog repository.

Follows the Null Object pattern for reads: look-ups return ``None`` instead
of raising, and the Service Layer decides what a missing row means.

Stock writes never use read-modify-write on a Python attribute; the
decrement is a single conditional ``UPDATE ... SET stock = stock - n WHERE
stock >= n`` so the database enforces the guard even if a caller forgot to
lock the row first.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from modules.catalog.models import Product, ProductVariant
from modules.catalog.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete catalog repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a product with its variants prefetched."""
        try:
            return Product.objects.prefetch_related("variants").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        queryset = Product.objects.prefetch_related("variants")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        entity.save()
        logger.info("product.saved", product_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        logger.info("product.deleted", product_id=str(id))
        return True

    # ------------------------------------------------------------------
    # Variants
    # ------------------------------------------------------------------

    def get_variant(self, variant_id: str) -> Optional[ProductVariant]:
        try:
            return (
                ProductVariant.objects.select_related("product")
                .filter(id=variant_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_variants(self, variant_ids: Iterable[str]) -> Dict[str, ProductVariant]:
        ids = [str(v) for v in variant_ids]
        if not ids:
            return {}
        try:
            rows = ProductVariant.objects.select_related("product").filter(id__in=ids)
            return {str(v.id): v for v in rows}
        except (ValueError, ValidationError):
            return {}

    def lock_variants(self, variant_ids: Iterable[str]) -> List[ProductVariant]:
        ids = sorted({str(v) for v in variant_ids})
        try:
            return list(
                ProductVariant.objects.select_for_update()
                .prefetch_related("product")
                .filter(id__in=ids)
                .order_by("id")
            )
        except (ValueError, ValidationError):
            return []

    def decrement_stock(self, variant_id: str, quantity: int) -> bool:
        updated = ProductVariant.objects.filter(
            id=variant_id, stock__gte=quantity
        ).update(stock=F("stock") - quantity, updated_at=timezone.now())
        return updated == 1

    def set_stock(self, variant_id: str, stock: int) -> None:
        ProductVariant.objects.filter(id=variant_id).update(
            stock=stock, updated_at=timezone.now()
        )
