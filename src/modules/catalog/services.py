"""Catalog service layer.

Read paths used by the storefront (product detail, availability) and the
one admin write path on stock.  Admin stock changes go through the same
row lock and conditional decrement the order placement transaction uses, so
an adjustment can never race a checkout into negative stock.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Optional

import structlog
from django.db import transaction

from modules.catalog.availability import Resolution, Selection, resolve
from modules.catalog.exceptions import (
    InvalidStockAdjustment,
    ProductNotFound,
    VariantNotFound,
)

if TYPE_CHECKING:
    from modules.catalog.dtos import StockAdjustmentDTO
    from modules.catalog.models import Product, ProductVariant
    from modules.catalog.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class CatalogService:
    """Application service for catalog reads and stock adjustments."""

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product(self, id: str, include_inactive: bool = False) -> Product:
        """Raises ``ProductNotFound`` for unknown (or, by default, inactive) products."""
        product = self._repo.get_by_id(id)
        if not product or (not product.is_active and not include_inactive):
            raise ProductNotFound(f"Product {id} not found.")
        return product

    def resolve_availability(
        self,
        product_id: str,
        size: Optional[str] = None,
        color: Optional[str] = None,
        in_cart: Optional[Mapping[str, int]] = None,
    ) -> Resolution:
        product = self.get_product(product_id)
        resolution = resolve(
            product.variants.all(), Selection.of(size, color), in_cart or {}
        )
        logger.debug(
            "catalog.availability_resolved",
            product_id=str(product_id),
            scenario=resolution.scenario.value,
            complete=resolution.complete,
        )
        return resolution

    def get_live_variant(self, variant_id: str) -> ProductVariant:
        """Re-read a variant from storage, bypassing anything cached in memory."""
        variant = self._repo.get_variant(variant_id)
        if not variant:
            raise VariantNotFound(variant_id)
        return variant

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def adjust_stock(self, variant_id: str, dto: StockAdjustmentDTO) -> ProductVariant:
        """Set or shift a variant's stock under a row lock.

        Raises:
            VariantNotFound: the variant does not exist.
            InvalidStockAdjustment: the result would be negative.
        """
        locked = self._repo.lock_variants([variant_id])
        if not locked:
            raise VariantNotFound(variant_id)
        variant = locked[0]
        log = logger.bind(variant_id=str(variant.id), previous_stock=variant.stock)

        if dto.stock is not None:
            self._repo.set_stock(variant.id, dto.stock)
        elif dto.delta < 0:
            if not self._repo.decrement_stock(variant.id, -dto.delta):
                log.warning("catalog.stock_adjustment_rejected", delta=dto.delta)
                raise InvalidStockAdjustment(
                    f"Cannot remove {-dto.delta} units; only {variant.stock} in stock."
                )
        else:
            self._repo.set_stock(variant.id, variant.stock + dto.delta)

        variant.refresh_from_db(fields=["stock", "updated_at"])
        log.info(
            "catalog.stock_adjusted",
            new_stock=variant.stock,
            reason=dto.reason,
        )
        return variant
