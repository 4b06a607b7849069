"""Catalog models: Product and its purchasable ProductVariant rows.

Business rules implemented:
- A variant's ``stock`` is never negative (PositiveIntegerField + CHECK).
- SKU is unique and normalised to uppercase.
- Unit price is the variant ``price_override`` when set, else the product price.
- Purchase decrements happen only inside the order placement transaction
  (see ``ProductDjangoRepository.decrement_stock``).
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


class Product(BaseModel):
    """Catalog product (one shoe model)."""

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    image_url = models.URLField(max_length=500, blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    currency = models.CharField(max_length=3, default="LKR")
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "catalog_products"
        ordering = ["title"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="catalog_products_price_positive",
            ),
        ]

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info("product_created", product_id=str(self.id), title=self.title)

    def __str__(self) -> str:
        return self.title


class ProductVariant(BaseModel):
    """A concrete size/color combination of a product.

    ``size`` and ``color`` are empty strings when the product does not vary
    along that axis.  ``stock`` is the single point of contention between
    concurrent checkouts.
    """

    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.CASCADE,
        related_name="variants",
    )
    size = models.CharField(max_length=32, blank=True, default="")
    color = models.CharField(max_length=64, blank=True, default="")
    sku = models.CharField(max_length=64, unique=True)
    stock = models.PositiveIntegerField(default=0)
    price_override = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "catalog_product_variants"
        ordering = ["product_id", "size", "color"]
        indexes = [
            models.Index(fields=["product", "is_active"], name="variants_product_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="catalog_variants_stock_non_negative",
            ),
        ]

    @property
    def unit_price(self) -> Decimal:
        if self.price_override is not None:
            return self.price_override
        return self.product.price

    @property
    def is_purchasable(self) -> bool:
        return self.is_active and self.stock > 0

    def clean(self) -> None:
        super().clean()
        if self.sku:
            self.sku = self.sku.strip().upper()
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": "Stock cannot be negative."})

    def save(self, *args, **kwargs) -> None:
        if self.sku:
            self.sku = self.sku.strip().upper()
        self.size = (self.size or "").strip()
        self.color = (self.color or "").strip()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        axes = " / ".join(part for part in (self.size, self.color) if part)
        return f"{self.sku} ({axes})" if axes else self.sku
