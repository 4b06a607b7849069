"""Seed the catalog with demo footwear covering every variant scenario."""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.management.base import BaseCommand
from django.db import transaction

from modules.catalog.models import Product, ProductVariant

logger = structlog.get_logger(__name__)

DEMO_PRODUCTS = [
    {
        "title": "Classic Leather Sneaker",
        "price": Decimal("8500.00"),
        "variants": [
            ("CLS-38-WHT", "38", "White", 5),
            ("CLS-39-WHT", "39", "White", 3),
            ("CLS-39-BLK", "39", "Black", 0),
            ("CLS-40-BLK", "40", "Black", 4),
        ],
    },
    {
        "title": "Canvas Slip-On",
        "price": Decimal("3200.00"),
        "variants": [
            ("CSO-37", "37", "", 6),
            ("CSO-38", "38", "", 2),
            ("CSO-39", "39", "", 0),
        ],
    },
    {
        "title": "Beach Flip-Flop",
        "price": Decimal("1500.00"),
        "variants": [
            ("BFF-RED", "", "Red", 10),
            ("BFF-BLU", "", "Blue", 8),
        ],
    },
    {
        "title": "Shoe Care Kit",
        "price": Decimal("1000.00"),
        "variants": [("SCK-STD", "", "", 25)],
    },
]


class Command(BaseCommand):
    help = "Create demo products and variants (idempotent by SKU)."

    @transaction.atomic
    def handle(self, *args, **options):
        created = 0
        for item in DEMO_PRODUCTS:
            product, _ = Product.objects.get_or_create(
                title=item["title"],
                defaults={"price": item["price"]},
            )
            for sku, size, color, stock in item["variants"]:
                _, was_created = ProductVariant.objects.get_or_create(
                    sku=sku,
                    defaults={
                        "product": product,
                        "size": size,
                        "color": color,
                        "stock": stock,
                    },
                )
                created += int(was_created)

        logger.info("seed_store.completed", variants_created=created)
        self.stdout.write(self.style.SUCCESS(f"Seeded {created} variants."))
