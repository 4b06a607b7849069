from io import StringIO

import pytest
from django.core.management import call_command

from modules.catalog.availability import VariantScenario, classify_scenario
from modules.catalog.models import Product, ProductVariant

pytestmark = pytest.mark.unit


class TestSeedStore:
    def test_creates_every_variant_scenario(self):
        out = StringIO()
        call_command("seed_store", stdout=out)

        scenarios = {
            classify_scenario(list(product.variants.all()))
            for product in Product.objects.prefetch_related("variants")
        }
        assert scenarios == set(VariantScenario)
        assert "Seeded 10 variants." in out.getvalue()

    def test_is_idempotent_by_sku(self):
        call_command("seed_store", stdout=StringIO())
        call_command("seed_store", stdout=StringIO())

        assert ProductVariant.objects.count() == 10
        assert Product.objects.count() == 4
