"""Integration tests for the catalog API (product detail, availability, stock)."""

from __future__ import annotations

import uuid

import pytest

from modules.catalog.models import ProductVariant

pytestmark = pytest.mark.integration


@pytest.fixture()
def sneaker(make_product):
    return make_product(
        title="Court Classic",
        price="12500.00",
        variants=[
            ("CC-40-WHT", "40", "White", 3),
            ("CC-41-WHT", "41", "White", 0),
            ("CC-41-BLK", "41", "Black", 2),
        ],
    )


class TestProductDetail:
    def test_retrieve_lists_variants(self, api_client, sneaker):
        response = api_client.get(f"/api/v1/products/{sneaker.id}/")

        assert response.status_code == 200
        assert response.data["title"] == "Court Classic"
        assert {v["sku"] for v in response.data["variants"]} == {
            "CC-40-WHT",
            "CC-41-WHT",
            "CC-41-BLK",
        }

    def test_unknown_product_returns_404(self, api_client):
        response = api_client.get(f"/api/v1/products/{uuid.uuid4()}/")

        assert response.status_code == 404
        assert response.data["type"] == "not_found"

    def test_inactive_product_returns_404(self, api_client, make_product):
        product = make_product(title="Retired", is_active=False)

        response = api_client.get(f"/api/v1/products/{product.id}/")

        assert response.status_code == 404


class TestAvailability:
    def test_incomplete_selection_reports_missing_axis(self, api_client, sneaker):
        response = api_client.get(
            f"/api/v1/products/{sneaker.id}/availability/", {"size": "41"}
        )

        assert response.status_code == 200
        assert response.data["scenario"] == "size-and-color"
        assert response.data["complete"] is False
        assert response.data["missing_axes"] == ["color"]
        assert response.data["can_add"] is False

    def test_sold_out_combination_is_disabled(self, api_client, sneaker):
        response = api_client.get(
            f"/api/v1/products/{sneaker.id}/availability/", {"size": "41"}
        )

        assert "White" in response.data["disabled_colors"]
        assert "Black" not in response.data["disabled_colors"]

    def test_complete_selection_resolves_variant(self, api_client, sneaker):
        response = api_client.get(
            f"/api/v1/products/{sneaker.id}/availability/",
            {"size": "40", "color": "White"},
        )

        assert response.data["complete"] is True
        assert response.data["variant"]["sku"] == "CC-40-WHT"
        assert response.data["addable_quantity"] == 3
        assert response.data["can_add"] is True

    def test_addable_quantity_subtracts_session_cart(self, api_client, sneaker):
        variant = ProductVariant.objects.get(sku="CC-40-WHT")
        api_client.post(
            "/api/v1/cart/lines/",
            {"variant_id": str(variant.id), "quantity": 2},
            format="json",
        )

        response = api_client.get(
            f"/api/v1/products/{sneaker.id}/availability/",
            {"size": "40", "color": "White"},
        )

        assert response.data["in_cart"] == 2
        assert response.data["addable_quantity"] == 1

    def test_whole_stock_in_cart_blocks_adding(self, api_client, sneaker):
        variant = ProductVariant.objects.get(sku="CC-41-BLK")
        api_client.post(
            "/api/v1/cart/lines/",
            {"variant_id": str(variant.id), "quantity": 2},
            format="json",
        )

        response = api_client.get(
            f"/api/v1/products/{sneaker.id}/availability/",
            {"size": "41", "color": "Black"},
        )

        assert response.data["addable_quantity"] == 0
        assert response.data["can_add"] is False
        assert response.data["messages"] == [
            "You already have all 2 available in your cart."
        ]


class TestStockAdjustment:
    def test_admin_sets_absolute_stock(self, staff_client, variant):
        response = staff_client.patch(
            f"/api/v1/variants/{variant.id}/stock/",
            {"stock": 25, "reason": "Delivery received"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["stock"] == 25
        variant.refresh_from_db()
        assert variant.stock == 25

    def test_admin_applies_delta(self, staff_client, variant):
        response = staff_client.patch(
            f"/api/v1/variants/{variant.id}/stock/", {"delta": -4}, format="json"
        )

        assert response.status_code == 200
        assert response.data["stock"] == 6

    def test_delta_below_zero_returns_409(self, staff_client, variant):
        response = staff_client.patch(
            f"/api/v1/variants/{variant.id}/stock/", {"delta": -11}, format="json"
        )

        assert response.status_code == 409
        assert response.data["errors"][0]["code"] == "invalid_stock_adjustment"
        variant.refresh_from_db()
        assert variant.stock == 10

    def test_both_stock_and_delta_returns_400(self, staff_client, variant):
        response = staff_client.patch(
            f"/api/v1/variants/{variant.id}/stock/",
            {"stock": 5, "delta": 1},
            format="json",
        )

        assert response.status_code == 400
        assert response.data["type"] == "validation_error"

    def test_unknown_variant_returns_404(self, staff_client):
        response = staff_client.patch(
            f"/api/v1/variants/{uuid.uuid4()}/stock/", {"stock": 1}, format="json"
        )

        assert response.status_code == 404

    def test_shopper_cannot_adjust_stock(self, auth_client, variant):
        response = auth_client.patch(
            f"/api/v1/variants/{variant.id}/stock/", {"stock": 99}, format="json"
        )

        assert response.status_code == 403
        assert response.data["type"] == "permission_error"
        variant.refresh_from_db()
        assert variant.stock == 10
