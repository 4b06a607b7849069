"""Integration tests for ``POST /api/v1/checkout/``.

The cart is built through the cart API so checkout reads it from the same
session, exactly as a browser would.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from django.db import DatabaseError

from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.models import Order

pytestmark = pytest.mark.integration

CHECKOUT_URL = "/api/v1/checkout/"


def _add(client, variant, quantity=1):
    response = client.post(
        "/api/v1/cart/lines/",
        {"variant_id": str(variant.id), "quantity": quantity},
        format="json",
    )
    assert response.status_code == 201
    return response


def _checkout(client, address, payment_method="bank", shipping_method="standard", **extra):
    payload = {
        "payment_method": payment_method,
        "shipping_method": shipping_method,
        "shipping_address": address,
        **extra,
    }
    return client.post(CHECKOUT_URL, payload, format="json")


class TestManualSettlement:
    def test_bank_transfer_end_to_end(self, auth_client, user, variant, address):
        _add(auth_client, variant)

        response = _checkout(auth_client, address, payment_method="bank")

        assert response.status_code == 201
        body = response.json()
        assert body["total"] == "1399.00"
        assert body["currency"] == "LKR"
        assert body["order_number"].startswith("ORD-")
        assert body["payment"]["kind"] == "manual_settlement"
        assert body["payment"]["display_status"] == "awaiting_transfer"

        order = Order.objects.get(id=body["order_id"])
        assert order.user == user
        assert order.status == OrderStatus.CONFIRMED
        assert order.payment_status == PaymentStatus.UNPAID
        assert order.lines.count() == 1

        variant.refresh_from_db()
        assert variant.stock == 9
        assert auth_client.get("/api/v1/cart/").data["item_count"] == 0

    def test_cash_on_delivery(self, auth_client, variant, address):
        _add(auth_client, variant, 2)

        response = _checkout(
            auth_client, address, payment_method="cod", shipping_method="express"
        )

        assert response.status_code == 201
        body = response.json()
        assert body["total"] == "2699.00"
        assert body["payment"]["display_status"] == "pay_on_delivery"

    def test_billing_defaults_to_shipping_address(self, auth_client, variant, address):
        _add(auth_client, variant)

        body = _checkout(auth_client, address).json()

        order = Order.objects.get(id=body["order_id"])
        assert order.billing_address == order.shipping_address

    def test_matching_expected_total_is_accepted(self, auth_client, variant, address):
        _add(auth_client, variant)

        response = _checkout(auth_client, address, expected_total="1399.00")

        assert response.status_code == 201

    def test_confirmation_fault_returns_502_and_keeps_order(
        self, auth_client, variant, address
    ):
        _add(auth_client, variant)

        with patch(
            "modules.orders.services.OrderStatusService.update_status",
            side_effect=DatabaseError("database is locked"),
        ):
            response = _checkout(auth_client, address, payment_method="cod")

        assert response.status_code == 502
        body = response.json()
        assert body["type"] == "manual_settlement_fault"
        assert body["retryable"] is False
        order = Order.objects.get(order_number=body["order_number"])
        assert str(order.id) == body["order_id"]
        assert (order.status, order.payment_status) == ("pending", "unpaid")
        assert auth_client.get("/api/v1/cart/").data["item_count"] == 1


class TestGatewayCheckout:
    def test_returns_signed_redirect(self, auth_client, variant, address):
        _add(auth_client, variant)

        response = _checkout(auth_client, address, payment_method="payhere")

        assert response.status_code == 201
        payment = response.json()["payment"]
        assert payment["kind"] == "gateway_redirect"
        assert payment["checkout_url"] == "https://sandbox.payhere.lk/pay/checkout"
        assert payment["fields"]["order_id"] == response.json()["order_number"]
        assert payment["fields"]["amount"] == "1399.00"
        assert len(payment["fields"]["hash"]) == 32

        order = Order.objects.get(id=response.json()["order_id"])
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.UNPAID

    def test_gateway_fault_returns_502_and_keeps_order(
        self, auth_client, variant, address, settings
    ):
        settings.PAYHERE_MERCHANT_ID = ""
        _add(auth_client, variant)

        response = _checkout(auth_client, address, payment_method="payhere")

        assert response.status_code == 502
        body = response.json()
        assert body["type"] == "gateway_dispatch_fault"
        assert body["retryable"] is False
        order = Order.objects.get(order_number=body["order_number"])
        assert str(order.id) == body["order_id"]
        assert order.status == OrderStatus.PENDING
        assert auth_client.get("/api/v1/cart/").data["item_count"] == 1


class TestCheckoutFailures:
    def test_anonymous_checkout_returns_401(self, api_client, variant, address):
        _add(api_client, variant)

        response = _checkout(api_client, address)

        assert response.status_code == 401
        assert Order.objects.count() == 0

    def test_empty_cart_returns_400(self, auth_client, address):
        response = _checkout(auth_client, address)

        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "cart"

    def test_missing_address_returns_400(self, auth_client, variant):
        _add(auth_client, variant)

        response = auth_client.post(
            CHECKOUT_URL,
            {"payment_method": "bank", "shipping_method": "standard"},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "shipping_address"

    def test_unknown_payment_method_returns_400(self, auth_client, variant, address):
        _add(auth_client, variant)

        response = _checkout(auth_client, address, payment_method="crypto")

        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "payment_method"

    def test_stock_drop_returns_cart_adjusted(self, auth_client, make_product, address):
        product = make_product(variants=[("RUN-42", "42", "", 3)])
        variant = product.variants.get()
        _add(auth_client, variant, 3)
        variant.stock = 1
        variant.save()

        response = _checkout(auth_client, address)

        assert response.status_code == 409
        body = response.json()
        assert body["type"] == "cart_adjusted"
        assert body["errors"][0]["detail"] == (
            "Your cart was updated to match available stock."
        )
        assert body["cart"]["lines"][0]["quantity"] == 1
        assert Order.objects.count() == 0
        assert auth_client.get("/api/v1/cart/").data["item_count"] == 1

    def test_stale_expected_total_returns_cart_adjusted(
        self, auth_client, variant, address
    ):
        _add(auth_client, variant)

        response = _checkout(auth_client, address, expected_total="1000.00")

        assert response.status_code == 409
        assert response.json()["messages"] == ["Your order total is now 1399.00 LKR."]

    def test_stock_conflict_at_placement_returns_409(
        self, auth_client, variant, address
    ):
        _add(auth_client, variant, 3)
        variant.stock = 1
        variant.save()

        with patch(
            "modules.cart.services.CartService.revalidate", return_value=[]
        ):
            response = _checkout(auth_client, address)

        assert response.status_code == 409
        body = response.json()
        assert body["type"] == "stock_conflict"
        assert body["failing_variant_id"] == str(variant.id)
        assert body["available_quantity"] == 1
        variant.refresh_from_db()
        assert variant.stock == 1
        assert auth_client.get("/api/v1/cart/").data["item_count"] == 3

    def test_storage_fault_returns_503_and_commits_nothing(
        self, auth_client, variant, address
    ):
        _add(auth_client, variant, 2)

        with patch(
            "modules.orders.repositories.django_repository.OrderDjangoRepository.create",
            side_effect=DatabaseError("disk I/O error"),
        ):
            response = _checkout(auth_client, address)

        assert response.status_code == 503
        body = response.json()
        assert body["type"] == "transaction_fault"
        assert body["retryable"] is True
        variant.refresh_from_db()
        assert variant.stock == 10
        assert Order.objects.count() == 0
        assert auth_client.get("/api/v1/cart/").data["item_count"] == 2
