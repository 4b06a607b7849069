"""Integration tests for per-scope throttling on checkout and order reads."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from rest_framework.throttling import ScopedRateThrottle

pytestmark = pytest.mark.integration


def _checkout(client, address):
    return client.post(
        "/api/v1/checkout/",
        {
            "payment_method": "bank",
            "shipping_method": "standard",
            "shipping_address": address,
        },
        format="json",
    )


def test_checkout_is_throttled(auth_client, address):
    with patch.dict(ScopedRateThrottle.THROTTLE_RATES, {"checkout": "2/minute"}):
        for _ in range(2):
            assert _checkout(auth_client, address).status_code == 400

        response = _checkout(auth_client, address)

    assert response.status_code == 429
    assert response.json()["type"] == "throttled"


def test_order_listing_has_its_own_budget(auth_client, address):
    with patch.dict(ScopedRateThrottle.THROTTLE_RATES, {"checkout": "1/minute"}):
        _checkout(auth_client, address)
        assert _checkout(auth_client, address).status_code == 429

        for _ in range(5):
            response = auth_client.get("/api/v1/orders/")
            assert response.status_code == 200


def test_payment_notifications_are_throttled(api_client):
    with patch.dict(ScopedRateThrottle.THROTTLE_RATES, {"payment_notify": "1/minute"}):
        api_client.post("/api/v1/payments/payhere/notify/", {})

        response = api_client.post("/api/v1/payments/payhere/notify/", {})

    assert response.status_code == 429
