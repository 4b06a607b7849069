import logging
import uuid


class TestCorrelationIdMiddleware:
    def test_returns_provided_request_id(self, client):
        custom_id = "my-custom-request-id-123"
        response = client.get("/health", HTTP_X_REQUEST_ID=custom_id)
        assert response["X-Request-ID"] == custom_id

    def test_generates_uuid_when_no_request_id(self, client):
        response = client.get("/health")
        request_id = response["X-Request-ID"]
        parsed = uuid.UUID(request_id, version=4)
        assert str(parsed) == request_id

    def test_correlation_id_in_logs(self, client, caplog):
        custom_id = "log-test-correlation-456"
        with caplog.at_level(logging.INFO):
            client.get("/health", HTTP_X_REQUEST_ID=custom_id)
        found = any(custom_id in record.getMessage() for record in caplog.records)
        assert found, (
            f"correlation_id '{custom_id}' not found in log records: "
            f"{[r.getMessage() for r in caplog.records]}"
        )

    def test_correlation_id_reaches_service_logs(self, api_client, variant, caplog):
        custom_id = "cart-correlation-789"
        with caplog.at_level(logging.INFO):
            api_client.post(
                "/api/v1/cart/lines/",
                {"variant_id": str(variant.id), "quantity": 1},
                format="json",
                HTTP_X_REQUEST_ID=custom_id,
            )
        messages = [r.getMessage() for r in caplog.records]
        assert any("cart.line_added" in m and custom_id in m for m in messages)


class TestStructuredEvents:
    def test_checkout_logs_order_number(self, auth_client, variant, address, caplog):
        auth_client.post(
            "/api/v1/cart/lines/", {"variant_id": str(variant.id)}, format="json"
        )
        with caplog.at_level(logging.INFO):
            response = auth_client.post(
                "/api/v1/checkout/",
                {
                    "payment_method": "cod",
                    "shipping_method": "standard",
                    "shipping_address": address,
                },
                format="json",
            )
        order_number = response.json()["order_number"]
        messages = [r.getMessage() for r in caplog.records]
        assert any("checkout.completed" in m and order_number in m for m in messages)
