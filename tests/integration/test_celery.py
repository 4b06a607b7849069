"""Integration tests for the Celery configuration and order sweeps."""

from datetime import timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time

from modules.orders.models import Order
from modules.orders.tasks import flag_stale_gateway_orders

pytestmark = pytest.mark.integration


class TestCeleryConfig:
    def test_celery_app_is_importable(self):
        from config.celery import app

        assert app.main == "footwear_store"

    def test_celery_app_exported_from_init(self):
        from config import celery_app

        assert celery_app.main == "footwear_store"

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_RESULT_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_celery_timezone_matches_django(self, settings):
        assert settings.CELERY_TIMEZONE == settings.TIME_ZONE

    def test_stale_sweep_is_scheduled(self, settings):
        entry = settings.CELERY_BEAT_SCHEDULE["orders.flag_stale_gateway_orders"]
        assert entry["task"] == "orders.flag_stale_gateway_orders"


class TestFlagStaleGatewayOrders:
    def test_reports_only_old_unpaid_gateway_orders(self, place_order, user, variant):
        with freeze_time(timezone.now() - timedelta(hours=3)):
            stale = place_order(user, [(variant, 1)], payment_method="payhere")
            place_order(user, [(variant, 1)], payment_method="bank")
        place_order(user, [(variant, 1)], payment_method="payhere")

        result = flag_stale_gateway_orders.delay().get()

        assert result == {"count": 1, "order_numbers": [stale.order_number]}

    def test_paid_orders_are_not_reported(self, place_order, user, variant):
        with freeze_time(timezone.now() - timedelta(hours=3)):
            placed = place_order(user, [(variant, 1)], payment_method="payhere")
        Order.objects.filter(id=placed.order_id).update(payment_status="paid")

        assert flag_stale_gateway_orders()["count"] == 0

    def test_sweep_never_changes_orders_or_stock(self, place_order, user, variant):
        with freeze_time(timezone.now() - timedelta(hours=3)):
            placed = place_order(user, [(variant, 2)], payment_method="payhere")

        flag_stale_gateway_orders(timeout_minutes=30)

        order = Order.objects.get(id=placed.order_id)
        assert order.status == "pending"
        variant.refresh_from_db()
        assert variant.stock == 8
