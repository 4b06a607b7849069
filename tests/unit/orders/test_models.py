"""Unit tests for Order, OrderLine and OrderStatusHistory models.

Covers:
- Order number format and generation retries.
- Defaults (pending / unpaid).
- OrderLine snapshot immutability and line total.
- History rows for system and admin changes.
"""

from __future__ import annotations

import re
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.core.exceptions import ValidationError
from django.db.models import ProtectedError

from modules.catalog.models import ProductVariant
from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.models import Order, OrderLine, OrderStatusHistory

pytestmark = pytest.mark.unit

ORDER_NUMBER_RE = re.compile(r"^ORD-\d{8}-[0-9A-F]{6}$")


@pytest.fixture()
def order(user):
    return Order.objects.create(
        user=user,
        payment_method="bank",
        shipping_method="standard",
        shipping_cost=Decimal("399.00"),
        total=Decimal("1399.00"),
    )


@pytest.fixture()
def line(order, variant):
    return OrderLine.objects.create(
        order=order,
        variant=variant,
        product_title="Trail Runner",
        sku=variant.sku,
        unit_price=Decimal("1000.00"),
        quantity=1,
    )


class TestOrder:
    def test_defaults(self, order):
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.UNPAID
        assert order.currency == "LKR"

    def test_order_number_format(self, order):
        assert ORDER_NUMBER_RE.match(order.order_number)

    def test_order_number_is_kept_on_resave(self, order):
        number = order.order_number
        order.save()
        assert order.order_number == number

    def test_order_number_generation_gives_up(self, user, order):
        with patch.object(Order, "generate_order_number", return_value=order.order_number):
            with pytest.raises(RuntimeError, match="order_number"):
                Order.objects.create(
                    user=user,
                    payment_method="cod",
                    shipping_method="standard",
                    total=Decimal("399.00"),
                )

    def test_user_is_protected(self, order, user):
        with pytest.raises(ProtectedError):
            user.delete()

    def test_str(self, order):
        assert str(order) == f"{order.order_number} (pending)"


class TestOrderLine:
    def test_line_total_computed(self, line):
        assert line.line_total == Decimal("1000.00")

    def test_line_is_immutable(self, line):
        line.unit_price = Decimal("1.00")
        with pytest.raises(ValidationError):
            line.save()

        line.refresh_from_db()
        assert line.unit_price == Decimal("1000.00")

    def test_snapshot_survives_catalog_edits(self, line, variant):
        ProductVariant.objects.filter(id=variant.id).update(
            sku="RENAMED", price_override=Decimal("5.00")
        )
        variant.product.title = "Renamed Runner"
        variant.product.save()

        line.refresh_from_db()
        assert line.product_title == "Trail Runner"
        assert line.sku == "RUN-STD"
        assert line.unit_price == Decimal("1000.00")

    def test_variant_is_protected(self, line, variant):
        with pytest.raises(ProtectedError):
            variant.delete()

    def test_reverse_relation(self, order, line):
        assert list(order.lines.all()) == [line]


class TestOrderStatusHistory:
    def test_system_entry_has_no_user(self, order):
        entry = OrderStatusHistory.objects.create(
            order=order, new_status=OrderStatus.PENDING, notes="Order placed"
        )
        assert entry.user is None
        assert entry.old_status is None
        assert entry.dimension == "status"

    def test_payment_dimension(self, order, staff_user):
        entry = OrderStatusHistory.objects.create(
            order=order,
            dimension="payment",
            old_status=PaymentStatus.UNPAID,
            new_status=PaymentStatus.PAID,
            user=staff_user,
        )
        assert str(entry).endswith("[payment]: unpaid -> paid")
        assert list(order.status_history.all()) == [entry]
