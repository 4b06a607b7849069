"""Order DRF serializers for API input/output.

Business logic lives in the Service Layer, which receives Pydantic DTOs
from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.models import Order, OrderLine, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class PaymentStatusUpdateSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=PaymentStatus.choices)
    notes = serializers.CharField(required=False, default="", allow_blank=True)
    reference = serializers.CharField(required=False, allow_blank=True, max_length=128)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderLine
        fields = [
            "id",
            "variant_id",
            "product_title",
            "size",
            "color",
            "sku",
            "unit_price",
            "quantity",
            "line_total",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "dimension",
            "old_status",
            "new_status",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested lines and history."""

    lines = OrderLineSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)
    display_status = serializers.CharField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "user_id",
            "status",
            "display_status",
            "payment_status",
            "payment_method",
            "payment_provider",
            "payment_provider_reference",
            "shipping_method",
            "shipping_cost",
            "subtotal",
            "total",
            "currency",
            "shipping_address",
            "billing_address",
            "created_at",
            "updated_at",
            "lines",
            "status_history",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order list (no nested relations)."""

    display_status = serializers.CharField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "display_status",
            "payment_status",
            "payment_method",
            "total",
            "currency",
            "created_at",
        ]
        read_only_fields = fields
