"""Cart DRF serializers (input validation and read representation)."""

from __future__ import annotations

from django.conf import settings
from rest_framework import serializers


class AddCartLineSerializer(serializers.Serializer):
    variant_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=100, default=1)


class SetCartLineQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=0, max_value=100)


class CartLineSerializer(serializers.Serializer):
    variant_id = serializers.CharField()
    product_id = serializers.CharField()
    title = serializers.CharField()
    sku = serializers.CharField()
    image = serializers.CharField()
    size = serializers.CharField()
    color = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class CartSerializer(serializers.Serializer):
    lines = serializers.SerializerMethodField()
    item_count = serializers.IntegerField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.SerializerMethodField()

    def get_lines(self, cart):
        return CartLineSerializer(cart.ordered_lines(), many=True).data

    def get_currency(self, cart) -> str:
        return settings.STORE_CURRENCY
