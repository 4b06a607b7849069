"""Checkout request serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import PaymentMethod, ShippingMethod


class AddressSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32)
    line1 = serializers.CharField(max_length=255)
    line2 = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )
    city = serializers.CharField(max_length=100)
    postal_code = serializers.CharField(
        max_length=20, required=False, allow_blank=True, default=""
    )
    country = serializers.CharField(max_length=100, required=False, default="Sri Lanka")


class CheckoutSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    shipping_method = serializers.ChoiceField(choices=ShippingMethod.choices)
    shipping_address = AddressSerializer()
    billing_address = AddressSerializer(required=False, allow_null=True)
    expected_total = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
