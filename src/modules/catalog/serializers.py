"""Catalog DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.catalog.models import Product, ProductVariant


class ProductVariantSerializer(serializers.ModelSerializer):
    unit_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, read_only=True
    )

    class Meta:
        model = ProductVariant
        fields = [
            "id",
            "sku",
            "size",
            "color",
            "stock",
            "unit_price",
            "price_override",
            "is_active",
            "updated_at",
        ]
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    variants = ProductVariantSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "title",
            "description",
            "image_url",
            "price",
            "currency",
            "is_active",
            "variants",
        ]
        read_only_fields = fields


class AvailabilityQuerySerializer(serializers.Serializer):
    size = serializers.CharField(required=False, allow_blank=True, max_length=32)
    color = serializers.CharField(required=False, allow_blank=True, max_length=64)


class AvailabilitySerializer(serializers.Serializer):
    """Read representation of a ``Resolution``."""

    scenario = serializers.SerializerMethodField()
    complete = serializers.BooleanField()
    variant = serializers.SerializerMethodField()
    missing_axes = serializers.ListField(child=serializers.CharField())
    sizes = serializers.ListField(child=serializers.CharField())
    colors = serializers.ListField(child=serializers.CharField())
    disabled_sizes = serializers.ListField(child=serializers.CharField())
    disabled_colors = serializers.ListField(child=serializers.CharField())
    in_cart = serializers.IntegerField()
    addable_quantity = serializers.IntegerField()
    can_add = serializers.BooleanField()
    messages = serializers.ListField(child=serializers.CharField())

    def get_scenario(self, resolution) -> str:
        return resolution.scenario.value

    def get_variant(self, resolution):
        if resolution.variant is None:
            return None
        return ProductVariantSerializer(resolution.variant).data


class StockAdjustmentSerializer(serializers.Serializer):
    stock = serializers.IntegerField(required=False, min_value=0)
    delta = serializers.IntegerField(required=False)
    reason = serializers.CharField(required=False, allow_blank=True, default="")
