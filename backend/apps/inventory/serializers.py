# backend/apps/inventory/serializers.py
"""
Inventory API serializers
"""
from rest_framework import serializers

from .models import StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    product_name = serializers.ReadOnlyField(source="product.name")
    product_sku = serializers.ReadOnlyField(source="product.sku")

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "product_name",
            "product_sku",
            "quantity",
            "movement_type",
            "reason",
            "reference",
            "stock_before",
            "stock_after",
            "created_at",
        ]
        read_only_fields = fields


class InventoryUpdateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    adjustment = serializers.IntegerField()
    reason = serializers.CharField(max_length=255)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")


class BulkInventoryUpdateSerializer(serializers.Serializer):
    updates = InventoryUpdateSerializer(many=True, allow_empty=False)


class InventoryAlertRequestSerializer(serializers.Serializer):
    admin_emails = serializers.ListField(
        child=serializers.EmailField(), required=False, allow_empty=True
    )
