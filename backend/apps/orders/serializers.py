# backend/apps/orders/serializers.py
"""
Order API serializers
"""
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(source="product.id", read_only=True)
    product_name = serializers.ReadOnlyField(source="product.name")
    product_sku = serializers.ReadOnlyField(source="product.sku")
    image_url = serializers.SerializerMethodField()
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "product_sku",
            "image_url",
            "quantity",
            "price",
            "line_total",
        ]
        read_only_fields = fields

    @extend_schema_field(OpenApiTypes.STR)
    def get_image_url(self, obj):
        images = list(obj.product.images.all())
        return images[0].url if images else None


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    is_cancellable = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "subtotal",
            "shipping_cost",
            "tax_amount",
            "total_amount",
            "notes",
            "shipping_address",
            "items",
            "is_cancellable",
            "delivered_at",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AdminOrderSerializer(OrderSerializer):
    customer = serializers.SerializerMethodField()

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["customer"]
        read_only_fields = fields

    @extend_schema_field(OpenApiTypes.OBJECT)
    def get_customer(self, obj):
        profile = getattr(obj.user, "profile", None)
        return {
            "id": obj.user.id,
            "email": obj.user.email,
            "name": profile.display_name if profile else "",
        }


class OrderCreateSerializer(serializers.Serializer):
    address_id = serializers.UUIDField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
