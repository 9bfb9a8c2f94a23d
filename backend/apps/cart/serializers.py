# backend/apps/cart/serializers.py
"""
Cart API serializers
"""
from rest_framework import serializers

from ..catalog.serializers import ProductSerializer
from .models import CartItem


class CartItemSerializer(serializers.ModelSerializer):
    product = ProductSerializer(read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = ["id", "product", "quantity", "line_total", "created_at", "updated_at"]
        read_only_fields = fields


class CartAddSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(default=1)


class CartUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()
