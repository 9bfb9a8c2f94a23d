# backend/apps/backoffice/serializers.py
"""
Back-office request and response serializers
"""
from django.contrib.auth.models import User
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from apps.accounts.serializers import UserSerializer
from apps.catalog.models import Product, Review
from apps.catalog.serializers import ReviewSerializer

from .services import ADMIN_PRODUCT_STATUSES


class ProductImageInputSerializer(serializers.Serializer):
    url = serializers.CharField(max_length=500)
    alt = serializers.CharField(max_length=200, required=False, allow_blank=True)


class ProductWriteSerializer(serializers.Serializer):
    """
    Create payload; used with partial=True for updates so every field
    becomes optional
    """

    name = serializers.CharField(max_length=200)
    description = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    compare_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    sku = serializers.CharField(max_length=64)
    stock = serializers.IntegerField(min_value=0, required=False, default=0)
    status = serializers.ChoiceField(
        choices=ADMIN_PRODUCT_STATUSES, required=False, default=Product.STATUS_ACTIVE
    )
    weight = serializers.DecimalField(
        max_digits=8, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    dimensions = serializers.CharField(max_length=100, required=False, allow_blank=True)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    category_id = serializers.UUIDField()
    images = ProductImageInputSerializer(many=True, required=False)

    def validate_sku(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("SKU must not be blank")
        return value


class ProductStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ADMIN_PRODUCT_STATUSES)


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.CharField()


class AdminUserSerializer(UserSerializer):
    """Account row with order totals for the customer table"""

    order_count = serializers.IntegerField(read_only=True)
    total_spent = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    last_login = serializers.DateTimeField(read_only=True)

    class Meta(UserSerializer.Meta):
        model = User
        fields = UserSerializer.Meta.fields + ["is_staff", "last_login", "order_count", "total_spent"]
        read_only_fields = fields


class UserStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


class AdminReviewSerializer(ReviewSerializer):
    product_name = serializers.ReadOnlyField(source="product.name")
    user_email = serializers.SerializerMethodField()

    class Meta(ReviewSerializer.Meta):
        model = Review
        fields = ReviewSerializer.Meta.fields + [
            "product_name",
            "user_email",
            "is_approved",
            "is_reported",
            "report_count",
            "updated_at",
        ]
        read_only_fields = fields

    @extend_schema_field(OpenApiTypes.STR)
    def get_user_email(self, obj):
        return obj.user.email


class ReviewStatusSerializer(serializers.Serializer):
    is_approved = serializers.BooleanField()
