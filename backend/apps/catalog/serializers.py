# backend/apps/catalog/serializers.py
"""
Catalog API serializers
"""
from django.db.models import Avg, Q
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from .models import Category, Favorite, Product, ProductImage, Review


class CategorySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "slug"]


class ProductImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductImage
        fields = ["id", "url", "alt", "order"]


class ProductSerializer(serializers.ModelSerializer):
    """Product with images, category and rating summary"""

    category = CategorySummarySerializer(read_only=True)
    images = ProductImageSerializer(many=True, read_only=True)
    average_rating = serializers.SerializerMethodField()
    review_count = serializers.SerializerMethodField()
    is_on_sale = serializers.BooleanField(read_only=True)
    in_stock = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "compare_price",
            "sku",
            "stock",
            "in_stock",
            "status",
            "weight",
            "dimensions",
            "tags",
            "category",
            "images",
            "average_rating",
            "review_count",
            "is_on_sale",
            "created_at",
            "updated_at",
        ]

    @extend_schema_field(OpenApiTypes.FLOAT)
    def get_average_rating(self, obj):
        if hasattr(obj, "average_rating"):
            average = obj.average_rating
        else:
            average = obj.reviews.filter(is_approved=True).aggregate(avg=Avg("rating"))["avg"]
        return round(average, 1) if average is not None else None

    @extend_schema_field(OpenApiTypes.INT)
    def get_review_count(self, obj):
        if hasattr(obj, "review_count"):
            return obj.review_count
        return obj.reviews.filter(Q(is_approved=True)).count()

    @extend_schema_field(OpenApiTypes.BOOL)
    def get_in_stock(self, obj):
        return obj.stock > 0


class ReviewSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = [
            "id",
            "product",
            "user_name",
            "rating",
            "title",
            "comment",
            "helpful_count",
            "created_at",
        ]
        read_only_fields = fields

    @extend_schema_field(OpenApiTypes.STR)
    def get_user_name(self, obj):
        profile = getattr(obj.user, "profile", None)
        if profile and profile.display_name:
            return profile.display_name
        return obj.user.email.split("@")[0]


class ReviewCreateSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    title = serializers.CharField(max_length=200, required=False, allow_blank=True)
    comment = serializers.CharField()


class FavoriteSerializer(serializers.ModelSerializer):
    product = ProductSerializer(read_only=True)

    class Meta:
        model = Favorite
        fields = ["id", "product", "created_at"]


class WishlistAddSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
