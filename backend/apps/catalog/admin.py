# backend/apps/catalog/admin.py
"""
Admin configuration for catalog models
"""
from django.contrib import admin

from .models import Category, Favorite, Product, ProductImage, Review


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 0


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "parent", "product_count", "created_at"]
    search_fields = ["name", "slug"]
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ["id", "created_at", "updated_at"]

    def product_count(self, obj):
        return obj.products.count()

    product_count.short_description = "Products"


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ["name", "sku", "category", "price", "stock", "status", "created_at"]
    list_filter = ["status", "category", "created_at"]
    search_fields = ["name", "sku", "description"]
    readonly_fields = ["id", "created_at", "updated_at"]
    inlines = [ProductImageInline]
    fieldsets = (
        ("Product", {"fields": ("id", "name", "description", "category", "tags")}),
        ("Pricing & stock", {"fields": ("price", "compare_price", "sku", "stock", "status")}),
        ("Shipping", {"fields": ("weight", "dimensions")}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = [
        "product",
        "user",
        "rating",
        "is_approved",
        "is_reported",
        "report_count",
        "helpful_count",
        "created_at",
    ]
    list_filter = ["rating", "is_approved", "is_reported", "created_at"]
    search_fields = ["title", "comment", "product__name", "user__email"]
    readonly_fields = ["id", "created_at", "updated_at"]


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ["user", "product", "created_at"]
    search_fields = ["user__email", "product__name"]
    readonly_fields = ["id", "created_at"]
