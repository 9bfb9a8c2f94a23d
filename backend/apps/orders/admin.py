# backend/apps/orders/admin.py
"""
Admin configuration for order models
"""
from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ["product", "quantity", "price"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        "order_number",
        "user",
        "status",
        "total_amount",
        "item_count",
        "created_at",
    ]
    list_filter = ["status", "created_at"]
    search_fields = ["order_number", "user__email"]
    readonly_fields = [
        "id",
        "order_number",
        "subtotal",
        "shipping_cost",
        "tax_amount",
        "total_amount",
        "shipping_address",
        "delivered_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    ]
    inlines = [OrderItemInline]

    def item_count(self, obj):
        return obj.items.count()

    item_count.short_description = "Lines"
