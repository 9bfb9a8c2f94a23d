# backend/apps/cart/admin.py
from django.contrib import admin

from .models import CartItem


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ["user", "product", "quantity", "updated_at"]
    search_fields = ["user__email", "product__name", "product__sku"]
    readonly_fields = ["id", "created_at", "updated_at"]
