# backend/apps/cart/urls.py
"""
Cart app URLs
"""
from django.urls import path

from . import views

app_name = "cart"

urlpatterns = [
    path("count/", views.cart_count, name="cart-count"),
    path("<uuid:product_id>/", views.cart_item, name="cart-item"),
    path("", views.cart, name="cart"),
]
