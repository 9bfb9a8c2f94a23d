# backend/apps/orders/urls.py
"""
Orders app URLs
"""
from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    path("<uuid:order_id>/", views.order_detail, name="order-detail"),
    path("", views.order_list, name="order-list"),
]
