# backend/apps/inventory/urls.py
"""
Inventory back-office URLs
"""
from django.urls import path

from . import views

app_name = "inventory"

urlpatterns = [
    path("alerts/", views.send_alerts, name="send-alerts"),
    path("<uuid:product_id>/movements/", views.stock_movements, name="stock-movements"),
    path("", views.inventory, name="inventory"),
]
