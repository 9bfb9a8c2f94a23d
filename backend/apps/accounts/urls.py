# backend/apps/accounts/urls.py
"""
Accounts app URLs
"""
from django.urls import path

from . import views

app_name = "accounts"

urlpatterns = [
    path("auth/register", views.register, name="register"),
    path("auth/login", views.login, name="login"),
    path("auth/me", views.me, name="me"),
    path("auth/logout", views.logout, name="logout"),
    path("addresses/<uuid:address_id>/", views.address_detail, name="address-detail"),
    path("addresses/", views.address_list, name="address-list"),
]
