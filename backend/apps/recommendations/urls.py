# backend/apps/recommendations/urls.py
"""
Recommendations app URLs
"""
from django.urls import path

from . import views

app_name = "recommendations"

urlpatterns = [
    path("products/<uuid:product_id>/view/", views.track_view, name="track-view"),
    path("recommendations/", views.recommendations, name="recommendations"),
]
