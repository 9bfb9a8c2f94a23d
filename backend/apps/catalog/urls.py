# backend/apps/catalog/urls.py
"""
Catalog app URLs
"""
from django.urls import path

from . import views

app_name = "catalog"

urlpatterns = [
    # Specific routes BEFORE generic ones
    path("products/<uuid:product_id>/reviews/", views.product_reviews, name="product-reviews"),
    path("products/<uuid:product_id>/", views.product_detail, name="product-detail"),
    path("products/", views.product_list, name="product-list"),
    path("categories/", views.category_list, name="category-list"),
    path("search", views.search, name="search"),
    path("reviews/<uuid:review_id>/helpful/", views.review_helpful, name="review-helpful"),
    path("wishlist/<uuid:product_id>/", views.wishlist_item, name="wishlist-item"),
    path("wishlist/", views.wishlist, name="wishlist"),
]
