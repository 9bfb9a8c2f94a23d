# backend/apps/backoffice/urls.py
from django.urls import path

from . import views

app_name = "backoffice"

urlpatterns = [
    # Products
    path("products/stats/", views.product_stats, name="product-stats"),
    path("products/<uuid:product_id>/status/", views.product_status, name="product-status"),
    path("products/<uuid:product_id>/", views.product_detail, name="product-detail"),
    path("products/", views.product_list, name="product-list"),
    # Orders
    path("orders/stats/", views.order_stats, name="order-stats"),
    path("orders/<uuid:order_id>/status/", views.order_status, name="order-status"),
    path("orders/<uuid:order_id>/", views.order_detail, name="order-detail"),
    path("orders/", views.order_list, name="order-list"),
    # Users
    path("users/stats/", views.user_stats, name="user-stats"),
    path("users/<int:user_id>/status/", views.user_status, name="user-status"),
    path("users/<int:user_id>/", views.user_detail, name="user-detail"),
    path("users/", views.user_list, name="user-list"),
    # Reviews
    path("reviews/stats/", views.review_stats, name="review-stats"),
    path("reviews/<uuid:review_id>/status/", views.review_status, name="review-status"),
    path("reviews/<uuid:review_id>/report/", views.review_report, name="review-report"),
    path("reviews/<uuid:review_id>/", views.review_detail, name="review-detail"),
    path("reviews/", views.review_list, name="review-list"),
    # Analytics
    path("analytics/", views.sales_analytics, name="analytics"),
]
