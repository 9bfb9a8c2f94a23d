# backend/apps/notifications/urls.py
"""
Email and push subscription URLs
"""
from django.urls import path

from . import views

app_name = "notifications"

urlpatterns = [
    path("emails/send", views.send_email, name="send-email"),
    path("emails/verify", views.verify_connection, name="verify-connection"),
    path("notifications/subscribe", views.push_subscription, name="push-subscribe"),
    path("admin/emails/", views.email_log, name="email-log"),
    path("admin/orders/<uuid:order_id>/email/", views.order_email, name="order-email"),
    path("admin/users/<int:user_id>/email/", views.user_email, name="user-email"),
]
