# backend/apps/notifications/models.py
"""
Outgoing email log and browser push subscriptions
"""
import uuid

from django.conf import settings
from django.db import models


class EmailLog(models.Model):
    """One attempt to send an email"""

    STATUS_SENT = "SENT"
    STATUS_FAILED = "FAILED"

    STATUS_CHOICES = [
        (STATUS_SENT, "Sent"),
        (STATUS_FAILED, "Failed"),
    ]

    EMAIL_TYPES = [
        ("order_confirmation", "Order confirmation"),
        ("order_shipped", "Order shipped"),
        ("inventory_alert", "Inventory alert"),
        ("password_reset", "Password reset"),
        ("welcome", "Welcome"),
        ("custom", "Custom"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email_type = models.CharField(max_length=30, choices=EMAIL_TYPES)
    recipients = models.JSONField(default=list)
    subject = models.CharField(max_length=255)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES)
    message_id = models.CharField(max_length=255, blank=True)
    error = models.TextField(blank=True)
    reference = models.CharField(max_length=100, blank=True)  # order number, user id, sku
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["email_type", "created_at"])]

    def __str__(self):
        return f"{self.email_type} to {', '.join(self.recipients)} ({self.status})"


class PushSubscription(models.Model):
    """A browser Web Push endpoint, owned by a user or an anonymous session"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    endpoint = models.URLField(max_length=500, unique=True)
    p256dh_key = models.CharField(max_length=255)
    auth_key = models.CharField(max_length=255)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="push_subscriptions",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
    )
    session_id = models.CharField(max_length=255, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]

    def __str__(self):
        owner = self.user or self.session_id or "anonymous"
        return f"Push subscription for {owner}"
