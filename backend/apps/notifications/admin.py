# backend/apps/notifications/admin.py
"""
Admin configuration for the email log
"""
from django.contrib import admin

from .models import EmailLog, PushSubscription


@admin.register(EmailLog)
class EmailLogAdmin(admin.ModelAdmin):
    list_display = ["email_type", "recipient_list", "subject", "status", "reference", "created_at"]
    list_filter = ["email_type", "status", "created_at"]
    search_fields = ["subject", "reference", "message_id"]
    readonly_fields = [
        "id",
        "email_type",
        "recipients",
        "subject",
        "status",
        "message_id",
        "error",
        "reference",
        "created_at",
    ]

    def recipient_list(self, obj):
        return ", ".join(obj.recipients)

    recipient_list.short_description = "Recipients"


@admin.register(PushSubscription)
class PushSubscriptionAdmin(admin.ModelAdmin):
    list_display = ["endpoint", "user", "session_id", "updated_at"]
    search_fields = ["endpoint", "user__email", "session_id"]
    readonly_fields = ["id", "created_at", "updated_at"]
