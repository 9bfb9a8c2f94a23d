# backend/apps/accounts/admin.py
"""
Admin configuration for account models
"""
from django.contrib import admin

from .models import Address, Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ["user", "display_name", "role", "email_verified", "created_at"]
    list_filter = ["email_verified", "user__is_staff", "created_at"]
    search_fields = ["user__email", "display_name"]
    readonly_fields = ["created_at", "updated_at"]

    def role(self, obj):
        return obj.role

    role.short_description = "Role"


@admin.register(Address)
class AddressAdmin(admin.ModelAdmin):
    list_display = ["name", "user", "city", "state", "zip_code", "country", "is_default"]
    list_filter = ["country", "is_default"]
    search_fields = ["name", "user__email", "address1", "city", "zip_code"]
    readonly_fields = ["id", "created_at", "updated_at"]
