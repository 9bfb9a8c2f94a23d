# backend/apps/accounts/serializers.py
"""
Account API serializers
"""
from django.contrib.auth.models import User
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from .models import Address


def _validate_email_shape(value):
    value = (value or "").strip()
    if "@" not in value:
        raise serializers.ValidationError("Enter a valid email address")
    return value


class UserSerializer(serializers.ModelSerializer):
    """Public view of an account"""

    name = serializers.SerializerMethodField()
    avatar = serializers.SerializerMethodField()
    role = serializers.SerializerMethodField()
    email_verified = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "avatar",
            "role",
            "email_verified",
            "is_active",
            "date_joined",
        ]
        read_only_fields = fields

    def _profile(self, obj):
        return getattr(obj, "profile", None)

    @extend_schema_field(OpenApiTypes.STR)
    def get_name(self, obj):
        profile = self._profile(obj)
        return profile.display_name if profile and profile.display_name else None

    @extend_schema_field(OpenApiTypes.STR)
    def get_avatar(self, obj):
        profile = self._profile(obj)
        return profile.avatar_url if profile and profile.avatar_url else None

    @extend_schema_field(OpenApiTypes.STR)
    def get_role(self, obj):
        return "ADMIN" if obj.is_staff else "CUSTOMER"

    @extend_schema_field(OpenApiTypes.BOOL)
    def get_email_verified(self, obj):
        profile = self._profile(obj)
        return bool(profile and profile.email_verified)


class RegisterSerializer(serializers.Serializer):
    email = serializers.CharField(max_length=254)
    password = serializers.CharField(min_length=6, write_only=True)
    name = serializers.CharField(max_length=150, required=False, allow_blank=True)

    def validate_email(self, value):
        return _validate_email_shape(value)


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(max_length=254)
    password = serializers.CharField(write_only=True)

    def validate_email(self, value):
        return _validate_email_shape(value)


class ProfileUpdateSerializer(serializers.Serializer):
    email = serializers.CharField(max_length=254)
    name = serializers.CharField(max_length=150, required=False, allow_blank=True, allow_null=True)
    avatar = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)

    def validate_email(self, value):
        return _validate_email_shape(value)


class AddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = Address
        fields = [
            "id",
            "name",
            "company",
            "address1",
            "address2",
            "city",
            "state",
            "zip_code",
            "country",
            "phone",
            "is_default",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
