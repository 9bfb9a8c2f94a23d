# backend/apps/notifications/serializers.py
"""
Email API serializers
"""
from rest_framework import serializers

from .models import EmailLog

SEND_TYPES = ["order_confirmation", "inventory_alert", "password_reset", "welcome", "custom"]


class EmailLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmailLog
        fields = [
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
        read_only_fields = fields


class EmailSendSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=SEND_TYPES)
    to = serializers.ListField(child=serializers.EmailField(), allow_empty=False)
    data = serializers.DictField()

    def to_internal_value(self, data):
        # Accept a single address as well as a list
        if hasattr(data, "get") and isinstance(data.get("to"), str):
            data = {**data, "to": [data["to"]]}
        return super().to_internal_value(data)


class OrderConfirmationDataSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()


class InventoryAlertDataSerializer(serializers.Serializer):
    product_name = serializers.CharField()
    product_sku = serializers.CharField()
    current_stock = serializers.IntegerField(min_value=0)
    threshold = serializers.IntegerField(min_value=0)
    category_name = serializers.CharField()


class PasswordResetDataSerializer(serializers.Serializer):
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")
    reset_url = serializers.URLField()
    expires_in = serializers.CharField(required=False, default="1 hour")


class WelcomeDataSerializer(serializers.Serializer):
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")


class CustomEmailDataSerializer(serializers.Serializer):
    subject = serializers.CharField(max_length=200)
    message = serializers.CharField()


DATA_SERIALIZERS = {
    "order_confirmation": OrderConfirmationDataSerializer,
    "inventory_alert": InventoryAlertDataSerializer,
    "password_reset": PasswordResetDataSerializer,
    "welcome": WelcomeDataSerializer,
    "custom": CustomEmailDataSerializer,
}


class OrderEmailSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=["confirmation", "shipping"])


class UserEmailSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=["welcome", "custom"])
    subject = serializers.CharField(max_length=200, required=False)
    message = serializers.CharField(required=False)

    def validate(self, attrs):
        if attrs["type"] == "custom" and not (attrs.get("subject") and attrs.get("message")):
            raise serializers.ValidationError("subject and message are required for custom emails")
        return attrs


class PushKeysSerializer(serializers.Serializer):
    p256dh = serializers.CharField(max_length=255)
    auth = serializers.CharField(max_length=255)


class PushSubscribeSerializer(serializers.Serializer):
    endpoint = serializers.URLField(max_length=500)
    keys = PushKeysSerializer()


class PushUnsubscribeSerializer(serializers.Serializer):
    endpoint = serializers.URLField(max_length=500)
