# backend/apps/recommendations/serializers.py
from rest_framework import serializers


class ProductViewSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=255, required=False, allow_blank=True)
