# backend/apps/recommendations/models.py
"""
Product view history used for recommendations
"""
import uuid

from django.conf import settings
from django.db import models


class ProductView(models.Model):
    """A product page view by a user or an anonymous session"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey("catalog.Product", related_name="views", on_delete=models.CASCADE)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="product_views",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
    )
    session_id = models.CharField(max_length=255, blank=True, db_index=True)
    viewed_at = models.DateTimeField()

    class Meta:
        ordering = ["-viewed_at"]
        indexes = [
            models.Index(fields=["user", "viewed_at"]),
            models.Index(fields=["session_id", "viewed_at"]),
            models.Index(fields=["product", "viewed_at"]),
        ]

    def __str__(self):
        viewer = self.user or self.session_id or "anonymous"
        return f"{viewer} viewed {self.product_id} at {self.viewed_at}"
