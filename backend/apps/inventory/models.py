# backend/apps/inventory/models.py
"""
Stock movement ledger
"""
import uuid

from django.conf import settings
from django.db import models


class StockMovement(models.Model):
    """One change to a product's stock counter"""

    TYPE_IN = "IN"
    TYPE_OUT = "OUT"
    TYPE_ADJUSTMENT = "ADJUSTMENT"

    MOVEMENT_TYPES = [
        (TYPE_IN, "Stock in"),
        (TYPE_OUT, "Stock out"),
        (TYPE_ADJUSTMENT, "Adjustment"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(
        "catalog.Product", related_name="stock_movements", on_delete=models.CASCADE
    )
    quantity = models.IntegerField()  # signed: negative removes units
    movement_type = models.CharField(max_length=10, choices=MOVEMENT_TYPES)
    reason = models.CharField(max_length=255)
    reference = models.CharField(max_length=100, blank=True)
    stock_before = models.PositiveIntegerField()
    stock_after = models.PositiveIntegerField()
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="stock_movements",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["product", "created_at"])]

    def __str__(self):
        sign = "+" if self.quantity >= 0 else ""
        return f"{self.product.name}: {sign}{self.quantity} ({self.movement_type})"
