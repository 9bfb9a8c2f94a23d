# apps/inventory/tests/test_inventory.py
"""Tests for back-office inventory management"""
import uuid

import pytest
from django.core import mail
from django.urls import reverse
from rest_framework.test import APIClient

from apps.catalog.models import Product
from apps.core.testing import create_admin, create_product, create_user
from apps.inventory.models import StockMovement
from apps.inventory.services import check_low_stock, get_inventory_stats


@pytest.mark.django_db
class TestInventoryViews:
    def setup_method(self):
        self.client = APIClient()
        self.admin = create_admin()
        self.client.force_authenticate(user=self.admin)
        self.url = reverse("inventory:inventory")

    def test_requires_staff(self):
        client = APIClient()
        client.force_authenticate(user=create_user())

        response = client.get(self.url)

        assert response.status_code == 403
        assert response.data["error"]["code"] == "FORBIDDEN"

    def test_alerts_lowest_stock_first(self):
        create_product(name="Plenty", stock=50)
        create_product(name="Low", stock=4)
        create_product(name="Gone", stock=0)
        create_product(name="Draft Low", stock=1, status=Product.STATUS_DRAFT)

        response = self.client.get(self.url)

        assert response.status_code == 200
        alerts = response.data["data"]
        assert [alert["product"]["name"] for alert in alerts] == ["Gone", "Low"]
        assert alerts[0]["alert_type"] == "OUT_OF_STOCK"
        assert alerts[1]["alert_type"] == "LOW_STOCK"
        assert alerts[1]["threshold"] == 10

    def test_stats(self):
        create_product(stock=50)
        create_product(stock=5)
        create_product(stock=0)

        response = self.client.get(self.url, {"type": "stats"})

        assert response.data["data"] == {
            "total_products": 3,
            "low_stock_count": 1,
            "out_of_stock_count": 1,
            "total_stock_items": 55,
            "alert_count": 2,
        }

    def test_out_of_stock_list(self):
        create_product(name="Gone", stock=0)
        create_product(name="Here", stock=3)

        response = self.client.get(self.url, {"type": "out_of_stock"})

        assert [product["name"] for product in response.data["data"]] == ["Gone"]

    def test_invalid_type(self):
        response = self.client.get(self.url, {"type": "everything"})

        assert response.status_code == 400

    def test_update_records_movement(self):
        product = create_product(stock=10)

        response = self.client.post(
            self.url,
            {"type": "update", "product_id": str(product.id), "adjustment": 15, "reason": "Restock"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["new_stock"] == 25
        movement = StockMovement.objects.get(product=product)
        assert movement.movement_type == StockMovement.TYPE_IN
        assert movement.created_by == self.admin

    def test_update_cannot_go_negative(self):
        product = create_product(stock=2)

        response = self.client.post(
            self.url,
            {"type": "update", "product_id": str(product.id), "adjustment": -5, "reason": "Damage"},
            format="json",
        )

        assert response.status_code == 400
        product.refresh_from_db()
        assert product.stock == 2

    def test_bulk_update_is_applied_per_item(self):
        good = create_product(stock=10)
        bad = create_product(stock=1)

        response = self.client.post(
            self.url,
            {
                "type": "bulk_update",
                "updates": [
                    {"product_id": str(good.id), "adjustment": -3, "reason": "Count"},
                    {"product_id": str(bad.id), "adjustment": -3, "reason": "Count"},
                    {"product_id": str(uuid.uuid4()), "adjustment": 1, "reason": "Count"},
                ],
            },
            format="json",
        )

        assert response.status_code == 200
        assert response.data["success"] is False
        assert [result["success"] for result in response.data["results"]] == [True, False, False]
        good.refresh_from_db()
        assert good.stock == 7

    def test_movements_history(self):
        product = create_product(stock=10)
        for adjustment in (5, -2):
            self.client.post(
                self.url,
                {"type": "update", "product_id": str(product.id), "adjustment": adjustment, "reason": "x"},
                format="json",
            )

        response = self.client.get(reverse("inventory:stock-movements", args=[product.id]))

        assert response.status_code == 200
        assert sorted(m["quantity"] for m in response.data["movements"]) == [-2, 5]

    def test_movements_unknown_product(self):
        response = self.client.get(reverse("inventory:stock-movements", args=[uuid.uuid4()]))

        assert response.status_code == 404

    def test_send_alerts(self):
        create_product(name="Low", stock=3)
        create_product(name="Fine", stock=30)

        response = self.client.post(
            reverse("inventory:send-alerts"), {"admin_emails": ["ops@example.com"]}, format="json"
        )

        assert response.data == {"success": True, "sent_count": 1, "errors": []}
        assert mail.outbox[0].to == ["ops@example.com"]
        assert mail.outbox[0].subject.startswith("[EC Store] Low stock: Low")


@pytest.mark.django_db
class TestLowStockCheck:
    def test_only_products_at_threshold_are_alerted(self):
        low = create_product(stock=10)
        high = create_product(stock=11)

        assert check_low_stock([low.id, high.id]) == 1
        assert mail.outbox[0].to == ["admin@example.com"]

    def test_empty_catalog_stats(self):
        assert get_inventory_stats()["total_stock_items"] == 0
