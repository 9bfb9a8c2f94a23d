# apps/orders/tests/test_checkout.py
"""Tests for checkout, order history and cancellation"""
import uuid
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.core import mail
from django.urls import reverse
from rest_framework.test import APIClient

from apps.cart.models import CartItem
from apps.catalog.models import Product
from apps.core.testing import create_address, create_order, create_product, create_user
from apps.inventory.models import StockMovement
from apps.orders.models import Order
from apps.orders.services import calculate_totals, generate_order_number


class TestTotals:
    def test_shipping_charged_below_threshold(self):
        totals = calculate_totals(Decimal("2000"))

        assert totals["shipping_cost"] == Decimal("500")
        assert totals["tax_amount"] == Decimal("200")
        assert totals["total_amount"] == Decimal("2700")

    def test_free_shipping_at_threshold(self):
        totals = calculate_totals(Decimal("10000"))

        assert totals["shipping_cost"] == Decimal("0")
        assert totals["total_amount"] == Decimal("11000")

    def test_tax_is_floored(self):
        assert calculate_totals(Decimal("999"))["tax_amount"] == Decimal("99")


@pytest.mark.django_db
class TestOrderNumber:
    def test_format(self):
        number = generate_order_number()

        assert number.startswith("EC")
        assert len(number) == 12
        assert number[2:].isdigit()


@pytest.mark.django_db
class TestCheckout:
    def setup_method(self):
        self.client = APIClient()
        self.user = create_user(email="buyer@example.com")
        self.client.force_authenticate(user=self.user)
        self.address = create_address(self.user)
        self.product = create_product(name="Kettle", price="1000", stock=50)

    def fill_cart(self, product=None, quantity=2):
        CartItem.objects.create(user=self.user, product=product or self.product, quantity=quantity)

    def checkout(self, **extra):
        return self.client.post(
            reverse("orders:order-list"),
            {"address_id": str(self.address.id), **extra},
            format="json",
        )

    def test_checkout_creates_order(self):
        self.fill_cart(quantity=2)

        response = self.checkout(notes="Leave at the door")

        assert response.status_code == 201
        order = response.data["order"]
        assert order["status"] == "PENDING"
        assert Decimal(order["subtotal"]) == Decimal("2000")
        assert Decimal(order["shipping_cost"]) == Decimal("500")
        assert Decimal(order["tax_amount"]) == Decimal("200")
        assert Decimal(order["total_amount"]) == Decimal("2700")
        assert order["notes"] == "Leave at the door"
        assert order["shipping_address"]["zip_code"] == "100-0001"
        assert order["items"][0]["product_name"] == "Kettle"

    def test_checkout_decrements_stock_and_clears_cart(self):
        self.fill_cart(quantity=3)

        self.checkout()

        self.product.refresh_from_db()
        assert self.product.stock == 47
        assert not CartItem.objects.filter(user=self.user).exists()
        movement = StockMovement.objects.get(product=self.product)
        assert movement.quantity == -3
        assert movement.movement_type == StockMovement.TYPE_OUT
        assert (movement.stock_before, movement.stock_after) == (50, 47)

    def test_checkout_sends_confirmation_after_commit(self, django_capture_on_commit_callbacks):
        self.fill_cart()

        with django_capture_on_commit_callbacks(execute=True):
            response = self.checkout()

        assert response.status_code == 201
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ["buyer@example.com"]
        assert response.data["order"]["order_number"] in mail.outbox[0].subject

    def test_low_stock_after_checkout_alerts_admins(self, django_capture_on_commit_callbacks):
        scarce = create_product(name="Scarce", stock=11)
        self.fill_cart(product=scarce, quantity=2)

        with django_capture_on_commit_callbacks(execute=True):
            self.checkout()

        recipients = [message.to for message in mail.outbox]
        assert ["admin@example.com"] in recipients

    def test_low_stock_alert_survives_confirmation_failure(self, django_capture_on_commit_callbacks):
        scarce = create_product(name="Scarce", stock=11)
        self.fill_cart(product=scarce, quantity=2)

        with patch(
            "apps.notifications.services.EmailService.send_order_confirmation_email",
            side_effect=RuntimeError("template broken"),
        ):
            with django_capture_on_commit_callbacks(execute=True):
                response = self.checkout()

        assert response.status_code == 201
        assert [message.to for message in mail.outbox] == [["admin@example.com"]]

    def test_empty_cart(self):
        response = self.checkout()

        assert response.status_code == 400
        assert Order.objects.count() == 0

    def test_insufficient_stock_rolls_back(self):
        low = create_product(stock=1)
        self.fill_cart(quantity=2)
        self.fill_cart(product=low, quantity=2)

        response = self.checkout()

        assert response.status_code == 400
        assert response.data["error"]["code"] == "INSUFFICIENT_STOCK"
        self.product.refresh_from_db()
        assert self.product.stock == 50
        assert Order.objects.count() == 0
        assert CartItem.objects.filter(user=self.user).count() == 2

    def test_inactive_product_in_cart(self):
        self.fill_cart()
        Product.objects.filter(id=self.product.id).update(status=Product.STATUS_INACTIVE)

        response = self.checkout()

        assert response.status_code == 404

    def test_address_of_another_user(self):
        self.fill_cart()
        foreign = create_address(create_user())

        response = self.client.post(
            reverse("orders:order-list"), {"address_id": str(foreign.id)}, format="json"
        )

        assert response.status_code == 404

    def test_requires_auth(self):
        response = APIClient().get(reverse("orders:order-list"))

        assert response.status_code == 401


@pytest.mark.django_db
class TestOrderHistory:
    def setup_method(self):
        self.client = APIClient()
        self.user = create_user()
        self.client.force_authenticate(user=self.user)
        self.product = create_product(stock=10)

    def test_lists_own_orders_only(self):
        mine = create_order(self.user, [(self.product, 1)])
        create_order(create_user(), [(self.product, 1)])

        response = self.client.get(reverse("orders:order-list"))

        assert [order["id"] for order in response.data["orders"]] == [str(mine.id)]

    def test_detail_of_another_users_order(self):
        other = create_order(create_user(), [(self.product, 1)])

        response = self.client.get(reverse("orders:order-detail", args=[other.id]))

        assert response.status_code == 404

    def test_cancel_restores_stock(self):
        order = create_order(self.user, [(self.product, 3)])

        response = self.client.delete(reverse("orders:order-detail", args=[order.id]))

        assert response.status_code == 200
        assert response.data["order"]["status"] == "CANCELLED"
        assert response.data["order"]["cancelled_at"] is not None
        self.product.refresh_from_db()
        assert self.product.stock == 13

    def test_cannot_cancel_shipped_order(self):
        order = create_order(self.user, [(self.product, 1)], status=Order.STATUS_SHIPPED)

        response = self.client.delete(reverse("orders:order-detail", args=[order.id]))

        assert response.status_code == 400
        assert response.data["error"]["code"] == "ORDER_NOT_CANCELLABLE"

    def test_unknown_order(self):
        response = self.client.get(reverse("orders:order-detail", args=[uuid.uuid4()]))

        assert response.status_code == 404
