# apps/backoffice/tests/test_users.py
"""Tests for back-office customer management"""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.urls import reverse
from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from apps.core.testing import create_admin, create_order, create_product, create_user, token_for
from apps.orders.models import Order


@pytest.mark.django_db
class TestUserList:
    def setup_method(self):
        self.client = APIClient()
        self.admin = create_admin(email="boss@example.com")
        self.client.force_authenticate(user=self.admin)

    def test_list_with_totals(self):
        customer = create_user(email="carol@example.com")
        product = create_product(price="1000")
        create_order(customer, [(product, 2)], status=Order.STATUS_DELIVERED)
        create_order(customer, [(product, 1)])

        response = self.client.get(reverse("backoffice:user-list"), {"search": "carol"})

        assert response.status_code == 200
        row = response.data["users"][0]
        assert row["email"] == "carol@example.com"
        assert row["order_count"] == 2
        assert Decimal(row["total_spent"]) == Decimal("2700")

    def test_user_without_orders_has_zero_totals(self):
        create_user(email="dave@example.com")

        response = self.client.get(reverse("backoffice:user-list"), {"search": "dave"})

        row = response.data["users"][0]
        assert row["order_count"] == 0
        assert Decimal(row["total_spent"]) == Decimal("0")

    def test_search_by_display_name(self):
        create_user(email="x1@example.com", name="Hanako Suzuki")
        create_user(email="x2@example.com", name="Jiro")

        response = self.client.get(reverse("backoffice:user-list"), {"search": "hanako"})

        assert [u["email"] for u in response.data["users"]] == ["x1@example.com"]

    def test_filter_inactive(self):
        create_user(email="gone@example.com", is_active=False)
        create_user(email="here@example.com")

        response = self.client.get(reverse("backoffice:user-list"), {"is_active": "false"})

        assert [u["email"] for u in response.data["users"]] == ["gone@example.com"]

    def test_customer_is_forbidden(self):
        client = APIClient()
        client.force_authenticate(user=create_user())

        assert client.get(reverse("backoffice:user-list")).status_code == 403


@pytest.mark.django_db
class TestUserDetailAndStatus:
    def setup_method(self):
        self.client = APIClient()
        self.admin = create_admin()
        self.client.force_authenticate(user=self.admin)
        self.customer = create_user()

    def test_detail_with_recent_orders(self):
        product = create_product()
        for days in range(7):
            create_order(self.customer, [(product, 1)], created_at=timezone.now() - timedelta(days=days))

        response = self.client.get(reverse("backoffice:user-detail", args=[self.customer.id]))

        assert response.status_code == 200
        assert response.data["user"]["order_count"] == 7
        assert len(response.data["recent_orders"]) == 5

    def test_detail_unknown(self):
        response = self.client.get(reverse("backoffice:user-detail", args=[999999]))

        assert response.status_code == 404

    def test_deactivate_revokes_tokens(self):
        token_for(self.customer)

        response = self.client.patch(
            reverse("backoffice:user-status", args=[self.customer.id]), {"is_active": False}, format="json"
        )

        assert response.status_code == 200
        assert response.data["user"]["is_active"] is False
        assert not Token.objects.filter(user=self.customer).exists()

    def test_reactivate(self):
        User.objects.filter(id=self.customer.id).update(is_active=False)

        response = self.client.patch(
            reverse("backoffice:user-status", args=[self.customer.id]), {"is_active": True}, format="json"
        )

        self.customer.refresh_from_db()
        assert response.status_code == 200
        assert self.customer.is_active is True

    def test_admin_cannot_deactivate_self(self):
        response = self.client.patch(
            reverse("backoffice:user-status", args=[self.admin.id]), {"is_active": False}, format="json"
        )

        assert response.status_code == 409
        self.admin.refresh_from_db()
        assert self.admin.is_active is True

    def test_missing_flag(self):
        response = self.client.patch(
            reverse("backoffice:user-status", args=[self.customer.id]), {}, format="json"
        )

        assert response.status_code == 400


@pytest.mark.django_db
class TestUserStats:
    def test_stats(self):
        client = APIClient()
        admin = create_admin()
        client.force_authenticate(user=admin)
        verified = create_user()
        verified.profile.email_verified = True
        verified.profile.save()
        create_user(is_active=False)
        old = create_user()
        User.objects.filter(id=old.id).update(date_joined=timezone.now() - timedelta(days=400))
        create_order(verified, [(create_product(price="1000"), 1)], status=Order.STATUS_DELIVERED)

        response = client.get(reverse("backoffice:user-stats"))

        stats = response.data["stats"]
        assert stats["total"] == 4
        assert stats["active"] == 3
        assert stats["inactive"] == 1
        assert stats["verified"] == 1
        assert stats["unverified"] == 3
        assert stats["new_this_month"] == 3
        assert stats["total_orders"] == 1
        assert Decimal(str(stats["total_revenue"])) == Decimal("1600")
