# apps/accounts/tests/test_auth.py
"""Tests for registration, login, profile and logout"""
import pytest
from django.contrib.auth.models import User
from django.core import mail
from django.urls import reverse
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from apps.core.testing import create_user, token_for
from apps.notifications.models import EmailLog


@pytest.mark.django_db
class TestRegister:
    def setup_method(self):
        self.client = APIClient()
        self.url = reverse("accounts:register")

    def test_register_creates_user_profile_and_token(self):
        response = self.client.post(
            self.url,
            {"email": "Hanako@Example.com", "password": "secret123", "name": "Hanako"},
            format="json",
        )

        assert response.status_code == 201
        assert response.data["user"]["email"] == "hanako@example.com"
        assert response.data["user"]["name"] == "Hanako"
        assert response.data["user"]["role"] == "CUSTOMER"

        user = User.objects.get(email="hanako@example.com")
        assert user.check_password("secret123")
        assert Token.objects.get(user=user).key == response.data["token"]

    def test_register_sends_welcome_email_after_commit(self, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            response = self.client.post(
                self.url,
                {"email": "new@example.com", "password": "secret123", "name": "New"},
                format="json",
            )

        assert response.status_code == 201
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ["new@example.com"]
        assert EmailLog.objects.filter(email_type="welcome", status="SENT").count() == 1

    def test_register_duplicate_email(self):
        create_user(email="taken@example.com")

        response = self.client.post(
            self.url, {"email": "TAKEN@example.com", "password": "secret123"}, format="json"
        )

        assert response.status_code == 409
        assert response.data["error"]["code"] == "ALREADY_EXISTS"

    def test_register_short_password(self):
        response = self.client.post(
            self.url, {"email": "a@example.com", "password": "123"}, format="json"
        )

        assert response.status_code == 400
        assert "password" in response.data["error"]["details"]

    def test_register_invalid_email(self):
        response = self.client.post(
            self.url, {"email": "not-an-email", "password": "secret123"}, format="json"
        )

        assert response.status_code == 400
        assert "email" in response.data["error"]["details"]


@pytest.mark.django_db
class TestLogin:
    def setup_method(self):
        self.client = APIClient()
        self.url = reverse("accounts:login")
        self.user = create_user(email="shopper@example.com", password="secret123")

    def test_login_returns_token(self):
        response = self.client.post(
            self.url, {"email": "shopper@example.com", "password": "secret123"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["token"] == Token.objects.get(user=self.user).key
        self.user.refresh_from_db()
        assert self.user.last_login is not None

    def test_login_wrong_password(self):
        response = self.client.post(
            self.url, {"email": "shopper@example.com", "password": "wrong"}, format="json"
        )

        assert response.status_code == 401
        assert response.data["error"]["code"] == "INVALID_CREDENTIALS"

    def test_login_unknown_email_same_error(self):
        response = self.client.post(
            self.url, {"email": "nobody@example.com", "password": "secret123"}, format="json"
        )

        assert response.status_code == 401
        assert response.data["error"]["message"] == "Invalid email or password"

    def test_login_inactive_account(self):
        self.user.is_active = False
        self.user.save()

        response = self.client.post(
            self.url, {"email": "shopper@example.com", "password": "secret123"}, format="json"
        )

        assert response.status_code == 401


@pytest.mark.django_db
class TestProfile:
    def setup_method(self):
        self.client = APIClient()
        self.user = create_user(email="me@example.com", name="Me")
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token_for(self.user)}")

    def test_me_requires_auth(self):
        response = APIClient().get(reverse("accounts:me"))

        assert response.status_code == 401
        assert response.data["error"]["code"] == "UNAUTHORIZED"

    def test_get_me(self):
        response = self.client.get(reverse("accounts:me"))

        assert response.status_code == 200
        assert response.data["user"]["email"] == "me@example.com"
        assert response.data["user"]["name"] == "Me"

    def test_update_profile(self):
        response = self.client.put(
            reverse("accounts:me"),
            {"email": "renamed@example.com", "name": "Renamed", "avatar": "https://img.example.com/a.png"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["user"]["email"] == "renamed@example.com"
        assert response.data["user"]["avatar"] == "https://img.example.com/a.png"
        self.user.refresh_from_db()
        assert self.user.username == "renamed@example.com"

    def test_update_profile_email_taken(self):
        create_user(email="other@example.com")

        response = self.client.put(
            reverse("accounts:me"), {"email": "other@example.com"}, format="json"
        )

        assert response.status_code == 409

    def test_logout_revokes_token(self):
        response = self.client.post(reverse("accounts:logout"))

        assert response.status_code == 204
        assert not Token.objects.filter(user=self.user).exists()
