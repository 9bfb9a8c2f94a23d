# apps/notifications/tests/test_push_subscriptions.py
"""Tests for registering and removing browser push subscriptions"""
import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from apps.core.testing import create_user
from apps.notifications.models import PushSubscription

ENDPOINT = "https://push.example.com/send/abc123"


def payload(endpoint=ENDPOINT, p256dh="BPkey", auth="authsecret"):
    return {"endpoint": endpoint, "keys": {"p256dh": p256dh, "auth": auth}}


@pytest.mark.django_db
class TestSubscribe:
    def setup_method(self):
        self.client = APIClient()
        self.url = reverse("notifications:push-subscribe")

    def test_anonymous_subscription_uses_session_header(self):
        response = self.client.post(self.url, payload(), format="json", HTTP_X_SESSION_ID="sess-1")

        assert response.status_code == 200
        assert response.data["success"] is True
        subscription = PushSubscription.objects.get()
        assert subscription.endpoint == ENDPOINT
        assert subscription.p256dh_key == "BPkey"
        assert subscription.auth_key == "authsecret"
        assert subscription.user is None
        assert subscription.session_id == "sess-1"

    def test_anonymous_without_session_gets_one(self):
        response = self.client.post(self.url, payload(), format="json")

        session_id = PushSubscription.objects.get().session_id
        assert session_id.startswith("session_")
        assert response.data["session_id"] == session_id

    def test_authenticated_subscription_belongs_to_user(self):
        user = create_user()
        self.client.force_authenticate(user=user)

        response = self.client.post(self.url, payload(), format="json", HTTP_X_SESSION_ID="sess-1")

        subscription = PushSubscription.objects.get()
        assert subscription.user == user
        assert subscription.session_id == ""
        assert response.data["session_id"] is None

    def test_same_endpoint_is_updated_not_duplicated(self):
        self.client.post(self.url, payload(), format="json", HTTP_X_SESSION_ID="sess-1")
        user = create_user()
        self.client.force_authenticate(user=user)

        self.client.post(self.url, payload(p256dh="newkey", auth="newauth"), format="json")

        subscription = PushSubscription.objects.get()
        assert subscription.p256dh_key == "newkey"
        assert subscription.auth_key == "newauth"
        assert subscription.user == user
        assert subscription.session_id == ""

    @pytest.mark.parametrize(
        "body",
        [
            {"keys": {"p256dh": "k", "auth": "a"}},
            {"endpoint": ENDPOINT},
            {"endpoint": ENDPOINT, "keys": {"p256dh": "k"}},
            {"endpoint": ENDPOINT, "keys": {"auth": "a"}},
            {"endpoint": "not-a-url", "keys": {"p256dh": "k", "auth": "a"}},
        ],
    )
    def test_invalid_subscription(self, body):
        response = self.client.post(self.url, body, format="json")

        assert response.status_code == 400
        assert response.data["error"]["code"] == "VALIDATION_ERROR"
        assert not PushSubscription.objects.exists()


@pytest.mark.django_db
class TestUnsubscribe:
    def setup_method(self):
        self.client = APIClient()
        self.url = reverse("notifications:push-subscribe")

    def test_removes_by_endpoint(self):
        self.client.post(self.url, payload(), format="json", HTTP_X_SESSION_ID="sess-1")
        self.client.post(self.url, payload(endpoint="https://push.example.com/send/other"), format="json")

        response = self.client.delete(self.url, {"endpoint": ENDPOINT}, format="json")

        assert response.status_code == 200
        assert response.data["removed"] == 1
        assert list(PushSubscription.objects.values_list("endpoint", flat=True)) == [
            "https://push.example.com/send/other"
        ]

    def test_unknown_endpoint_is_not_an_error(self):
        response = self.client.delete(self.url, {"endpoint": ENDPOINT}, format="json")

        assert response.status_code == 200
        assert response.data["removed"] == 0

    def test_endpoint_required(self):
        response = self.client.delete(self.url, {}, format="json")

        assert response.status_code == 400
