# backend/apps/core/tests/test_health_check.py
"""
Tests for the core endpoints: health check, API root and CSRF token
"""
import logging
from unittest.mock import patch

import pytest
from django.db import OperationalError
from django.test import Client
from django.urls import reverse


@pytest.mark.django_db
class TestDatabaseHealthCheck:
    def setup_method(self):
        self.client = Client()
        self.url = reverse("core:database_health")

    def test_healthy(self):
        response = self.client.get(self.url)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert isinstance(data["latency_ms"], (int, float))
        assert data["latency_ms"] >= 0
        assert data["database"]

    def test_database_failure_returns_503(self):
        with patch("apps.core.views._ping_database", side_effect=OperationalError("connection refused")):
            response = self.client.get(self.url)

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert "connection refused" in data["error"]

    def test_slow_database_logs_warning(self, caplog):
        with patch("apps.core.views.perf_counter", side_effect=[10.0, 10.25]):
            with caplog.at_level(logging.WARNING, logger="apps.core.views"):
                response = self.client.get(self.url)

        assert response.json()["latency_ms"] == 250.0
        assert any("latency is high" in record.message for record in caplog.records)

    def test_fast_database_logs_nothing(self, caplog):
        with patch("apps.core.views.perf_counter", side_effect=[10.0, 10.01]):
            with caplog.at_level(logging.WARNING, logger="apps.core.views"):
                self.client.get(self.url)

        assert not [record for record in caplog.records if record.name == "apps.core.views"]

    def test_never_cached(self):
        cache_control = self.client.get(self.url).get("Cache-Control", "").lower()

        assert "no-cache" in cache_control or "no-store" in cache_control or "max-age=0" in cache_control

    @pytest.mark.parametrize("method", ["post", "put", "delete"])
    def test_only_get_is_allowed(self, method):
        response = getattr(self.client, method)(self.url)

        assert response.status_code == 405


class TestApiRootAndCsrf:
    def test_api_root_lists_endpoint_groups(self):
        response = Client().get(reverse("core:api_root"))

        assert response.status_code == 200
        endpoints = response.json()["endpoints"]
        assert endpoints["products"] == "/api/products/"
        assert endpoints["backoffice"] == "/api/admin/"

    def test_csrf_token_sets_cookie(self):
        response = Client().get(reverse("core:csrf"))

        assert response.status_code == 200
        assert response.json()["csrfToken"]
        assert "csrftoken" in response.cookies
