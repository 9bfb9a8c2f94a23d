# apps/core/tests/test_rate_limiting.py

import pytest
from django.core.cache import cache
from django.core.management import call_command
from django.test import Client, override_settings

from apps.core.testing import create_user
from apps.core.throttling import (
    AuthEndpointThrottle,
    CheckoutEndpointThrottle,
    ConfigurableAnonRateThrottle,
    ConfigurableUserRateThrottle,
)
from apps.infrastructure.rate_limit import (
    RATE_LIMIT_CONFIGS,
    format_retry_after,
    get_rate_limit_config,
    parse_rate,
)


@pytest.mark.django_db
class TestRateLimiting:
    """Test rate limiting functionality"""

    def setup_method(self):
        """Setup test client"""
        self.client = Client()
        cache.clear()

    def test_rate_limit_headers_present(self):
        """Test that rate limit headers are added to responses"""
        response = self.client.get("/api/")

        # Django test client normalizes headers - use get() method
        assert response.get("X-RateLimit-Limit") is not None
        assert response.get("X-RateLimit-Remaining") is not None
        assert response.get("X-RateLimit-Reset") is not None

        limit = int(response.get("X-RateLimit-Limit"))
        remaining = int(response.get("X-RateLimit-Remaining"))

        assert limit > 0
        assert remaining <= limit

    def test_rate_limit_decrements(self):
        """Test that remaining count decreases with requests"""
        response1 = self.client.get("/api/")
        remaining1 = int(response1.get("X-RateLimit-Remaining"))

        response2 = self.client.get("/api/")
        remaining2 = int(response2.get("X-RateLimit-Remaining"))

        assert remaining2 == remaining1 - 1

    @override_settings(ENVIRONMENT="production")
    def test_rate_limit_exceeded_returns_429(self):
        """Test that exceeding rate limit returns 429 with the error envelope"""
        for i in range(100):
            response = self.client.get("/api/")
            assert response.status_code == 200

        response = self.client.get("/api/")
        assert response.status_code == 429
        assert int(response.get("Retry-After")) == 60

        data = response.json()
        assert data["success"] is False
        assert data["error"]["code"] == "RATE_LIMITED"

    def test_different_ips_have_separate_limits(self):
        """Test that different IPs are tracked separately"""
        response1 = self.client.get("/api/", HTTP_X_FORWARDED_FOR="192.168.1.1")
        remaining1 = int(response1.get("X-RateLimit-Remaining"))

        response2 = self.client.get("/api/", HTTP_X_FORWARDED_FOR="192.168.1.2")
        remaining2 = int(response2.get("X-RateLimit-Remaining"))

        assert remaining1 == remaining2

    def test_test_environment_is_permissive(self):
        """The test table allows far more than a normal burst"""
        for i in range(150):
            response = self.client.get("/api/")
            assert response.status_code == 200

    def test_authenticated_users_higher_limit(self):
        """Test that authenticated users get higher limits"""
        user = create_user()

        response_anon = self.client.get("/api/")
        limit_anon = int(response_anon.get("X-RateLimit-Limit"))

        self.client.force_login(user)
        response_auth = self.client.get("/api/")
        limit_auth = int(response_auth.get("X-RateLimit-Limit"))

        assert limit_auth > limit_anon

    def test_health_endpoint_is_not_counted(self):
        response = self.client.get("/api/health/db")

        assert response.status_code == 200
        assert response.get("X-RateLimit-Limit") is None

    @override_settings(ENVIRONMENT="production")
    def test_clear_store_cache_resets_identifier(self):
        for i in range(100):
            self.client.get("/api/", REMOTE_ADDR="10.0.0.5")
        assert self.client.get("/api/", REMOTE_ADDR="10.0.0.5").status_code == 429

        call_command("clear_store_cache", identifier="ip:10.0.0.5")

        assert self.client.get("/api/", REMOTE_ADDR="10.0.0.5").status_code == 200


class TestRateLimitConfig:
    """Rate tables and parsing helpers"""

    def test_production_has_endpoint_rates(self):
        config = get_rate_limit_config("production")

        assert config["checkout_rate"] == "30/min"
        assert config["auth_rate"] == "20/min"

    def test_unknown_environment_falls_back_to_development(self):
        assert get_rate_limit_config("qa") == get_rate_limit_config("development")

    def test_parse_rate(self):
        assert parse_rate("20/hour") == (20, "hour")

    def test_parse_rate_fallback(self):
        assert parse_rate("garbage") == (100, "min")
        assert parse_rate(None) == (100, "min")

    def test_format_retry_after(self):
        assert format_retry_after("10/min") == 60
        assert format_retry_after("10/hour") == 3600
        assert format_retry_after("10/fortnight") == 60


class TestThrottleRates:
    """DRF throttles read their rates from the environment table"""

    def test_test_environment_rates(self):
        assert ConfigurableAnonRateThrottle().get_rate() == "1000/min"
        assert ConfigurableUserRateThrottle().get_rate() == "10000/hour"
        assert CheckoutEndpointThrottle().get_rate() == "1000/min"
        assert AuthEndpointThrottle().get_rate() == "1000/min"

    @override_settings(ENVIRONMENT="production")
    def test_production_rates(self):
        assert ConfigurableAnonRateThrottle().get_rate() == "100/min"
        assert CheckoutEndpointThrottle().get_rate() == "30/min"
        assert AuthEndpointThrottle().get_rate() == "20/min"

    @pytest.mark.parametrize("environment", sorted(RATE_LIMIT_CONFIGS))
    def test_every_environment_lists_each_throttle_rate(self, environment):
        config = RATE_LIMIT_CONFIGS[environment]

        assert set(config) == {"enabled", "anon_rate", "user_rate", "checkout_rate", "auth_rate"}

    @override_settings(ENVIRONMENT="development")
    def test_development_rates(self):
        assert CheckoutEndpointThrottle().get_rate() == "30/min"
        assert AuthEndpointThrottle().get_rate() == "20/min"
