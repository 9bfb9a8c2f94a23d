"""
Tests for database configuration
"""
import os
from unittest.mock import patch

import pytest
from django.conf import settings
from django.db import connection

from config.settings.databases import (
    get_all_environments,
    get_connection_info,
    get_database_config,
    validate_environment,
)


@pytest.mark.django_db
class TestDatabaseConfiguration:
    """Test database is configured correctly for tests"""

    def test_database_connection(self):
        """Verify test database is accessible"""
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            result = cursor.fetchone()
            assert result[0] == 1

    def test_database_is_sqlite(self):
        """Tests run against in-memory SQLite"""
        assert connection.vendor == "sqlite", f"Expected sqlite, got {connection.vendor}"

    def test_environment_is_test(self):
        """Verify ENVIRONMENT is set to 'test'"""
        assert settings.ENVIRONMENT == "test", f"Expected test, got {settings.ENVIRONMENT}"

    def test_database_isolation(self):
        """Test that database is clean for each test"""
        from django.contrib.auth.models import User

        user_count = User.objects.count()
        assert user_count == 0, f"Expected 0 users, got {user_count}"


class TestDatabaseConfigFunctions:
    """Per-environment configuration builders"""

    def test_development_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = get_database_config("development")

        assert config["ENGINE"] == "django.db.backends.postgresql"
        assert config["HOST"] == "localhost"
        assert config["NAME"] == "storefront_dev"
        assert config["OPTIONS"]["sslmode"] == "disable"

    def test_production_requires_credentials(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="Missing required environment variables"):
                get_database_config("production")

    def test_production_uses_verified_ssl(self):
        env = {
            "DB_NAME": "shop",
            "DB_USER": "shop",
            "DB_PASSWORD": "secret",
            "DB_HOST": "db.internal",
        }
        with patch.dict(os.environ, env, clear=True):
            config = get_database_config("production")

        assert config["OPTIONS"]["sslmode"] == "verify-full"
        assert config["CONN_MAX_AGE"] == 600

    def test_invalid_environment(self):
        with pytest.raises(ValueError, match="Invalid environment"):
            get_database_config("qa")

    def test_validate_environment(self):
        assert validate_environment("staging") is True
        assert validate_environment("qa") is False
        assert get_all_environments() == ["test", "development", "staging", "production"]

    def test_connection_info_masks_password(self):
        info = get_connection_info("development")

        assert info["password"] == "***"
        assert info["engine"] == "django.db.backends.postgresql"
