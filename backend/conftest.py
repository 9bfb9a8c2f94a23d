# backend/conftest.py

"""
Pytest configuration and fixtures.
"""
import pytest
from django.core.cache import cache


@pytest.fixture(scope="session")
def django_db_setup(django_db_setup, django_db_blocker):
    """Verify the test database configuration."""
    from django.conf import settings

    db_config = settings.DATABASES["default"]
    assert db_config["ENGINE"] == "django.db.backends.sqlite3", (
        f"Unexpected engine: {db_config['ENGINE']}"
    )
    assert settings.ENVIRONMENT == "test"


@pytest.fixture(autouse=True)
def enable_db_access_for_all_tests(db):
    """Automatically enable database access for all tests."""
    pass


@pytest.fixture(autouse=True)
def clear_cache():
    """Rate limit counters and TTL caches must not leak between tests."""
    cache.clear()
    yield
    cache.clear()
