# config/settings/test.py
"""
Test environment settings.

This file is used exclusively for running tests.
"""

from .base import *
from .databases import get_database_config

# Force test environment
ENVIRONMENT = "test"

# Override with test-specific environment variables
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Load .env.test explicitly
from dotenv import load_dotenv

env_test_path = BASE_DIR / ".env.test"
if env_test_path.exists():
    load_dotenv(env_test_path, override=False)

# Test database configuration (in-memory SQLite)
DATABASES = {"default": get_database_config("test")}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "storefront-test",
    }
}

# Keep outgoing mail in django.core.mail.outbox
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# Deterministic store settings
STORE_TAX_RATE = "0.10"
STORE_FREE_SHIPPING_THRESHOLD = "10000"
STORE_SHIPPING_COST = "500"
LOW_STOCK_THRESHOLD = 10
ADMIN_EMAILS = ["admin@example.com"]

# Speed up password hashing in tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]
STORE_NAME = "EC Store"
STORE_CURRENCY = "JPY"
DEFAULT_FROM_EMAIL = "noreply@example.com"
STOREFRONT_URL = "http://testserver"
