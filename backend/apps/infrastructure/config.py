# apps/infrastructure/config.py

"""
Configuration Management

Typed access to the store settings plus environment helpers.
"""

import os
from decimal import Decimal
from typing import Any, Dict

from django.conf import settings


def get_environment() -> str:
    """
    Get current environment

    Returns:
        Environment name: 'test', 'development', 'staging', or 'production'
    """
    return getattr(settings, "ENVIRONMENT", None) or os.getenv("ENVIRONMENT", "development")


def get_store_config() -> Dict[str, Any]:
    """
    Get store configuration for the current environment

    Money values are returned as Decimals so totals never pick up
    float rounding.

    Returns:
        Configuration dictionary
    """
    return {
        "environment": get_environment(),
        "name": getattr(settings, "STORE_NAME", "EC Store"),
        "currency": getattr(settings, "STORE_CURRENCY", "JPY"),
        "tax_rate": Decimal(str(getattr(settings, "STORE_TAX_RATE", "0.10"))),
        "free_shipping_threshold": Decimal(
            str(getattr(settings, "STORE_FREE_SHIPPING_THRESHOLD", "10000"))
        ),
        "shipping_cost": Decimal(str(getattr(settings, "STORE_SHIPPING_COST", "500"))),
        "low_stock_threshold": int(getattr(settings, "LOW_STOCK_THRESHOLD", 10)),
        "admin_emails": list(getattr(settings, "ADMIN_EMAILS", [])),
        "cache_ttl": int(getattr(settings, "STORE_CACHE_TTL", 300)),
        "storefront_url": getattr(settings, "STOREFRONT_URL", "http://localhost:3000"),
    }


# ============================================================
# CONFIGURATION HELPERS
# ============================================================


def get_low_stock_threshold() -> int:
    """Stock level at or below which a product raises an alert"""
    return get_store_config()["low_stock_threshold"]


def get_admin_emails() -> list:
    """Recipients of inventory alerts"""
    return get_store_config()["admin_emails"]


def is_production() -> bool:
    """Check if running in production environment"""
    return get_environment() == "production"
