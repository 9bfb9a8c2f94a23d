# apps/core/throttling.py
"""
Django REST Framework Throttle Classes

Custom throttling for different user types and endpoints.
"""
import logging

from django.conf import settings
from rest_framework.throttling import AnonRateThrottle, SimpleRateThrottle, UserRateThrottle

from apps.infrastructure.rate_limit import get_rate_limit_config

logger = logging.getLogger(__name__)


def _config():
    return get_rate_limit_config(settings.ENVIRONMENT)


class ConfigurableAnonRateThrottle(AnonRateThrottle):
    """
    Anonymous user throttling with environment-based rates

    Rate limit based on IP address.
    """

    def get_rate(self):
        return _config().get("anon_rate", "100/min")

    def allow_request(self, request, view):
        if not _config().get("enabled", True):
            return True

        allowed = super().allow_request(request, view)

        if not allowed:
            logger.warning(
                f"Rate limit exceeded for IP {self.get_ident(request)} "
                f"on {request.path}"
            )

        return allowed


class ConfigurableUserRateThrottle(UserRateThrottle):
    """
    Authenticated user throttling with environment-based rates

    Rate limit based on user ID.
    """

    def get_rate(self):
        return _config().get("user_rate", "1000/hour")

    def allow_request(self, request, view):
        if not _config().get("enabled", True):
            return True

        allowed = super().allow_request(request, view)

        if not allowed:
            user_id = request.user.id if request.user.is_authenticated else "anon"
            logger.warning(f"Rate limit exceeded for user {user_id} on {request.path}")

        return allowed


class CheckoutEndpointThrottle(SimpleRateThrottle):
    """
    Rate limiting for order placement and cancellation

    Keyed by user so one account cannot hammer stock reservations.
    """

    scope = "checkout"

    def get_rate(self):
        return _config().get("checkout_rate", "30/min")

    def get_cache_key(self, request, view):
        if request.user and request.user.is_authenticated:
            ident = request.user.pk
        else:
            ident = self.get_ident(request)
        return self.cache_format % {"scope": self.scope, "ident": ident}


class AuthEndpointThrottle(AnonRateThrottle):
    """
    Rate limiting for login and registration

    Slows down credential stuffing from a single address.
    """

    scope = "auth"

    def get_rate(self):
        return _config().get("auth_rate", "20/min")
