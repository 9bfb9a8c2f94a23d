# backend/apps/core/middleware.py
"""
Rate Limiting Middleware

Provides rate limiting at the middleware level with custom headers.
"""
import logging

from django.conf import settings
from django.core.cache import cache
from django.http import JsonResponse
from django.utils import timezone
from django.utils.deprecation import MiddlewareMixin

from apps.infrastructure.rate_limit import (
    format_retry_after,
    get_rate_limit_config,
    parse_rate,
)

logger = logging.getLogger(__name__)

SKIP_PATHS = (
    "/admin/",
    "/static/",
    "/media/",
    "/api/health/",
)


class RateLimitMiddleware(MiddlewareMixin):
    """
    Middleware for global rate limiting

    Tracks requests per IP, or per user once the session is authenticated.
    The environment's table is looked up per request so settings overrides
    apply without restarting the process.
    """

    sync_capable = True
    async_capable = False

    def process_request(self, request):
        """Check rate limits before processing request"""
        config = self._config()
        if not config.get("enabled", True) or self._should_skip_rate_limit(request):
            return None

        identifier = self._get_identifier(request)
        limit, period = self._rate_for(identifier, config)
        cache_key = self._cache_key(identifier, period)

        if cache.get(cache_key, 0) >= limit:
            return self._rate_limit_response(identifier, request, config)

        self._increment_counter(cache_key, period)
        return None

    def process_response(self, request, response):
        """Add rate limit headers to response"""
        config = self._config()
        if not config.get("enabled", True) or self._should_skip_rate_limit(request):
            return response
        if response.status_code == 429:
            return response

        identifier = self._get_identifier(request)
        limit, period = self._rate_for(identifier, config)
        current_count = cache.get(self._cache_key(identifier, period), 0)

        response["X-RateLimit-Limit"] = limit
        response["X-RateLimit-Remaining"] = max(0, limit - current_count)
        response["X-RateLimit-Reset"] = format_retry_after(f"{limit}/{period}")

        return response

    def _config(self):
        return get_rate_limit_config(getattr(settings, "ENVIRONMENT", "development"))

    def _should_skip_rate_limit(self, request):
        return request.path.startswith(SKIP_PATHS)

    def _get_identifier(self, request):
        """Get unique identifier for rate limiting"""
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            return f"user:{user.id}"

        x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
        if x_forwarded_for:
            ip = x_forwarded_for.split(",")[0].strip()
        else:
            ip = request.META.get("REMOTE_ADDR")

        return f"ip:{ip}"

    def _rate_for(self, identifier, config):
        if identifier.startswith("user:"):
            return parse_rate(config.get("user_rate", "1000/hour"))
        return parse_rate(config.get("anon_rate", "100/min"))

    def _cache_key(self, identifier, period):
        return f"rate_limit:{identifier}:{period}"

    def _increment_counter(self, cache_key, period):
        """Increment request counter, starting the window on first hit"""
        timeout = format_retry_after(f"1/{period}")
        try:
            if not cache.add(cache_key, 1, timeout=timeout):
                cache.incr(cache_key)
        except ValueError:
            # Key expired between add() and incr()
            cache.set(cache_key, 1, timeout=timeout)

    def _rate_limit_response(self, identifier, request, config):
        """Return 429 Rate Limited response"""
        limit, period = self._rate_for(identifier, config)
        retry_after = format_retry_after(f"{limit}/{period}")

        logger.warning(
            f"Rate limit exceeded: {identifier} on {request.path} "
            f"({request.method})"
        )

        response = JsonResponse(
            {
                "success": False,
                "error": {
                    "code": "RATE_LIMITED",
                    "message": f"Too many requests. Please try again in {retry_after} seconds.",
                    "retry_after": retry_after,
                    "timestamp": timezone.now().isoformat(),
                },
            },
            status=429,
        )

        response["Retry-After"] = str(retry_after)
        response["X-RateLimit-Limit"] = limit
        response["X-RateLimit-Remaining"] = 0
        response["X-RateLimit-Reset"] = retry_after

        return response
