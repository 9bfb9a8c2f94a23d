# backend/apps/core/views.py
"""
Core views: API root, database health check and CSRF token
"""
import logging
from time import perf_counter

from django.db import connection
from django.http import JsonResponse
from django.middleware.csrf import get_token
from django.views.decorators.cache import never_cache
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)

SLOW_DATABASE_MS = 100


def _elapsed_ms(started: float) -> float:
    return round((perf_counter() - started) * 1000, 2)


def _ping_database() -> None:
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


@extend_schema(
    tags=["Health"],
    summary="Database health check",
    description="Run a trivial query and report its latency. Used by load balancers.",
    responses={
        200: OpenApiTypes.OBJECT,
        503: OpenApiTypes.OBJECT,
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
@never_cache
def database_health_check(request):
    """
    200 {"status": "healthy", "latency_ms", "database"} or
    503 {"status": "unhealthy", "error", "latency_ms"}
    """
    started = perf_counter()

    try:
        _ping_database()
    except Exception as e:
        latency_ms = _elapsed_ms(started)
        logger.error(
            f"Database health check failed: {e}",
            extra={"latency_ms": latency_ms},
            exc_info=True,
        )
        return JsonResponse(
            {"status": "unhealthy", "error": str(e), "latency_ms": latency_ms},
            status=503,
        )

    latency_ms = _elapsed_ms(started)
    if latency_ms > SLOW_DATABASE_MS:
        logger.warning(
            f"Database health check latency is high: {latency_ms}ms",
            extra={"latency_ms": latency_ms, "threshold_ms": SLOW_DATABASE_MS},
        )

    return JsonResponse(
        {
            "status": "healthy",
            "latency_ms": latency_ms,
            "database": str(connection.settings_dict.get("NAME")),
        }
    )


@extend_schema(
    tags=["Core"],
    summary="CSRF token",
    description="Issue a CSRF token for session-authenticated clients.",
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([AllowAny])
def csrf_token(request):
    """Return a CSRF token and set the csrftoken cookie"""
    return Response({"csrfToken": get_token(request)})


def api_root(request):
    """API root endpoint showing available endpoints"""
    return JsonResponse(
        {
            "message": "Storefront API",
            "version": "1.0",
            "endpoints": {
                "health": "/api/health/db",
                "auth": "/api/auth/",
                "products": "/api/products/",
                "categories": "/api/categories/",
                "search": "/api/search",
                "cart": "/api/cart/",
                "orders": "/api/orders/",
                "wishlist": "/api/wishlist/",
                "recommendations": "/api/recommendations/",
                "push_subscribe": "/api/notifications/subscribe",
                "backoffice": "/api/admin/",
                "schema": "/api/schema/",
                "admin": "/admin/",
            },
        }
    )
