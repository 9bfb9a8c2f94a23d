# backend/apps/core/exceptions.py
"""
Custom exceptions for the storefront and the DRF exception handler
that renders them.
"""
import logging
from enum import Enum
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.http import Http404
from django.utils import timezone
from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in the error envelope"""

    # Authentication
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    # Validation
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Resources
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"

    # Business rules
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    ORDER_NOT_CANCELLABLE = "ORDER_NOT_CANCELLABLE"
    EMAIL_DELIVERY_FAILED = "EMAIL_DELIVERY_FAILED"

    # System
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class ShopError(Exception):
    """
    Base exception for storefront business errors

    Carries a code, an HTTP status and a message safe to show to shoppers.
    """

    code = ErrorCode.INTERNAL_SERVER_ERROR
    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(
        self,
        user_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        self.user_message = user_message or self.default_message
        self.details = details or {}
        self.timestamp = timezone.now()
        super().__init__(message or self.user_message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.user_message,
            "status_code": self.status_code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class NotFoundError(ShopError):
    """Raised when a requested resource does not exist"""

    code = ErrorCode.NOT_FOUND
    status_code = 404
    default_message = "Resource not found"

    def __init__(self, resource: str, identifier: Any = None, details=None):
        user_message = (
            f"{resource} ({identifier}) not found" if identifier else f"{resource} not found"
        )
        super().__init__(
            user_message,
            {"resource": resource, "id": str(identifier) if identifier else None, **(details or {})},
        )


class AlreadyExistsError(ShopError):
    """Raised on unique constraint violations visible to the caller"""

    code = ErrorCode.ALREADY_EXISTS
    status_code = 409
    default_message = "Resource already exists"


class InvalidInputError(ShopError):
    """Raised when request data fails a business validation"""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 400
    default_message = "Invalid input"

    def __init__(self, user_message=None, field: Optional[str] = None, details=None):
        super().__init__(user_message, {"field": field, **(details or {})})


class InvalidCredentialsError(ShopError):
    """Raised when login fails for any reason the caller should not learn"""

    code = ErrorCode.INVALID_CREDENTIALS
    status_code = 401
    default_message = "Invalid email or password"


class InsufficientStockError(ShopError):
    """Raised when a cart line or order asks for more units than are in stock"""

    code = ErrorCode.INSUFFICIENT_STOCK
    status_code = 400

    def __init__(self, product_id, requested: int, available: int):
        super().__init__(
            f"Insufficient stock (requested: {requested}, available: {available})",
            {"product_id": str(product_id), "requested": requested, "available": available},
        )


class OrderNotCancellableError(ShopError):
    """Raised when cancelling an order outside PENDING/CONFIRMED"""

    code = ErrorCode.ORDER_NOT_CANCELLABLE
    status_code = 400

    def __init__(self, order_id, status: str):
        super().__init__(
            f"This order cannot be cancelled (current status: {status})",
            {"order_id": str(order_id), "status": status},
        )


class BusinessRuleError(ShopError):
    """Raised when an operation would break a store rule"""

    code = ErrorCode.BUSINESS_RULE_VIOLATION
    status_code = 409
    default_message = "Operation not allowed"


class EmailDeliveryError(ShopError):
    """Raised when an outgoing email could not be handed to the mail backend"""

    code = ErrorCode.EMAIL_DELIVERY_FAILED
    status_code = 502
    default_message = "Failed to send email"


# DRF exception class -> our error code
_DRF_CODE_MAP = {
    drf_exceptions.NotAuthenticated: ErrorCode.UNAUTHORIZED,
    drf_exceptions.AuthenticationFailed: ErrorCode.UNAUTHORIZED,
    drf_exceptions.PermissionDenied: ErrorCode.FORBIDDEN,
    drf_exceptions.NotFound: ErrorCode.NOT_FOUND,
    drf_exceptions.ValidationError: ErrorCode.VALIDATION_ERROR,
    drf_exceptions.ParseError: ErrorCode.VALIDATION_ERROR,
    drf_exceptions.Throttled: ErrorCode.RATE_LIMITED,
}


def _envelope(code: str, message, details=None) -> Dict[str, Any]:
    error = {
        "code": code,
        "message": message,
        "timestamp": timezone.now().isoformat(),
    }
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}


def shop_exception_handler(exc, context):
    """
    Render every API error with the same envelope

        {"success": false, "error": {"code", "message", "details"?, "timestamp"}}

    ShopError details are only exposed when DEBUG is on, except for
    validation errors whose field messages the client needs.
    """
    if isinstance(exc, ShopError):
        request = context.get("request")
        where = f"{request.method} {request.path}" if request is not None else "view"
        logger.warning(
            f"{exc.code.value} in {where}: {exc.user_message}",
            extra={"details": exc.details},
        )
        details = exc.details if settings.DEBUG else None
        return Response(
            _envelope(exc.code.value, exc.user_message, details),
            status=exc.status_code,
        )

    if isinstance(exc, Http404):
        exc = drf_exceptions.NotFound()
    elif isinstance(exc, PermissionDenied):
        exc = drf_exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        # Unhandled: let Django's 500 machinery and logging take over
        return None

    code = ErrorCode.INTERNAL_SERVER_ERROR
    for exc_class, mapped in _DRF_CODE_MAP.items():
        if isinstance(exc, exc_class):
            code = mapped
            break

    if isinstance(exc, drf_exceptions.ValidationError):
        message = "Validation failed"
        details = response.data
    else:
        message = response.data.get("detail", str(exc)) if isinstance(response.data, dict) else str(exc)
        details = None

    response.data = _envelope(code.value, str(message), details)
    return response
