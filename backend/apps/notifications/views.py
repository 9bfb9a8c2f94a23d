# backend/apps/notifications/views.py
"""
Email endpoints (staff only) and browser push subscriptions
"""
import logging

from django.contrib.auth.models import User
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import serializers as drf_serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response

from ..accounts.services import get_profile
from ..core.exceptions import EmailDeliveryError, NotFoundError
from ..core.pagination import get_page_params, paginate
from ..orders.services import find_order
from .models import EmailLog
from .serializers import (
    DATA_SERIALIZERS,
    EmailLogSerializer,
    EmailSendSerializer,
    OrderEmailSerializer,
    PushSubscribeSerializer,
    PushUnsubscribeSerializer,
    UserEmailSerializer,
)
from .services import email_service, remove_push_subscription, save_push_subscription

logger = logging.getLogger(__name__)


def _result_response(result):
    if not result.success:
        raise EmailDeliveryError(details={"error": result.error})
    return Response({**result.to_dict(), "message": "Email sent successfully"})


def _send_by_type(email_type, to, data):
    if email_type == "order_confirmation":
        order = find_order(data["order_id"])
        if order is None:
            raise NotFoundError("Order", data["order_id"])
        return email_service.send_order_confirmation_email(order, to=to)
    if email_type == "inventory_alert":
        return email_service.send_inventory_alert_email(to, data)
    if email_type == "password_reset":
        return email_service.send_password_reset_email(to[0], data)
    if email_type == "welcome":
        return email_service.send_welcome_email(to[0], customer_name=data["customer_name"])
    return email_service.send_custom_email(to, data["subject"], data["message"])


@extend_schema(
    tags=["Admin: Emails"],
    summary="Send an email",
    description="Send one of the store's emails: order_confirmation, inventory_alert, password_reset, welcome or custom.",
    request=EmailSendSerializer,
    responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 502: OpenApiTypes.OBJECT},
)
@api_view(["POST"])
@permission_classes([IsAdminUser])
def send_email(request):
    serializer = EmailSendSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    email_type = serializer.validated_data["type"]

    data_serializer = DATA_SERIALIZERS[email_type](data=serializer.validated_data["data"])
    if not data_serializer.is_valid():
        raise drf_serializers.ValidationError({"data": data_serializer.errors})

    result = _send_by_type(email_type, serializer.validated_data["to"], data_serializer.validated_data)
    return _result_response(result)


@extend_schema(
    tags=["Admin: Emails"],
    summary="Verify the mail connection",
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([IsAdminUser])
def verify_connection(request):
    connected = email_service.verify_connection()
    return Response(
        {
            "connected": connected,
            "message": "Email service is reachable" if connected else "Email service connection failed",
        }
    )


@extend_schema(
    tags=["Admin: Emails"],
    summary="Email log",
    parameters=[
        OpenApiParameter(name="type", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                         description="Filter by email type"),
        OpenApiParameter(name="status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                         description="SENT or FAILED"),
    ],
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([IsAdminUser])
def email_log(request):
    logs = EmailLog.objects.all()
    if request.query_params.get("type"):
        logs = logs.filter(email_type=request.query_params["type"])
    if request.query_params.get("status"):
        logs = logs.filter(status=request.query_params["status"].upper())

    page, limit = get_page_params(request, default_limit=20, max_limit=100)
    items, pagination = paginate(logs, page, limit)
    return Response({"results": EmailLogSerializer(items, many=True).data, "pagination": pagination})


@extend_schema(
    tags=["Admin: Emails"],
    summary="Email a customer about an order",
    request=OrderEmailSerializer,
    responses={200: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT, 502: OpenApiTypes.OBJECT},
)
@api_view(["POST"])
@permission_classes([IsAdminUser])
def order_email(request, order_id):
    serializer = OrderEmailSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    order = find_order(order_id)
    if order is None:
        raise NotFoundError("Order", order_id)

    if serializer.validated_data["type"] == "shipping":
        result = email_service.send_order_shipped_email(order)
    else:
        result = email_service.send_order_confirmation_email(order)
    return _result_response(result)


@extend_schema(
    tags=["Admin: Emails"],
    summary="Email a customer",
    request=UserEmailSerializer,
    responses={200: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT, 502: OpenApiTypes.OBJECT},
)
@api_view(["POST"])
@permission_classes([IsAdminUser])
def user_email(request, user_id):
    serializer = UserEmailSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = User.objects.filter(id=user_id).first()
    if user is None:
        raise NotFoundError("User", user_id)

    if serializer.validated_data["type"] == "welcome":
        result = email_service.send_welcome_email(
            user.email, customer_name=get_profile(user).display_name, reference=str(user.id)
        )
    else:
        result = email_service.send_custom_email(
            user.email,
            serializer.validated_data["subject"],
            serializer.validated_data["message"],
            reference=str(user.id),
        )
    return _result_response(result)


@extend_schema(
    tags=["Notifications"],
    summary="Register or remove a push subscription",
    description=(
        "POST stores a browser Web Push subscription (endpoint plus p256dh/auth keys) for the "
        "current user, or for the X-Session-ID session when anonymous. Re-posting an endpoint "
        "updates it. DELETE removes the subscription for an endpoint."
    ),
    request=PushSubscribeSerializer,
    parameters=[
        OpenApiParameter(
            name="X-Session-ID",
            type=OpenApiTypes.STR,
            location=OpenApiParameter.HEADER,
            description="Anonymous session identifier",
            required=False,
        ),
    ],
    responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
)
@api_view(["POST", "DELETE"])
@permission_classes([AllowAny])
def push_subscription(request):
    if request.method == "DELETE":
        serializer = PushUnsubscribeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        removed = remove_push_subscription(serializer.validated_data["endpoint"])
        return Response(
            {"success": True, "removed": removed, "message": "Push notification subscription removed"}
        )

    serializer = PushSubscribeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    keys = serializer.validated_data["keys"]

    subscription = save_push_subscription(
        serializer.validated_data["endpoint"],
        keys["p256dh"],
        keys["auth"],
        user=request.user,
        session_id=request.headers.get("X-Session-ID"),
    )
    return Response(
        {
            "success": True,
            "session_id": subscription.session_id or None,
            "message": "Push notification subscription successful",
        }
    )
