# backend/apps/orders/views.py
"""
Order API views for shoppers
"""
import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..core.throttling import CheckoutEndpointThrottle
from . import services
from .serializers import OrderCreateSerializer, OrderSerializer

logger = logging.getLogger(__name__)


@extend_schema(
    tags=["Orders"],
    summary="List orders or check out",
    description="GET lists the caller's orders. POST turns the cart into an order.",
    request=OrderCreateSerializer,
    responses={
        200: OrderSerializer(many=True),
        201: OrderSerializer,
        400: OpenApiTypes.OBJECT,
        404: OpenApiTypes.OBJECT,
    },
)
@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
@throttle_classes([CheckoutEndpointThrottle])
def order_list(request):
    if request.method == "GET":
        orders = services.get_user_orders(request.user)
        return Response({"orders": OrderSerializer(orders, many=True).data})

    serializer = OrderCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    order = services.create_order(request.user, **serializer.validated_data)
    order = services.get_order(request.user, order.id)

    return Response(
        {"order": OrderSerializer(order).data, "message": "Order placed"},
        status=status.HTTP_201_CREATED,
    )


@extend_schema(
    tags=["Orders"],
    summary="Get or cancel an order",
    description="DELETE cancels a PENDING or CONFIRMED order and restores stock.",
    responses={200: OrderSerializer, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
)
@api_view(["GET", "DELETE"])
@permission_classes([IsAuthenticated])
@throttle_classes([CheckoutEndpointThrottle])
def order_detail(request, order_id):
    if request.method == "DELETE":
        services.cancel_order(request.user, order_id)
        order = services.get_order(request.user, order_id)
        return Response({"order": OrderSerializer(order).data, "message": "Order cancelled"})

    order = services.get_order(request.user, order_id)
    return Response({"order": OrderSerializer(order).data})
