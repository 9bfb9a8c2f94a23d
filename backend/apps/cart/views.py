# backend/apps/cart/views.py
"""
Cart API views
"""
import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from . import services
from .serializers import CartAddSerializer, CartItemSerializer, CartUpdateSerializer

logger = logging.getLogger(__name__)


def _cart_response(user, status_code=status.HTTP_200_OK):
    summary = services.get_cart_summary(user)
    return Response(
        {
            "items": CartItemSerializer(summary["items"], many=True).data,
            "item_count": summary["item_count"],
            "subtotal": summary["subtotal"],
        },
        status=status_code,
    )


@extend_schema(
    tags=["Cart"],
    summary="Get, add to or clear the cart",
    request=CartAddSerializer,
    responses={200: OpenApiTypes.OBJECT, 201: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
)
@api_view(["GET", "POST", "DELETE"])
@permission_classes([IsAuthenticated])
def cart(request):
    if request.method == "POST":
        serializer = CartAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.add_to_cart(request.user, **serializer.validated_data)
        return _cart_response(request.user, status.HTTP_201_CREATED)

    if request.method == "DELETE":
        services.clear_cart(request.user)

    return _cart_response(request.user)


@extend_schema(
    tags=["Cart"],
    summary="Change or remove a cart line",
    request=CartUpdateSerializer,
    responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
)
@api_view(["PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def cart_item(request, product_id):
    if request.method == "DELETE":
        services.remove_from_cart(request.user, product_id)
        return _cart_response(request.user)

    serializer = CartUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.update_cart_item_quantity(request.user, product_id, serializer.validated_data["quantity"])
    return _cart_response(request.user)


@extend_schema(
    tags=["Cart"],
    summary="Cart badge count",
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
def cart_count(request):
    return Response({"count": services.get_cart_item_count(request.user)})
