# backend/apps/accounts/views.py
"""
Account API views: auth endpoints and the address book
"""
import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from ..core.throttling import AuthEndpointThrottle
from . import services
from .serializers import (
    AddressSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


@extend_schema(
    tags=["Auth"],
    summary="Register",
    description="Create a customer account. Returns the user and an API token.",
    request=RegisterSerializer,
    responses={201: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 409: OpenApiTypes.OBJECT},
)
@api_view(["POST"])
@permission_classes([AllowAny])
@throttle_classes([AuthEndpointThrottle])
def register(request):
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user, token = services.register_user(**serializer.validated_data)

    return Response(
        {
            "message": "Registration complete",
            "user": UserSerializer(user).data,
            "token": token,
        },
        status=status.HTTP_201_CREATED,
    )


@extend_schema(
    tags=["Auth"],
    summary="Log in",
    request=LoginSerializer,
    responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 401: OpenApiTypes.OBJECT},
)
@api_view(["POST"])
@permission_classes([AllowAny])
@throttle_classes([AuthEndpointThrottle])
def login(request):
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user, token = services.authenticate_user(**serializer.validated_data)

    return Response({"user": UserSerializer(user).data, "token": token})


@extend_schema(
    tags=["Auth"],
    summary="Current user",
    description="GET returns the signed-in user. PUT updates email, name and avatar.",
    request=ProfileUpdateSerializer,
    responses={200: OpenApiTypes.OBJECT, 401: OpenApiTypes.OBJECT, 409: OpenApiTypes.OBJECT},
)
@api_view(["GET", "PUT"])
@permission_classes([IsAuthenticated])
def me(request):
    if request.method == "GET":
        return Response({"user": UserSerializer(request.user).data})

    serializer = ProfileUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = services.update_profile(request.user, **serializer.validated_data)

    return Response({"message": "Profile updated", "user": UserSerializer(user).data})


@extend_schema(
    tags=["Auth"],
    summary="Log out",
    description="Revoke the caller's API token.",
    request=None,
    responses={204: None},
)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
def logout(request):
    services.logout_user(request.user)
    return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    tags=["Addresses"],
    summary="List or add addresses",
    request=AddressSerializer,
    responses={200: AddressSerializer(many=True), 201: AddressSerializer},
)
@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def address_list(request):
    if request.method == "GET":
        addresses = services.list_addresses(request.user)
        return Response({"addresses": AddressSerializer(addresses, many=True).data})

    serializer = AddressSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    address = services.create_address(request.user, serializer.validated_data)

    return Response(
        {"address": AddressSerializer(address).data, "message": "Address added"},
        status=status.HTTP_201_CREATED,
    )


@extend_schema(
    tags=["Addresses"],
    summary="Update or delete an address",
    request=AddressSerializer,
    responses={200: AddressSerializer, 204: None, 404: OpenApiTypes.OBJECT},
)
@api_view(["PUT", "PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def address_detail(request, address_id):
    if request.method == "DELETE":
        services.delete_address(request.user, address_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    address = services.get_address(request.user, address_id)
    serializer = AddressSerializer(address, data=request.data, partial=request.method == "PATCH")
    serializer.is_valid(raise_exception=True)
    address = services.update_address(request.user, address_id, serializer.validated_data)

    return Response({"address": AddressSerializer(address).data, "message": "Address updated"})
