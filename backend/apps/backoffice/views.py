# backend/apps/backoffice/views.py
"""
Back-office API views (staff only)

Product, order, user and review management plus the sales dashboard.
"""
import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from ..catalog.serializers import ProductSerializer
from ..core.pagination import get_page_params
from ..core.utils import parse_bool, parse_int
from ..orders.serializers import AdminOrderSerializer, OrderSerializer
from ..orders.services import update_order_status
from . import analytics, services
from .serializers import (
    AdminReviewSerializer,
    AdminUserSerializer,
    OrderStatusSerializer,
    ProductStatusSerializer,
    ProductWriteSerializer,
    ReviewStatusSerializer,
    UserStatusSerializer,
)

logger = logging.getLogger(__name__)


def _query_param(name, description, param_type=OpenApiTypes.STR):
    return OpenApiParameter(
        name=name,
        type=param_type,
        location=OpenApiParameter.QUERY,
        description=description,
        required=False,
    )


PAGE_PARAMETERS = [
    _query_param("page", "Page number (default 1)", OpenApiTypes.INT),
    _query_param("limit", "Page size (default 20, max 100)", OpenApiTypes.INT),
]
DATE_PARAMETERS = [
    _query_param("start_date", "Inclusive start day, YYYY-MM-DD"),
    _query_param("end_date", "Inclusive end day, YYYY-MM-DD"),
]


# ============================================================
# PRODUCTS
# ============================================================


@extend_schema(
    tags=["Admin: Products"],
    summary="List or create products",
    parameters=[
        _query_param("search", "Match name, description or SKU"),
        _query_param("category_id", "Category UUID"),
        _query_param("status", "DRAFT, ACTIVE, INACTIVE or ARCHIVED"),
        _query_param("sort_by", "name, price, stock or created_at"),
        _query_param("sort_order", "asc or desc (default desc)"),
        *PAGE_PARAMETERS,
    ],
    request=ProductWriteSerializer,
    responses={200: OpenApiTypes.OBJECT, 201: OpenApiTypes.OBJECT, 409: OpenApiTypes.OBJECT},
)
@api_view(["GET", "POST"])
@permission_classes([IsAdminUser])
def product_list(request):
    if request.method == "GET":
        params = request.query_params
        page, limit = get_page_params(request)
        products, pagination = services.list_admin_products(
            search=params.get("search", "").strip(),
            category_id=params.get("category_id") or None,
            status=params.get("status") or None,
            sort_by=params.get("sort_by", "created_at"),
            sort_order=params.get("sort_order", "desc"),
            page=page,
            limit=limit,
        )
        return Response(
            {"products": ProductSerializer(products, many=True).data, "pagination": pagination}
        )

    serializer = ProductWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    product = services.create_product(serializer.validated_data, user=request.user)
    return Response(
        {"product": ProductSerializer(product).data, "message": "Product created"},
        status=status.HTTP_201_CREATED,
    )


@extend_schema(
    tags=["Admin: Products"],
    summary="Get, update or delete a product",
    request=ProductWriteSerializer,
    responses={200: OpenApiTypes.OBJECT, 204: None, 404: OpenApiTypes.OBJECT, 409: OpenApiTypes.OBJECT},
)
@api_view(["GET", "PUT", "PATCH", "DELETE"])
@permission_classes([IsAdminUser])
def product_detail(request, product_id):
    if request.method == "GET":
        product = services.get_admin_product(product_id)
        return Response({"product": ProductSerializer(product).data})

    if request.method == "DELETE":
        services.delete_product(product_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ProductWriteSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    product = services.update_product(product_id, serializer.validated_data, user=request.user)
    return Response({"product": ProductSerializer(product).data, "message": "Product updated"})


@extend_schema(
    tags=["Admin: Products"],
    summary="Change product status",
    request=ProductStatusSerializer,
    responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
)
@api_view(["PATCH"])
@permission_classes([IsAdminUser])
def product_status(request, product_id):
    serializer = ProductStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    product = services.set_product_status(product_id, serializer.validated_data["status"])
    return Response({"product": ProductSerializer(product).data})


@extend_schema(tags=["Admin: Products"], summary="Product statistics", responses={200: OpenApiTypes.OBJECT})
@api_view(["GET"])
@permission_classes([IsAdminUser])
def product_stats(request):
    return Response({"stats": services.get_product_stats()})


# ============================================================
# ORDERS
# ============================================================


@extend_schema(
    tags=["Admin: Orders"],
    summary="List orders",
    parameters=[
        _query_param("search", "Order number or customer email"),
        _query_param("status", "Order status"),
        *DATE_PARAMETERS,
        *PAGE_PARAMETERS,
    ],
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([IsAdminUser])
def order_list(request):
    params = request.query_params
    page, limit = get_page_params(request)
    orders, pagination = services.list_admin_orders(
        search=params.get("search", "").strip(),
        status=params.get("status") or None,
        start_date=params.get("start_date"),
        end_date=params.get("end_date"),
        page=page,
        limit=limit,
    )
    return Response(
        {"orders": AdminOrderSerializer(orders, many=True).data, "pagination": pagination}
    )


@extend_schema(
    tags=["Admin: Orders"],
    summary="Order detail",
    responses={200: AdminOrderSerializer, 404: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([IsAdminUser])
def order_detail(request, order_id):
    order = services.get_admin_order(order_id)
    return Response({"order": AdminOrderSerializer(order).data})


@extend_schema(
    tags=["Admin: Orders"],
    summary="Change order status",
    description="Moving an order to CANCELLED puts its stock back.",
    request=OrderStatusSerializer,
    responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
)
@api_view(["PATCH"])
@permission_classes([IsAdminUser])
def order_status(request, order_id):
    serializer = OrderStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    update_order_status(order_id, serializer.validated_data["status"], user=request.user)
    order = services.get_admin_order(order_id)
    return Response(
        {"order": AdminOrderSerializer(order).data, "message": "Order status updated"}
    )


@extend_schema(tags=["Admin: Orders"], summary="Order statistics", responses={200: OpenApiTypes.OBJECT})
@api_view(["GET"])
@permission_classes([IsAdminUser])
def order_stats(request):
    return Response({"stats": services.get_order_stats()})


# ============================================================
# USERS
# ============================================================


@extend_schema(
    tags=["Admin: Users"],
    summary="List users",
    parameters=[
        _query_param("search", "Email or display name"),
        _query_param("is_active", "true or false", OpenApiTypes.BOOL),
        *PAGE_PARAMETERS,
    ],
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([IsAdminUser])
def user_list(request):
    params = request.query_params
    page, limit = get_page_params(request)
    users, pagination = services.list_users(
        search=params.get("search", "").strip(),
        is_active=parse_bool(params.get("is_active")),
        page=page,
        limit=limit,
    )
    return Response({"users": AdminUserSerializer(users, many=True).data, "pagination": pagination})


@extend_schema(
    tags=["Admin: Users"],
    summary="User detail with recent orders",
    responses={200: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([IsAdminUser])
def user_detail(request, user_id):
    user = services.get_user_detail(user_id)
    return Response(
        {
            "user": AdminUserSerializer(user).data,
            "recent_orders": OrderSerializer(services.get_recent_orders(user), many=True).data,
        }
    )


@extend_schema(
    tags=["Admin: Users"],
    summary="Enable or disable an account",
    request=UserStatusSerializer,
    responses={200: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT, 409: OpenApiTypes.OBJECT},
)
@api_view(["PATCH"])
@permission_classes([IsAdminUser])
def user_status(request, user_id):
    serializer = UserStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = services.set_user_active(
        user_id, serializer.validated_data["is_active"], acting_user=request.user
    )
    return Response({"user": AdminUserSerializer(user).data})


@extend_schema(tags=["Admin: Users"], summary="User statistics", responses={200: OpenApiTypes.OBJECT})
@api_view(["GET"])
@permission_classes([IsAdminUser])
def user_stats(request):
    return Response({"stats": services.get_user_stats()})


# ============================================================
# REVIEWS
# ============================================================


@extend_schema(
    tags=["Admin: Reviews"],
    summary="List reviews",
    parameters=[
        _query_param("search", "Comment, title, product name or reviewer email"),
        _query_param("status", "pending, approved or reported"),
        _query_param("rating", "1-5", OpenApiTypes.INT),
        _query_param("sort_by", "created_at, rating or helpful"),
        _query_param("sort_order", "asc or desc (default desc)"),
        *DATE_PARAMETERS,
        *PAGE_PARAMETERS,
    ],
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([IsAdminUser])
def review_list(request):
    params = request.query_params
    page, limit = get_page_params(request)
    reviews, pagination = services.list_reviews(
        search=params.get("search", "").strip(),
        status=params.get("status") or None,
        rating=parse_int(params.get("rating"), 0, minimum=0, maximum=5) or None,
        start_date=params.get("start_date"),
        end_date=params.get("end_date"),
        sort_by=params.get("sort_by", "created_at"),
        sort_order=params.get("sort_order", "desc"),
        page=page,
        limit=limit,
    )
    return Response(
        {"reviews": AdminReviewSerializer(reviews, many=True).data, "pagination": pagination}
    )


@extend_schema(
    tags=["Admin: Reviews"],
    summary="Delete a review",
    responses={204: None, 404: OpenApiTypes.OBJECT},
)
@api_view(["DELETE"])
@permission_classes([IsAdminUser])
def review_detail(request, review_id):
    services.delete_review(review_id)
    return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    tags=["Admin: Reviews"],
    summary="Approve or unapprove a review",
    request=ReviewStatusSerializer,
    responses={200: AdminReviewSerializer, 404: OpenApiTypes.OBJECT},
)
@api_view(["PATCH"])
@permission_classes([IsAdminUser])
def review_status(request, review_id):
    serializer = ReviewStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    review = services.set_review_approval(review_id, serializer.validated_data["is_approved"])
    return Response({"review": AdminReviewSerializer(review).data})


@extend_schema(
    tags=["Admin: Reviews"],
    summary="Flag a review as reported",
    request=None,
    responses={200: AdminReviewSerializer, 404: OpenApiTypes.OBJECT},
)
@api_view(["POST"])
@permission_classes([IsAdminUser])
def review_report(request, review_id):
    review = services.report_review(review_id)
    return Response({"review": AdminReviewSerializer(review).data})


@extend_schema(tags=["Admin: Reviews"], summary="Review statistics", responses={200: OpenApiTypes.OBJECT})
@api_view(["GET"])
@permission_classes([IsAdminUser])
def review_stats(request):
    return Response({"stats": services.get_review_stats()})


# ============================================================
# ANALYTICS
# ============================================================


@extend_schema(
    tags=["Admin: Analytics"],
    summary="Sales dashboard",
    description=(
        "Overview with growth against the previous period, daily trend, top products, "
        "category revenue, hourly distribution and customer segments. "
        "Only delivered orders count as revenue."
    ),
    parameters=[
        _query_param("range", "7d, 30d (default), 90d or 1y"),
        *DATE_PARAMETERS,
    ],
    responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([IsAdminUser])
def sales_analytics(request):
    params = request.query_params
    data = analytics.get_analytics(
        range_key=params.get("range"),
        start_date=params.get("start_date"),
        end_date=params.get("end_date"),
    )
    return Response(data)
