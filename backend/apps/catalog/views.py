# backend/apps/catalog/views.py
"""
Catalog API views: products, categories, search, reviews and wishlist
"""
import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotAuthenticated
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from ..core.pagination import get_page_params
from ..core.utils import parse_bool, parse_decimal, parse_int
from . import services
from .serializers import (
    FavoriteSerializer,
    ProductSerializer,
    ReviewCreateSerializer,
    ReviewSerializer,
    WishlistAddSerializer,
)

logger = logging.getLogger(__name__)


def _query_param(name, description, type_=OpenApiTypes.STR):
    return OpenApiParameter(
        name=name, type=type_, location=OpenApiParameter.QUERY, description=description, required=False
    )


@extend_schema(
    tags=["Products"],
    summary="List products",
    description="Filtered, sorted and paginated product listing. Only ACTIVE products unless staff.",
    parameters=[
        _query_param("category", "Category slug"),
        _query_param("categories", "Comma separated category slugs"),
        _query_param("min_price", "Minimum price", OpenApiTypes.NUMBER),
        _query_param("max_price", "Maximum price", OpenApiTypes.NUMBER),
        _query_param("min_rating", "Minimum average rating", OpenApiTypes.NUMBER),
        _query_param("in_stock", "Only products with stock", OpenApiTypes.BOOL),
        _query_param("on_sale", "Only discounted products", OpenApiTypes.BOOL),
        _query_param("search", "Text search over name, description and SKU"),
        _query_param("sort_by", "name, price, created_at, rating or popularity"),
        _query_param("sort_order", "asc or desc"),
        _query_param("page", "Page number", OpenApiTypes.INT),
        _query_param("limit", "Page size (1-50)", OpenApiTypes.INT),
    ],
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([AllowAny])
def product_list(request):
    params = request.query_params
    page, limit = get_page_params(request, default_limit=20, max_limit=50)

    categories = [slug.strip() for slug in params.get("categories", "").split(",") if slug.strip()]
    filters = {
        "category": params.get("category") or None,
        "categories": categories or None,
        "min_price": parse_decimal(params.get("min_price")),
        "max_price": parse_decimal(params.get("max_price")),
        "min_rating": parse_decimal(params.get("min_rating")),
        "in_stock": parse_bool(params.get("in_stock")),
        "on_sale": parse_bool(params.get("on_sale")),
        "search": params.get("search", ""),
    }
    if request.user.is_staff and params.get("status"):
        filters["status"] = params["status"].upper()

    products, pagination = services.list_products(
        filters,
        sort_by=params.get("sort_by", "created_at"),
        sort_order=params.get("sort_order", "desc"),
        page=page,
        limit=limit,
    )

    return Response(
        {"results": ProductSerializer(products, many=True).data, "pagination": pagination}
    )


@extend_schema(
    tags=["Products"],
    summary="Get product details",
    responses={200: ProductSerializer, 404: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([AllowAny])
def product_detail(request, product_id):
    product = services.get_product(product_id, include_hidden=request.user.is_staff)
    data = ProductSerializer(product).data
    data["review_statistics"] = services.get_review_statistics(product.id)
    return Response(data)


@extend_schema(
    tags=["Products"],
    summary="List categories",
    description="All categories in name order with ACTIVE product counts.",
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([AllowAny])
def category_list(request):
    return Response({"categories": services.get_categories()})


@extend_schema(
    tags=["Products"],
    summary="Search products",
    parameters=[
        _query_param("q", "Search query"),
        _query_param("limit", "Maximum results (1-20)", OpenApiTypes.INT),
    ],
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([AllowAny])
def search(request):
    query = request.query_params.get("q", "").strip()
    limit = parse_int(request.query_params.get("limit"), 10, minimum=1, maximum=20)

    products = services.search_products(query, limit=limit)

    return Response(
        {
            "query": query,
            "results": ProductSerializer(products, many=True).data,
            "total": len(products),
        }
    )


@extend_schema(
    tags=["Reviews"],
    summary="List or create product reviews",
    description=(
        "GET returns approved reviews with rating statistics. "
        "POST creates the caller's review (one per product)."
    ),
    parameters=[
        _query_param("rating", "Only reviews with this rating", OpenApiTypes.INT),
        _query_param("sort_by", "created_at, rating or helpful"),
        _query_param("sort_order", "asc or desc"),
        _query_param("page", "Page number", OpenApiTypes.INT),
        _query_param("limit", "Page size", OpenApiTypes.INT),
    ],
    request=ReviewCreateSerializer,
    responses={200: OpenApiTypes.OBJECT, 201: ReviewSerializer, 409: OpenApiTypes.OBJECT},
)
@api_view(["GET", "POST"])
@permission_classes([AllowAny])
def product_reviews(request, product_id):
    if request.method == "GET":
        page, limit = get_page_params(request, default_limit=10, max_limit=50)
        rating = parse_int(request.query_params.get("rating"), 0, minimum=0, maximum=5)

        reviews, pagination, statistics = services.get_product_reviews(
            product_id,
            rating=rating or None,
            sort_by=request.query_params.get("sort_by", "created_at"),
            sort_order=request.query_params.get("sort_order", "desc"),
            page=page,
            limit=limit,
        )
        return Response(
            {
                "reviews": ReviewSerializer(reviews, many=True).data,
                "pagination": pagination,
                "statistics": statistics,
            }
        )

    if not request.user.is_authenticated:
        raise NotAuthenticated()

    serializer = ReviewCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    review = services.create_review(request.user, product_id, **serializer.validated_data)

    return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


@extend_schema(
    tags=["Reviews"],
    summary="Mark a review helpful",
    request=None,
    responses={200: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
)
@api_view(["POST"])
@permission_classes([AllowAny])
def review_helpful(request, review_id):
    review = services.mark_review_helpful(review_id)
    return Response({"id": str(review.id), "helpful_count": review.helpful_count})


@extend_schema(
    tags=["Wishlist"],
    summary="List or add wishlist items",
    request=WishlistAddSerializer,
    responses={200: FavoriteSerializer(many=True), 201: FavoriteSerializer},
)
@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def wishlist(request):
    if request.method == "GET":
        favorites = services.get_wishlist(request.user)
        return Response({"favorites": FavoriteSerializer(favorites, many=True).data})

    serializer = WishlistAddSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    favorite = services.add_to_wishlist(request.user, serializer.validated_data["product_id"])

    return Response(FavoriteSerializer(favorite).data, status=status.HTTP_201_CREATED)


@extend_schema(
    tags=["Wishlist"],
    summary="Check or remove a wishlist item",
    responses={200: OpenApiTypes.OBJECT, 204: None, 404: OpenApiTypes.OBJECT},
)
@api_view(["GET", "DELETE"])
@permission_classes([IsAuthenticated])
def wishlist_item(request, product_id):
    if request.method == "GET":
        return Response({"is_favorite": services.is_favorite(request.user, product_id)})

    services.remove_from_wishlist(request.user, product_id)
    return Response(status=status.HTTP_204_NO_CONTENT)
