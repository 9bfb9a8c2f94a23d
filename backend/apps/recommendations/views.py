# backend/apps/recommendations/views.py
"""
View tracking and recommendation endpoints
"""
import logging
import uuid

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..catalog.serializers import ProductSerializer
from ..core.exceptions import InvalidInputError
from ..core.utils import parse_int
from . import services
from .serializers import ProductViewSerializer

logger = logging.getLogger(__name__)


def _session_id(request):
    """Anonymous viewer id from the X-Session-ID header, body or query string"""
    return (
        request.headers.get("X-Session-ID")
        or request.data.get("session_id")
        or request.query_params.get("session_id")
        or None
    )


def _parse_ids(raw):
    ids = []
    for value in (raw or "").split(","):
        value = value.strip()
        if not value:
            continue
        try:
            ids.append(uuid.UUID(value))
        except ValueError:
            raise InvalidInputError(f"Invalid product id: {value}", field="exclude")
    return ids


@extend_schema(
    tags=["Recommendations"],
    summary="Track a product view",
    request=ProductViewSerializer,
    parameters=[
        OpenApiParameter(
            name="X-Session-ID",
            type=OpenApiTypes.STR,
            location=OpenApiParameter.HEADER,
            description="Anonymous session identifier",
            required=False,
        ),
    ],
    responses={201: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
)
@api_view(["POST"])
@permission_classes([AllowAny])
def track_view(request, product_id):
    serializer = ProductViewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    view = services.track_product_view(product_id, request.user, _session_id(request))

    return Response(
        {"success": True, "view_id": str(view.id), "viewed_at": view.viewed_at},
        status=status.HTTP_201_CREATED,
    )


@extend_schema(
    tags=["Recommendations"],
    summary="Product recommendations",
    description="type=general merges co-viewed and popular products; type=recent lists recently viewed ones.",
    parameters=[
        OpenApiParameter(name="type", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                         description="general (default) or recent"),
        OpenApiParameter(name="limit", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False,
                         description="Maximum products (1-50)"),
        OpenApiParameter(name="category_id", type=OpenApiTypes.UUID, location=OpenApiParameter.QUERY,
                         required=False, description="Recommend from this category"),
        OpenApiParameter(name="exclude", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                         description="Comma separated product ids to leave out"),
    ],
    responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([AllowAny])
def recommendations(request):
    kind = request.query_params.get("type", "general")
    session_id = _session_id(request)

    if kind == "recent":
        limit = parse_int(request.query_params.get("limit"), 6, minimum=1, maximum=50)
        products = services.get_recently_viewed_products(request.user, session_id, limit)
    elif kind == "general":
        limit = parse_int(request.query_params.get("limit"), 10, minimum=1, maximum=50)
        category_ids = _parse_ids(request.query_params.get("category_id"))
        product_ids = services.get_recommendations(
            request.user,
            session_id,
            category_id=category_ids[0] if category_ids else None,
            exclude_ids=_parse_ids(request.query_params.get("exclude")),
            limit=limit,
        )
        products = services.load_products(product_ids)
    else:
        raise InvalidInputError("Invalid type parameter", field="type")

    return Response({"type": kind, "products": ProductSerializer(products, many=True).data})
