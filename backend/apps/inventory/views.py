# backend/apps/inventory/views.py
"""
Back-office inventory views (staff only)
"""
import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from ..catalog.serializers import ProductSerializer
from ..core.exceptions import InvalidInputError
from ..core.utils import parse_int
from . import services
from .serializers import (
    BulkInventoryUpdateSerializer,
    InventoryAlertRequestSerializer,
    InventoryUpdateSerializer,
    StockMovementSerializer,
)

logger = logging.getLogger(__name__)


@extend_schema(
    tags=["Admin: Inventory"],
    summary="Inventory overview or stock update",
    description=(
        "GET ?type=alerts|stats|out_of_stock returns the requested view. "
        "POST {type: update|bulk_update, ...} adjusts stock."
    ),
    parameters=[
        OpenApiParameter(
            name="type",
            type=OpenApiTypes.STR,
            location=OpenApiParameter.QUERY,
            description="alerts (default), stats or out_of_stock",
            required=False,
        ),
    ],
    request=OpenApiTypes.OBJECT,
    responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
)
@api_view(["GET", "POST"])
@permission_classes([IsAdminUser])
def inventory(request):
    if request.method == "GET":
        view_type = request.query_params.get("type", "alerts")

        if view_type == "alerts":
            data = services.get_inventory_alerts()
        elif view_type == "stats":
            data = services.get_inventory_stats()
        elif view_type == "out_of_stock":
            data = ProductSerializer(services.get_out_of_stock_products(), many=True).data
        else:
            raise InvalidInputError("Invalid type parameter", field="type")

        return Response({"success": True, "data": data})

    update_type = request.data.get("type")

    if update_type == "update":
        serializer = InventoryUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = services.update_inventory(user=request.user, **serializer.validated_data)
        return Response(result)

    if update_type == "bulk_update":
        serializer = BulkInventoryUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = services.bulk_update_inventory(serializer.validated_data["updates"], user=request.user)
        return Response(result)

    raise InvalidInputError("Invalid type parameter", field="type")


@extend_schema(
    tags=["Admin: Inventory"],
    summary="Stock movement history",
    parameters=[
        OpenApiParameter(
            name="limit",
            type=OpenApiTypes.INT,
            location=OpenApiParameter.QUERY,
            description="Maximum movements to return (default 50)",
            required=False,
        ),
    ],
    responses={200: StockMovementSerializer(many=True), 404: OpenApiTypes.OBJECT},
)
@api_view(["GET"])
@permission_classes([IsAdminUser])
def stock_movements(request, product_id):
    limit = parse_int(request.query_params.get("limit"), 50, minimum=1, maximum=200)
    movements = services.get_stock_movements(product_id, limit=limit)
    return Response({"movements": StockMovementSerializer(movements, many=True).data})


@extend_schema(
    tags=["Admin: Inventory"],
    summary="Email low-stock alerts",
    request=InventoryAlertRequestSerializer,
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(["POST"])
@permission_classes([IsAdminUser])
def send_alerts(request):
    serializer = InventoryAlertRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = services.send_inventory_alerts(serializer.validated_data.get("admin_emails"))
    return Response(result)
