# backend/apps/inventory/services.py
"""
Inventory services

Stock adjustments with a movement ledger, low-stock alerts and stats.
All stock writes lock the product row first.
"""
import logging
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import Q, Sum

from apps.catalog.models import Product
from apps.core.exceptions import InvalidInputError, NotFoundError, ShopError
from apps.infrastructure.config import get_admin_emails, get_low_stock_threshold

from .models import StockMovement

logger = logging.getLogger(__name__)

ALERT_LOW_STOCK = "LOW_STOCK"
ALERT_OUT_OF_STOCK = "OUT_OF_STOCK"


def record_movement(
    product: Product,
    quantity: int,
    movement_type: str,
    reason: str,
    reference: str = "",
    user=None,
) -> StockMovement:
    """
    Apply a signed quantity to a product that is already row-locked and
    write the ledger entry
    """
    stock_before = product.stock
    stock_after = stock_before + quantity
    if stock_after < 0:
        raise InvalidInputError(
            "Stock cannot go below zero",
            field="adjustment",
            details={"product_id": str(product.id), "stock": stock_before, "adjustment": quantity},
        )

    product.stock = stock_after
    product.save(update_fields=["stock", "updated_at"])

    movement = StockMovement.objects.create(
        product=product,
        quantity=quantity,
        movement_type=movement_type,
        reason=reason,
        reference=reference or "",
        stock_before=stock_before,
        stock_after=stock_after,
        created_by=user if user is not None and user.is_authenticated else None,
    )

    logger.info(
        f"Stock updated for {product.sku}: {stock_before} -> {stock_after} "
        f"({'+' if quantity >= 0 else ''}{quantity}, {movement_type}, {reason})"
    )
    return movement


def update_inventory(
    product_id,
    adjustment: int,
    reason: str,
    reference: str = "",
    user=None,
) -> Dict[str, Any]:
    """
    Adjust stock by a signed amount

    Raises:
        NotFoundError: unknown product
        InvalidInputError: resulting stock would be negative
    """
    with transaction.atomic():
        product = Product.objects.select_for_update().filter(id=product_id).first()
        if product is None:
            raise NotFoundError("Product", product_id)

        if adjustment > 0:
            movement_type = StockMovement.TYPE_IN
        elif adjustment < 0:
            movement_type = StockMovement.TYPE_OUT
        else:
            movement_type = StockMovement.TYPE_ADJUSTMENT

        movement = record_movement(product, adjustment, movement_type, reason, reference, user)

    return {
        "success": True,
        "product_id": str(product.id),
        "new_stock": movement.stock_after,
        "movement_id": str(movement.id),
    }


def bulk_update_inventory(updates: List[Dict[str, Any]], user=None) -> Dict[str, Any]:
    """
    Apply each update on its own; one failure does not roll back the others

    Returns:
        {"success", "results", "error"?}
    """
    results = []
    for update in updates:
        product_id = update.get("product_id")
        try:
            results.append(
                update_inventory(
                    product_id,
                    int(update.get("adjustment", 0)),
                    update.get("reason") or "Bulk update",
                    update.get("reference", ""),
                    user,
                )
            )
        except ShopError as e:
            logger.warning(f"Bulk inventory update failed for {product_id}: {e.user_message}")
            results.append({"success": False, "product_id": str(product_id), "error": e.user_message})
        except (TypeError, ValueError):
            results.append({"success": False, "product_id": str(product_id), "error": "Invalid adjustment"})

    failed = [result for result in results if not result["success"]]
    response = {"success": not failed, "results": results}
    if failed:
        response["error"] = f"{len(failed)} update(s) failed"
    return response


def get_inventory_alerts() -> List[Dict[str, Any]]:
    """ACTIVE products at or below the low-stock threshold, lowest stock first"""
    threshold = get_low_stock_threshold()
    products = (
        Product.objects.filter(status=Product.STATUS_ACTIVE, stock__lte=threshold)
        .select_related("category")
        .order_by("stock", "name")
    )

    return [_alert_for(product, threshold) for product in products]


def _alert_for(product: Product, threshold: int) -> Dict[str, Any]:
    return {
        "id": f"alert_{product.id}",
        "product_id": str(product.id),
        "product": {
            "id": str(product.id),
            "name": product.name,
            "sku": product.sku,
            "stock": product.stock,
            "category": {"name": product.category.name},
        },
        "alert_type": ALERT_OUT_OF_STOCK if product.stock == 0 else ALERT_LOW_STOCK,
        "threshold": threshold,
        "current_stock": product.stock,
    }


def _email_alert(recipients: List[str], alert: Dict[str, Any]):
    from apps.notifications.services import email_service

    product = alert["product"]
    return email_service.send_inventory_alert_email(
        recipients,
        {
            "product_name": product["name"],
            "product_sku": product["sku"],
            "current_stock": alert["current_stock"],
            "threshold": alert["threshold"],
            "category_name": product["category"]["name"],
        },
    )


def get_inventory_stats() -> Dict[str, int]:
    threshold = get_low_stock_threshold()
    active = Product.objects.filter(status=Product.STATUS_ACTIVE)

    totals = active.aggregate(
        total_stock=Sum("stock"),
    )
    low_stock = active.filter(Q(stock__gt=0) & Q(stock__lte=threshold)).count()
    out_of_stock = active.filter(stock=0).count()

    return {
        "total_products": active.count(),
        "low_stock_count": low_stock,
        "out_of_stock_count": out_of_stock,
        "total_stock_items": totals["total_stock"] or 0,
        "alert_count": low_stock + out_of_stock,
    }


def get_out_of_stock_products():
    return (
        Product.objects.filter(status=Product.STATUS_ACTIVE, stock=0)
        .select_related("category")
        .order_by("-updated_at")
    )


def get_stock_movements(product_id, limit: int = 50):
    if not Product.objects.filter(id=product_id).exists():
        raise NotFoundError("Product", product_id)
    return StockMovement.objects.filter(product_id=product_id).select_related("product")[:limit]


def send_inventory_alerts(admin_emails: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Email one alert per low-stock product

    Returns:
        {"success", "sent_count", "errors"}
    """
    recipients = admin_emails or get_admin_emails()
    errors = []
    sent_count = 0

    for alert in get_inventory_alerts():
        result = _email_alert(recipients, alert)
        if result.success:
            sent_count += 1
        else:
            errors.append(f"Failed to send alert for {alert['product']['name']}: {result.error}")

    if errors:
        logger.warning(f"Inventory alerts: {sent_count} sent, {len(errors)} failed")
    else:
        logger.info(f"Inventory alerts: {sent_count} sent")

    return {"success": not errors, "sent_count": sent_count, "errors": errors}


def check_low_stock(product_ids) -> int:
    """
    Alert admins about the given products that are now at or below the threshold

    Returns:
        Number of alert emails sent
    """
    threshold = get_low_stock_threshold()
    products = Product.objects.filter(
        id__in=list(product_ids), status=Product.STATUS_ACTIVE, stock__lte=threshold
    ).select_related("category")

    recipients = get_admin_emails()
    return sum(1 for product in products if _email_alert(recipients, _alert_for(product, threshold)).success)
