# backend/apps/orders/services.py
"""
Checkout and order services

create_order runs in one transaction: product rows are locked, stock is
verified for every line, then decremented with ledger entries and the
cart is emptied. Emails and low-stock alerts run after commit.
"""
import logging
import random
from decimal import ROUND_FLOOR, Decimal
from typing import Dict, Optional

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import Address
from apps.cart.models import CartItem
from apps.catalog.models import Product
from apps.core.exceptions import (
    BusinessRuleError,
    InsufficientStockError,
    InvalidInputError,
    NotFoundError,
    OrderNotCancellableError,
)
from apps.core.utils import sanitize_text
from apps.infrastructure.cache import analytics_cache
from apps.infrastructure.config import get_store_config
from apps.inventory.models import StockMovement
from apps.inventory.services import check_low_stock, record_movement

from .models import Order, OrderItem

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "EC"
ORDER_NUMBER_ATTEMPTS = 10


def generate_order_number() -> str:
    """EC + YYMMDD + 4 random digits, retried until unused"""
    date_part = timezone.localdate().strftime("%y%m%d")
    for _ in range(ORDER_NUMBER_ATTEMPTS):
        candidate = f"{ORDER_NUMBER_PREFIX}{date_part}{random.randint(0, 9999):04d}"
        if not Order.objects.filter(order_number=candidate).exists():
            return candidate
    raise BusinessRuleError("Could not allocate an order number, please retry")


def calculate_totals(subtotal: Decimal) -> Dict[str, Decimal]:
    """
    Shipping is free at or above the threshold; tax is floored to a whole
    currency unit

    Returns:
        {"subtotal", "shipping_cost", "tax_amount", "total_amount"}
    """
    config = get_store_config()
    subtotal = Decimal(subtotal)

    shipping_cost = (
        Decimal("0") if subtotal >= config["free_shipping_threshold"] else config["shipping_cost"]
    )
    tax_amount = (subtotal * config["tax_rate"]).quantize(Decimal("1"), rounding=ROUND_FLOOR)

    return {
        "subtotal": subtotal,
        "shipping_cost": shipping_cost,
        "tax_amount": tax_amount,
        "total_amount": subtotal + shipping_cost + tax_amount,
    }


def order_queryset():
    return Order.objects.select_related("user").prefetch_related(
        "items__product__images", "items__product__category"
    )


def create_order(user, address_id, notes: str = "") -> Order:
    """
    Turn the user's cart into an order

    Raises:
        InvalidInputError: empty cart
        NotFoundError: address missing or owned by someone else
        InsufficientStockError: a line asks for more than is in stock
    """
    cart_items = list(CartItem.objects.filter(user=user).order_by("created_at"))
    if not cart_items:
        raise InvalidInputError("Your cart is empty", field="cart")

    address = Address.objects.filter(id=address_id, user=user).first()
    if address is None:
        raise NotFoundError("Address", address_id)

    with transaction.atomic():
        # Lock in a stable order so concurrent checkouts cannot deadlock
        product_ids = sorted({item.product_id for item in cart_items}, key=str)
        products = {
            product.id: product
            for product in Product.objects.select_for_update().filter(id__in=product_ids)
        }

        subtotal = Decimal("0")
        for item in cart_items:
            product = products.get(item.product_id)
            if product is None or product.status != Product.STATUS_ACTIVE:
                raise NotFoundError("Product", item.product_id)
            if item.quantity > product.stock:
                raise InsufficientStockError(product.id, item.quantity, product.stock)
            subtotal += product.price * item.quantity

        totals = calculate_totals(subtotal)

        order = Order.objects.create(
            order_number=generate_order_number(),
            status=Order.STATUS_PENDING,
            user=user,
            address=address,
            shipping_address=address.as_snapshot(),
            notes=sanitize_text(notes, max_length=1000),
            **totals,
        )

        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product=products[item.product_id],
                    quantity=item.quantity,
                    price=products[item.product_id].price,
                )
                for item in cart_items
            ]
        )

        for item in cart_items:
            record_movement(
                products[item.product_id],
                -item.quantity,
                StockMovement.TYPE_OUT,
                "Order placed",
                reference=order.order_number,
                user=user,
            )

        CartItem.objects.filter(user=user).delete()

        order_id = order.id
        transaction.on_commit(lambda: _after_order_placed(order_id, product_ids))

    analytics_cache.clear()
    logger.info(
        f"Order {order.order_number} placed by user {user.id}: "
        f"{len(cart_items)} line(s), total {order.total_amount}"
    )
    return order


def _after_order_placed(order_id, product_ids) -> None:
    from apps.notifications.services import email_service

    # The order is committed; follow-up failures must not surface to the shopper
    try:
        order = order_queryset().get(id=order_id)
        result = email_service.send_order_confirmation_email(order)
        if not result.success:
            logger.warning(f"Order confirmation for {order.order_number} not sent: {result.error}")
    except Exception as e:
        logger.error(f"Order confirmation failed for {order_id}: {e}", exc_info=True)

    try:
        check_low_stock(product_ids)
    except Exception as e:
        logger.error(f"Low-stock check failed after order {order_id}: {e}", exc_info=True)


def get_user_orders(user):
    return order_queryset().filter(user=user).order_by("-created_at")


def get_order(user, order_id) -> Order:
    """
    Raises:
        NotFoundError: no such order for this user
    """
    order = order_queryset().filter(id=order_id, user=user).first()
    if order is None:
        raise NotFoundError("Order", order_id)
    return order


def _restore_stock(order: Order, reason: str, user=None) -> None:
    items = list(order.items.all())
    products = {
        product.id: product
        for product in Product.objects.select_for_update().filter(
            id__in=sorted({item.product_id for item in items}, key=str)
        )
    }
    for item in items:
        record_movement(
            products[item.product_id],
            item.quantity,
            StockMovement.TYPE_IN,
            reason,
            reference=order.order_number,
            user=user,
        )


def cancel_order(user, order_id) -> Order:
    """
    Cancel a PENDING or CONFIRMED order and put its units back in stock

    Raises:
        NotFoundError: no such order for this user
        OrderNotCancellableError: order already shipped, delivered or cancelled
    """
    with transaction.atomic():
        order = Order.objects.select_for_update().filter(id=order_id, user=user).first()
        if order is None:
            raise NotFoundError("Order", order_id)
        if not order.is_cancellable:
            raise OrderNotCancellableError(order.id, order.status)

        _restore_stock(order, "Order cancelled", user)

        order.status = Order.STATUS_CANCELLED
        order.cancelled_at = timezone.now()
        order.save(update_fields=["status", "cancelled_at", "updated_at"])

    analytics_cache.clear()
    logger.info(f"Order {order.order_number} cancelled by user {user.id}")
    return order


def update_order_status(order_id, new_status: str, user=None) -> Order:
    """
    Back-office status change

    Moving to CANCELLED restores stock, only on the first transition.
    A cancelled order stays cancelled.

    Raises:
        InvalidInputError: unknown status
        NotFoundError: unknown order
        BusinessRuleError: order is cancelled and the new status is not
    """
    valid = [choice for choice, _ in Order.STATUS_CHOICES]
    if new_status not in valid:
        raise InvalidInputError(
            f"Invalid status. Must be one of: {', '.join(valid)}", field="status"
        )

    with transaction.atomic():
        order = Order.objects.select_for_update().filter(id=order_id).first()
        if order is None:
            raise NotFoundError("Order", order_id)

        previous = order.status
        # Cancelled stock is already back on the shelf
        if previous == Order.STATUS_CANCELLED and new_status != Order.STATUS_CANCELLED:
            raise BusinessRuleError(
                f"Order {order.order_number} is cancelled and cannot move to {new_status}",
                details={"order_id": str(order.id), "status": previous},
            )
        if new_status == Order.STATUS_CANCELLED and previous != Order.STATUS_CANCELLED:
            _restore_stock(order, "Order cancelled by admin", user)
            order.cancelled_at = timezone.now()
        if new_status == Order.STATUS_DELIVERED and previous != Order.STATUS_DELIVERED:
            order.delivered_at = timezone.now()

        order.status = new_status
        order.save(update_fields=["status", "cancelled_at", "delivered_at", "updated_at"])

    analytics_cache.clear()
    logger.info(f"Order {order.order_number} status {previous} -> {new_status}")
    return order


def find_order(order_id) -> Optional[Order]:
    return order_queryset().filter(id=order_id).first()
