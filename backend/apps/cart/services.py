# backend/apps/cart/services.py
"""
Cart services

Quantities are checked against current stock on every write; stock is
only reserved when the order is placed.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum

from apps.catalog.models import Product
from apps.core.exceptions import InsufficientStockError, InvalidInputError, NotFoundError

from .models import CartItem

logger = logging.getLogger(__name__)


def _get_active_product(product_id) -> Product:
    product = Product.objects.filter(id=product_id).first()
    if product is None or product.status != Product.STATUS_ACTIVE:
        raise NotFoundError("Product", product_id)
    return product


def get_cart_items(user):
    """Cart lines, newest first"""
    return (
        CartItem.objects.filter(user=user)
        .select_related("product", "product__category")
        .prefetch_related("product__images")
        .order_by("-created_at")
    )


@transaction.atomic
def add_to_cart(user, product_id, quantity: int = 1) -> CartItem:
    """
    Add a product, or add to the quantity of an existing line

    Raises:
        InvalidInputError: quantity below 1
        NotFoundError: unknown or inactive product
        InsufficientStockError: combined quantity exceeds stock
    """
    if quantity < 1:
        raise InvalidInputError("Quantity must be at least 1", field="quantity")

    product = _get_active_product(product_id)
    item = CartItem.objects.select_for_update().filter(user=user, product=product).first()

    requested = quantity + (item.quantity if item else 0)
    if requested > product.stock:
        raise InsufficientStockError(product.id, requested, product.stock)

    if item:
        item.quantity = requested
        item.save(update_fields=["quantity", "updated_at"])
    else:
        item = CartItem.objects.create(user=user, product=product, quantity=quantity)

    logger.info(f"User {user.id} cart: {product.sku} x{item.quantity}")
    return item


@transaction.atomic
def update_cart_item_quantity(user, product_id, quantity: int):
    """
    Set a line's quantity; zero or less removes the line

    Returns:
        The updated CartItem, or None when it was removed
    """
    if quantity <= 0:
        remove_from_cart(user, product_id)
        return None

    item = (
        CartItem.objects.select_for_update()
        .select_related("product")
        .filter(user=user, product_id=product_id)
        .first()
    )
    if item is None:
        raise NotFoundError("Cart item", product_id)

    if quantity > item.product.stock:
        raise InsufficientStockError(item.product_id, quantity, item.product.stock)

    item.quantity = quantity
    item.save(update_fields=["quantity", "updated_at"])
    return item


def remove_from_cart(user, product_id) -> None:
    deleted, _ = CartItem.objects.filter(user=user, product_id=product_id).delete()
    if not deleted:
        raise NotFoundError("Cart item", product_id)


def clear_cart(user) -> int:
    deleted, _ = CartItem.objects.filter(user=user).delete()
    return deleted


def get_cart_item_count(user) -> int:
    """Total units across all lines"""
    return CartItem.objects.filter(user=user).aggregate(total=Sum("quantity"))["total"] or 0


def get_cart_total(user) -> Decimal:
    return sum(
        (item.product.price * item.quantity for item in CartItem.objects.filter(user=user).select_related("product")),
        Decimal("0"),
    )


def get_cart_summary(user) -> dict:
    items = list(get_cart_items(user))
    return {
        "items": items,
        "item_count": sum(item.quantity for item in items),
        "subtotal": sum((item.line_total for item in items), Decimal("0")),
    }
