# backend/apps/backoffice/services.py
"""
Back-office services: product, order, user and review management

Views stay thin; everything that touches the database or a cache lives
here and raises ShopError subclasses for the exception handler.
"""
import logging
from datetime import datetime, time
from decimal import Decimal
from typing import Any, Dict, Optional

from django.contrib.auth.models import User
from django.db import transaction
from django.db.models import (
    Avg,
    Count,
    DecimalField,
    F,
    OuterRef,
    Q,
    Subquery,
    Sum,
    Value,
)
from django.db.models.functions import Coalesce
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework.authtoken.models import Token

from apps.catalog.models import Category, Product, ProductImage, Review
from apps.catalog.services import annotate_ratings, invalidate_catalog_cache
from apps.core.exceptions import (
    AlreadyExistsError,
    BusinessRuleError,
    InvalidInputError,
    NotFoundError,
)
from apps.core.pagination import paginate
from apps.infrastructure.cache import catalog_cache
from apps.infrastructure.config import get_low_stock_threshold
from apps.inventory.models import StockMovement
from apps.inventory.services import record_movement
from apps.orders.models import Order
from apps.orders.services import order_queryset

logger = logging.getLogger(__name__)

PRODUCT_SORT_FIELDS = ["name", "price", "stock", "created_at"]
ADMIN_PRODUCT_STATUSES = [Product.STATUS_ACTIVE, Product.STATUS_INACTIVE, Product.STATUS_DRAFT]
REVIEW_SORT_FIELDS = {"created_at": "created_at", "rating": "rating", "helpful": "helpful_count"}
REVIEW_STATUSES = ["pending", "approved", "reported"]
PRODUCT_FIELDS = [
    "name",
    "description",
    "price",
    "compare_price",
    "sku",
    "status",
    "weight",
    "dimensions",
    "tags",
]

MONEY = DecimalField(max_digits=14, decimal_places=2)


def _ordering(field: str, sort_order: str) -> str:
    return field if sort_order == "asc" else f"-{field}"


def _filter_dates(queryset, field: str, start_date: Optional[str], end_date: Optional[str]):
    """Inclusive YYYY-MM-DD bounds on a datetime field"""
    tz = timezone.get_current_timezone()
    for value, name, bound, lookup in (
        (start_date, "start_date", time.min, "gte"),
        (end_date, "end_date", time.max, "lte"),
    ):
        if not value:
            continue
        try:
            day = parse_date(value)
        except ValueError:
            day = None
        if day is None:
            raise InvalidInputError("Dates must use YYYY-MM-DD", field=name)
        moment = timezone.make_aware(datetime.combine(day, bound), tz)
        queryset = queryset.filter(**{f"{field}__{lookup}": moment})
    return queryset


def _delivered_revenue():
    return Order.objects.filter(status=Order.STATUS_DELIVERED).aggregate(
        total=Sum("total_amount")
    )["total"] or Decimal("0")


# ============================================================
# PRODUCTS
# ============================================================


def list_admin_products(
    search: str = "",
    category_id=None,
    status: Optional[str] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = 20,
):
    """Every product regardless of status, for the management table"""
    queryset = annotate_ratings(
        Product.objects.select_related("category").prefetch_related("images")
    )

    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) | Q(description__icontains=search) | Q(sku__icontains=search)
        )
    if category_id:
        queryset = queryset.filter(category_id=category_id)
    if status:
        queryset = queryset.filter(status=status)

    field = sort_by if sort_by in PRODUCT_SORT_FIELDS else "created_at"
    queryset = queryset.order_by(_ordering(field, sort_order), "id")
    return paginate(queryset, page, limit)


def get_admin_product(product_id) -> Product:
    product = annotate_ratings(
        Product.objects.select_related("category").prefetch_related("images")
    ).filter(id=product_id).first()
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


def _get_category(category_id) -> Category:
    category = Category.objects.filter(id=category_id).first()
    if category is None:
        raise NotFoundError("Category", category_id)
    return category


def _replace_images(product: Product, images) -> None:
    product.images.all().delete()
    ProductImage.objects.bulk_create(
        [
            ProductImage(
                product=product,
                url=image["url"],
                alt=image.get("alt") or product.name,
                order=position,
            )
            for position, image in enumerate(images)
        ]
    )


def create_product(data: Dict[str, Any], user=None) -> Product:
    """
    Create a product with its images in the given order

    Opening stock is written to the ledger as an IN movement.

    Raises:
        AlreadyExistsError: SKU already used
        NotFoundError: unknown category
    """
    if Product.objects.filter(sku=data["sku"]).exists():
        raise AlreadyExistsError("A product with this SKU already exists")
    category = _get_category(data["category_id"])

    with transaction.atomic():
        product = Product.objects.create(
            category=category,
            stock=0,
            **{field: data[field] for field in PRODUCT_FIELDS if field in data},
        )
        _replace_images(product, data.get("images", []))

        opening_stock = data.get("stock", 0)
        if opening_stock:
            record_movement(
                product, opening_stock, StockMovement.TYPE_IN, "Initial stock", user=user
            )

    invalidate_catalog_cache()
    logger.info(f"Product created: {product.sku} ({product.id})")
    return get_admin_product(product.id)


def update_product(product_id, data: Dict[str, Any], user=None) -> Product:
    """
    Partial update; a new stock figure is booked as an ADJUSTMENT movement

    Raises:
        NotFoundError: unknown product or category
        AlreadyExistsError: SKU used by another product
    """
    sku = data.get("sku")
    if sku and Product.objects.filter(sku=sku).exclude(id=product_id).exists():
        raise AlreadyExistsError("A product with this SKU already exists")

    with transaction.atomic():
        product = Product.objects.select_for_update().filter(id=product_id).first()
        if product is None:
            raise NotFoundError("Product", product_id)

        for field in PRODUCT_FIELDS:
            if field in data:
                setattr(product, field, data[field])
        if "category_id" in data:
            product.category = _get_category(data["category_id"])
        product.save()

        if "images" in data:
            _replace_images(product, data["images"])

        if "stock" in data and data["stock"] != product.stock:
            record_movement(
                product,
                data["stock"] - product.stock,
                StockMovement.TYPE_ADJUSTMENT,
                "Stock edited in back office",
                user=user,
            )

    invalidate_catalog_cache()
    logger.info(f"Product updated: {product.sku} ({product.id})")
    return get_admin_product(product.id)


def delete_product(product_id) -> None:
    """
    Raises:
        NotFoundError: unknown product
        BusinessRuleError: product has orders or reviews
    """
    product = Product.objects.filter(id=product_id).first()
    if product is None:
        raise NotFoundError("Product", product_id)

    if product.order_items.exists() or product.reviews.exists():
        raise BusinessRuleError(
            "This product has orders or reviews and cannot be deleted. Deactivate it instead."
        )

    sku = product.sku
    product.delete()
    invalidate_catalog_cache()
    logger.info(f"Product deleted: {sku} ({product_id})")


def set_product_status(product_id, status: str) -> Product:
    if status not in ADMIN_PRODUCT_STATUSES:
        raise InvalidInputError(
            f"Invalid status. Must be one of: {', '.join(ADMIN_PRODUCT_STATUSES)}", field="status"
        )

    updated = Product.objects.filter(id=product_id).update(status=status, updated_at=timezone.now())
    if not updated:
        raise NotFoundError("Product", product_id)

    invalidate_catalog_cache()
    logger.info(f"Product {product_id} status -> {status}")
    return get_admin_product(product_id)


def get_product_stats() -> Dict[str, Any]:
    counts = {
        row["status"]: row["count"]
        for row in Product.objects.values("status").annotate(count=Count("id")).order_by()
    }
    active = Product.objects.filter(status=Product.STATUS_ACTIVE)
    total_value = active.aggregate(
        value=Sum(F("price") * F("stock"), output_field=MONEY)
    )["value"]

    return {
        "total": sum(counts.values()),
        "active": counts.get(Product.STATUS_ACTIVE, 0),
        "inactive": counts.get(Product.STATUS_INACTIVE, 0),
        "draft": counts.get(Product.STATUS_DRAFT, 0),
        "low_stock": active.filter(stock__lte=get_low_stock_threshold()).count(),
        "total_value": total_value or Decimal("0"),
    }


# ============================================================
# ORDERS
# ============================================================


def list_admin_orders(
    search: str = "",
    status: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
):
    queryset = order_queryset().select_related("user__profile")

    if search:
        queryset = queryset.filter(
            Q(order_number__icontains=search) | Q(user__email__icontains=search)
        )
    if status:
        queryset = queryset.filter(status=status)
    queryset = _filter_dates(queryset, "created_at", start_date, end_date)

    return paginate(queryset.order_by("-created_at"), page, limit)


def get_admin_order(order_id) -> Order:
    order = order_queryset().select_related("user__profile").filter(id=order_id).first()
    if order is None:
        raise NotFoundError("Order", order_id)
    return order


def get_order_stats() -> Dict[str, Any]:
    counts = {
        row["status"]: row["count"]
        for row in Order.objects.values("status").annotate(count=Count("id")).order_by()
    }
    delivered = counts.get(Order.STATUS_DELIVERED, 0)
    revenue = _delivered_revenue()

    return {
        "total": sum(counts.values()),
        **{status.lower(): counts.get(status, 0) for status, _ in Order.STATUS_CHOICES},
        "total_revenue": revenue,
        "average_order_value": (revenue / delivered).quantize(Decimal("0.01")) if delivered else Decimal("0"),
    }


# ============================================================
# USERS
# ============================================================


def _annotate_customer_totals(queryset):
    orders = Order.objects.filter(user=OuterRef("pk")).order_by().values("user")
    return queryset.annotate(
        order_count=Coalesce(
            Subquery(orders.annotate(c=Count("pk")).values("c")[:1]),
            0,
        ),
        total_spent=Coalesce(
            Subquery(
                orders.filter(status=Order.STATUS_DELIVERED)
                .annotate(total=Sum("total_amount"))
                .values("total")[:1],
                output_field=MONEY,
            ),
            Value(Decimal("0")),
            output_field=MONEY,
        ),
    )


def list_users(search: str = "", is_active: Optional[bool] = None, page: int = 1, limit: int = 20):
    queryset = _annotate_customer_totals(User.objects.select_related("profile"))

    if search:
        queryset = queryset.filter(
            Q(email__icontains=search) | Q(profile__display_name__icontains=search)
        )
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)

    return paginate(queryset.order_by("-date_joined", "-id"), page, limit)


def get_user_detail(user_id) -> User:
    user = (
        _annotate_customer_totals(User.objects.select_related("profile"))
        .filter(id=user_id)
        .first()
    )
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def get_recent_orders(user, limit: int = 5):
    return list(order_queryset().filter(user=user).order_by("-created_at")[:limit])


def set_user_active(user_id, is_active: bool, acting_user=None) -> User:
    """
    Enable or disable an account; disabling revokes its API tokens

    Raises:
        NotFoundError: unknown user
        BusinessRuleError: an admin tried to disable their own account
    """
    user = User.objects.filter(id=user_id).first()
    if user is None:
        raise NotFoundError("User", user_id)
    if not is_active and acting_user is not None and acting_user.pk == user.pk:
        raise BusinessRuleError("You cannot deactivate your own account")

    user.is_active = is_active
    user.save(update_fields=["is_active"])
    if not is_active:
        Token.objects.filter(user=user).delete()

    logger.info(f"User {user.id} is_active -> {is_active}")
    return get_user_detail(user.id)


def get_user_stats() -> Dict[str, Any]:
    now = timezone.localtime()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    total = User.objects.count()
    active = User.objects.filter(is_active=True).count()
    verified = User.objects.filter(profile__email_verified=True).count()

    return {
        "total": total,
        "active": active,
        "inactive": total - active,
        "verified": verified,
        "unverified": total - verified,
        "new_this_month": User.objects.filter(date_joined__gte=month_start).count(),
        "total_orders": Order.objects.count(),
        "total_revenue": _delivered_revenue(),
    }


# ============================================================
# REVIEWS
# ============================================================


def _invalidate_review_stats(product_id) -> None:
    catalog_cache.delete(f"review_stats:{product_id}")


def list_reviews(
    search: str = "",
    status: Optional[str] = None,
    rating: Optional[int] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = 20,
):
    """All reviews, including pending and reported ones"""
    queryset = Review.objects.select_related("product", "user", "user__profile")

    if search:
        queryset = queryset.filter(
            Q(comment__icontains=search)
            | Q(title__icontains=search)
            | Q(product__name__icontains=search)
            | Q(user__email__icontains=search)
        )

    if status == "pending":
        queryset = queryset.filter(is_approved=False)
    elif status == "approved":
        queryset = queryset.filter(is_approved=True)
    elif status == "reported":
        queryset = queryset.filter(is_reported=True)
    elif status:
        raise InvalidInputError(
            f"Invalid status. Must be one of: {', '.join(REVIEW_STATUSES)}", field="status"
        )

    if rating:
        queryset = queryset.filter(rating=rating)
    queryset = _filter_dates(queryset, "created_at", start_date, end_date)

    field = REVIEW_SORT_FIELDS.get(sort_by, "created_at")
    queryset = queryset.order_by(_ordering(field, sort_order), "-created_at")
    return paginate(queryset, page, limit)


def _get_review(review_id) -> Review:
    review = Review.objects.select_related("product", "user", "user__profile").filter(
        id=review_id
    ).first()
    if review is None:
        raise NotFoundError("Review", review_id)
    return review


def set_review_approval(review_id, is_approved: bool) -> Review:
    """Approving a review also clears its reported flag"""
    review = _get_review(review_id)
    review.is_approved = is_approved
    if is_approved:
        review.is_reported = False
    review.save(update_fields=["is_approved", "is_reported", "updated_at"])

    _invalidate_review_stats(review.product_id)
    logger.info(f"Review {review.id} is_approved -> {is_approved}")
    return review


def report_review(review_id) -> Review:
    updated = Review.objects.filter(id=review_id).update(
        is_reported=True, report_count=F("report_count") + 1, updated_at=timezone.now()
    )
    if not updated:
        raise NotFoundError("Review", review_id)
    return _get_review(review_id)


def delete_review(review_id) -> None:
    review = _get_review(review_id)
    product_id = review.product_id
    review.delete()
    _invalidate_review_stats(product_id)
    logger.info(f"Review {review_id} deleted")


def get_review_stats() -> Dict[str, Any]:
    totals = Review.objects.aggregate(
        total=Count("id"),
        pending=Count("id", filter=Q(is_approved=False)),
        approved=Count("id", filter=Q(is_approved=True)),
        reported=Count("id", filter=Q(is_reported=True)),
        average=Avg("rating"),
        helpful=Sum("helpful_count"),
        reports=Sum("report_count"),
    )
    return {
        "total": totals["total"],
        "pending": totals["pending"],
        "approved": totals["approved"],
        "reported": totals["reported"],
        "average_rating": round(totals["average"], 1) if totals["average"] is not None else 0,
        "total_helpful": totals["helpful"] or 0,
        "total_reports": totals["reports"] or 0,
    }
