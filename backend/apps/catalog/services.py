# backend/apps/catalog/services.py
"""
Catalog services

Product listing with filters and sorting, category tree, search,
reviews with statistics, and wishlists.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, F, FloatField, IntegerField, OuterRef, Q, Subquery
from django.db.models.functions import Coalesce

from apps.core.exceptions import AlreadyExistsError, InvalidInputError, NotFoundError
from apps.core.pagination import paginate
from apps.core.utils import sanitize_text
from apps.infrastructure.cache import catalog_cache

from .models import Category, Favorite, Product, Review

logger = logging.getLogger(__name__)

PRODUCT_SORT_FIELDS = ["name", "price", "created_at", "rating", "popularity"]
REVIEW_SORT_FIELDS = {"created_at": "created_at", "rating": "rating", "helpful": "helpful_count"}
MIN_REVIEW_COMMENT_LENGTH = 10


# ============================================================
# ANNOTATIONS
# ============================================================


def count_subquery(queryset):
    """Scalar COUNT(*) subquery grouped on the outer product"""
    return Coalesce(
        Subquery(
            queryset.order_by().values("product").annotate(c=Count("pk")).values("c")[:1],
            output_field=IntegerField(),
        ),
        0,
    )


def annotate_ratings(queryset):
    """Add average_rating and review_count (approved reviews only)"""
    approved = Review.objects.filter(product=OuterRef("pk"), is_approved=True)
    return queryset.annotate(
        average_rating=Subquery(
            approved.order_by().values("product").annotate(avg=Avg("rating")).values("avg")[:1],
            output_field=FloatField(),
        ),
        review_count=count_subquery(approved),
    )


def annotate_popularity(queryset):
    from apps.orders.models import OrderItem

    return queryset.annotate(
        order_item_count=count_subquery(OrderItem.objects.filter(product=OuterRef("pk")))
    )


def product_queryset():
    return annotate_ratings(
        Product.objects.select_related("category").prefetch_related("images")
    )


# ============================================================
# PRODUCTS
# ============================================================


def list_products(
    filters: Optional[Dict[str, Any]] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Product], Dict[str, int]]:
    """
    Filtered, sorted and paginated product listing

    Supported filters: status, category, categories, min_price, max_price,
    min_rating, in_stock, on_sale, search.
    """
    filters = filters or {}
    queryset = product_queryset().filter(status=filters.get("status") or Product.STATUS_ACTIVE)

    if filters.get("category"):
        queryset = queryset.filter(category__slug=filters["category"])
    if filters.get("categories"):
        queryset = queryset.filter(category__slug__in=filters["categories"])

    if filters.get("min_price") is not None:
        queryset = queryset.filter(price__gte=filters["min_price"])
    if filters.get("max_price") is not None:
        queryset = queryset.filter(price__lte=filters["max_price"])

    # Unrated products have a NULL average and only pass a zero minimum
    min_rating = filters.get("min_rating")
    if min_rating:
        queryset = queryset.filter(average_rating__gte=min_rating)

    if filters.get("in_stock"):
        queryset = queryset.filter(stock__gt=0)
    if filters.get("on_sale"):
        queryset = queryset.filter(compare_price__isnull=False, compare_price__gt=F("price"))

    search = (filters.get("search") or "").strip()
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) | Q(description__icontains=search) | Q(sku__icontains=search)
        )

    queryset = _sort_products(queryset, sort_by, sort_order)
    return paginate(queryset, page, limit)


def _sort_products(queryset, sort_by: str, sort_order: str):
    descending = sort_order != "asc"

    if sort_by == "rating":
        expression = F("average_rating")
        return queryset.order_by(
            expression.desc(nulls_last=True) if descending else expression.asc(nulls_last=True),
            "-created_at",
        )

    if sort_by == "popularity":
        queryset = annotate_popularity(queryset)
        prefix = "-" if descending else ""
        return queryset.order_by(f"{prefix}order_item_count", f"{prefix}review_count", "-created_at")

    if sort_by not in ("name", "price", "created_at"):
        sort_by = "created_at"
    prefix = "-" if descending else ""
    return queryset.order_by(f"{prefix}{sort_by}", "id")


def get_product(product_id, include_hidden: bool = False) -> Product:
    """
    Raises:
        NotFoundError: no such product, or it is not ACTIVE and hidden
    """
    product = product_queryset().filter(id=product_id).first()
    if product is None or (not include_hidden and product.status != Product.STATUS_ACTIVE):
        raise NotFoundError("Product", product_id)
    return product


def search_products(query: str, limit: int = 10) -> List[Product]:
    query = (query or "").strip()
    if not query:
        return []
    products, _ = list_products({"search": query}, page=1, limit=limit)
    return products


# ============================================================
# CATEGORIES
# ============================================================


def get_categories() -> List[Dict[str, Any]]:
    """All categories in name order with their ACTIVE product counts"""

    def load():
        categories = Category.objects.annotate(
            product_count=Count("products", filter=Q(products__status=Product.STATUS_ACTIVE))
        ).order_by("name")
        return [
            {
                "id": str(category.id),
                "name": category.name,
                "slug": category.slug,
                "description": category.description,
                "image_url": category.image_url,
                "parent_id": str(category.parent_id) if category.parent_id else None,
                "product_count": category.product_count,
            }
            for category in categories
        ]

    return catalog_cache.get_or_set("categories", load)


def invalidate_catalog_cache() -> None:
    catalog_cache.clear()


# ============================================================
# REVIEWS
# ============================================================


def get_review_statistics(product_id) -> Dict[str, Any]:
    """Average rating, total and 1-5 distribution over approved reviews"""

    def load():
        approved = Review.objects.filter(product_id=product_id, is_approved=True)
        distribution = {rating: 0 for rating in range(1, 6)}
        for row in approved.values("rating").annotate(count=Count("id")):
            distribution[row["rating"]] = row["count"]

        total = sum(distribution.values())
        average = approved.aggregate(avg=Avg("rating"))["avg"]
        return {
            "average_rating": round(average, 1) if average is not None else 0,
            "total_reviews": total,
            "rating_distribution": distribution,
        }

    return catalog_cache.get_or_set(f"review_stats:{product_id}", load)


def get_product_reviews(
    product_id,
    rating: Optional[int] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = 10,
):
    """
    Returns:
        (reviews, pagination, statistics)
    """
    if not Product.objects.filter(id=product_id).exists():
        raise NotFoundError("Product", product_id)

    queryset = Review.objects.filter(product_id=product_id, is_approved=True).select_related(
        "user", "user__profile"
    )
    if rating:
        queryset = queryset.filter(rating=rating)

    field = REVIEW_SORT_FIELDS.get(sort_by, "created_at")
    prefix = "" if sort_order == "asc" else "-"
    queryset = queryset.order_by(f"{prefix}{field}", "-created_at")

    reviews, pagination = paginate(queryset, page, limit)
    return reviews, pagination, get_review_statistics(product_id)


def create_review(user, product_id, rating, comment: str, title: str = "") -> Review:
    """
    Raises:
        InvalidInputError: rating outside 1-5 or comment too short
        NotFoundError: unknown product
        AlreadyExistsError: user already reviewed this product
    """
    try:
        rating = int(rating)
    except (TypeError, ValueError):
        raise InvalidInputError("Rating must be between 1 and 5", field="rating")
    if not 1 <= rating <= 5:
        raise InvalidInputError("Rating must be between 1 and 5", field="rating")

    comment = sanitize_text(comment, max_length=2000)
    if len(comment) < MIN_REVIEW_COMMENT_LENGTH:
        raise InvalidInputError(
            f"Comment must be at least {MIN_REVIEW_COMMENT_LENGTH} characters", field="comment"
        )

    if not Product.objects.filter(id=product_id).exists():
        raise NotFoundError("Product", product_id)

    if Review.objects.filter(product_id=product_id, user=user).exists():
        raise AlreadyExistsError("You have already reviewed this product")

    try:
        with transaction.atomic():
            review = Review.objects.create(
                product_id=product_id,
                user=user,
                rating=rating,
                title=sanitize_text(title, max_length=200),
                comment=comment,
            )
    except IntegrityError:
        raise AlreadyExistsError("You have already reviewed this product")

    catalog_cache.delete(f"review_stats:{product_id}")
    logger.info(f"User {user.id} reviewed product {product_id} ({rating}*)")
    return review


def mark_review_helpful(review_id) -> Review:
    updated = Review.objects.filter(id=review_id).update(helpful_count=F("helpful_count") + 1)
    if not updated:
        raise NotFoundError("Review", review_id)
    return Review.objects.get(id=review_id)


# ============================================================
# WISHLIST
# ============================================================


def get_wishlist(user):
    return Favorite.objects.filter(user=user).select_related("product", "product__category").prefetch_related(
        "product__images"
    )


def add_to_wishlist(user, product_id) -> Favorite:
    """
    Raises:
        NotFoundError: unknown product
        AlreadyExistsError: already on the wishlist
    """
    product = Product.objects.filter(id=product_id).first()
    if product is None:
        raise NotFoundError("Product", product_id)

    try:
        with transaction.atomic():
            favorite = Favorite.objects.create(user=user, product=product)
    except IntegrityError:
        raise AlreadyExistsError("Product is already in your wishlist")

    return favorite


def is_favorite(user, product_id) -> bool:
    return Favorite.objects.filter(user=user, product_id=product_id).exists()


def remove_from_wishlist(user, product_id) -> None:
    deleted, _ = Favorite.objects.filter(user=user, product_id=product_id).delete()
    if not deleted:
        raise NotFoundError("Wishlist item", product_id)
