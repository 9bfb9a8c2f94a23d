# backend/apps/recommendations/services.py
"""
Recommendation services

Two heuristics merged into one list:
- collaborative: products co-viewed by other viewers of the same products
- content based: popular products in the viewer's favourite categories
"""
import logging
import math
from collections import Counter
from datetime import timedelta
from typing import Iterable, List, Optional

from django.db.models import F, OuterRef, Q
from django.utils import timezone

from apps.catalog.models import Product, Review
from apps.catalog.services import count_subquery, product_queryset
from apps.core.exceptions import NotFoundError
from apps.orders.models import OrderItem

from .models import ProductView

logger = logging.getLogger(__name__)

VIEW_DEDUPE_WINDOW = timedelta(minutes=30)
COLLABORATIVE_HISTORY_SIZE = 20
CONTENT_HISTORY_SIZE = 10
TOP_CATEGORIES = 3
COLLABORATIVE_SHARE = 0.6
CONTENT_SHARE = 0.8

# Popularity weights for content-based scoring
VIEW_WEIGHT = 1
REVIEW_WEIGHT = 3
ORDER_WEIGHT = 5


def _viewer(user=None, session_id: Optional[str] = None) -> Optional[Q]:
    """Filter selecting one viewer's rows; None when the viewer is unknown"""
    if user is not None and user.is_authenticated:
        return Q(user=user)
    if session_id:
        return Q(user__isnull=True, session_id=session_id)
    return None


def track_product_view(product_id, user=None, session_id: Optional[str] = None) -> ProductView:
    """
    Record a view; a repeat view within 30 minutes refreshes the existing row

    Raises:
        NotFoundError: unknown product
    """
    if not Product.objects.filter(id=product_id).exists():
        raise NotFoundError("Product", product_id)

    now = timezone.now()
    viewer = _viewer(user, session_id)
    authenticated = user is not None and user.is_authenticated

    if viewer is not None:
        recent = (
            ProductView.objects.filter(viewer, product_id=product_id, viewed_at__gte=now - VIEW_DEDUPE_WINDOW)
            .order_by("-viewed_at")
            .first()
        )
        if recent is not None:
            recent.viewed_at = now
            recent.save(update_fields=["viewed_at"])
            return recent

    return ProductView.objects.create(
        product_id=product_id,
        user=user if authenticated else None,
        session_id="" if authenticated else (session_id or ""),
        viewed_at=now,
    )


def get_view_history(user=None, session_id: Optional[str] = None, limit: int = 20):
    viewer = _viewer(user, session_id)
    if viewer is None:
        return ProductView.objects.none()
    return (
        ProductView.objects.filter(viewer)
        .select_related("product", "product__category")
        .order_by("-viewed_at")[:limit]
    )


def get_collaborative_recommendations(
    user=None,
    session_id: Optional[str] = None,
    exclude_ids: Iterable = (),
    limit: int = 10,
) -> List:
    """Products viewed by people who viewed what this viewer viewed"""
    viewer = _viewer(user, session_id)
    if viewer is None:
        return []

    viewed_ids = list(
        ProductView.objects.filter(viewer)
        .order_by("-viewed_at")
        .values_list("product_id", flat=True)[:COLLABORATIVE_HISTORY_SIZE]
    )
    if not viewed_ids:
        return []

    others = list(
        ProductView.objects.filter(product_id__in=viewed_ids)
        .exclude(viewer)
        .order_by()
        .values_list("user_id", "session_id")
        .distinct()
    )
    user_ids = {user_id for user_id, _ in others if user_id is not None}
    session_ids = {session for user_id, session in others if user_id is None and session}
    if not user_ids and not session_ids:
        return []

    similar = Q(user_id__in=user_ids) | Q(user__isnull=True, session_id__in=session_ids)
    co_viewed = (
        ProductView.objects.filter(similar)
        .exclude(product_id__in=set(viewed_ids) | set(exclude_ids))
        .values_list("product_id", flat=True)
    )

    return [product_id for product_id, _ in Counter(co_viewed).most_common(limit)]


def get_content_based_recommendations(
    user=None,
    session_id: Optional[str] = None,
    category_id=None,
    exclude_ids: Iterable = (),
    limit: int = 10,
) -> List:
    """Most popular ACTIVE products in the target categories"""
    if category_id:
        category_ids = [category_id]
    else:
        history = get_view_history(user, session_id, limit=CONTENT_HISTORY_SIZE)
        counts = Counter(view.product.category_id for view in history)
        category_ids = [category for category, _ in counts.most_common(TOP_CATEGORIES)]

    if not category_ids:
        return []

    products = (
        Product.objects.filter(category_id__in=category_ids, status=Product.STATUS_ACTIVE)
        .exclude(id__in=list(exclude_ids))
        .annotate(
            view_count=count_subquery(ProductView.objects.filter(product=OuterRef("pk"))),
            reviews_count=count_subquery(Review.objects.filter(product=OuterRef("pk"))),
            order_count=count_subquery(OrderItem.objects.filter(product=OuterRef("pk"))),
        )
        .annotate(
            score=F("view_count") * VIEW_WEIGHT
            + F("reviews_count") * REVIEW_WEIGHT
            + F("order_count") * ORDER_WEIGHT
        )
        .order_by("-score", "-created_at")
    )

    return list(products.values_list("id", flat=True)[:limit])


def get_recommendations(
    user=None,
    session_id: Optional[str] = None,
    category_id=None,
    exclude_ids: Iterable = (),
    limit: int = 10,
) -> List:
    """Collaborative results first, then content-based ones not already present"""
    exclude_ids = list(exclude_ids)

    collaborative = get_collaborative_recommendations(
        user, session_id, exclude_ids, limit=math.ceil(limit * COLLABORATIVE_SHARE)
    )
    content_based = get_content_based_recommendations(
        user, session_id, category_id, exclude_ids, limit=math.ceil(limit * CONTENT_SHARE)
    )

    combined = list(collaborative)
    for product_id in content_based:
        if product_id not in combined and len(combined) < limit:
            combined.append(product_id)

    return combined[:limit]


def load_products(product_ids: List) -> List[Product]:
    """ACTIVE products for the ids, keeping the given order"""
    products = {
        product.id: product
        for product in product_queryset().filter(id__in=product_ids, status=Product.STATUS_ACTIVE)
    }
    return [products[product_id] for product_id in product_ids if product_id in products]


def get_recently_viewed_products(user=None, session_id: Optional[str] = None, limit: int = 6):
    product_ids = [view.product_id for view in get_view_history(user, session_id, limit)]
    return load_products(product_ids)
