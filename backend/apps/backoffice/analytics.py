# backend/apps/backoffice/analytics.py
"""
Sales analytics for the back-office dashboard

Every figure is built from grouped ORM aggregations over a reporting
period. Only DELIVERED orders count as revenue. Results are cached per
period in the analytics cache, which order writes clear.
"""
import logging
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from django.contrib.auth.models import User
from django.db.models import Count, DecimalField, F, Sum
from django.db.models.functions import ExtractHour, TruncDate
from django.utils import timezone
from django.utils.dateparse import parse_date

from apps.core.exceptions import InvalidInputError
from apps.infrastructure.cache import analytics_cache
from apps.orders.models import Order, OrderItem
from apps.recommendations.models import ProductView

logger = logging.getLogger(__name__)

RANGE_DAYS = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "1y": 365,
}
DEFAULT_RANGE = "30d"
TOP_PRODUCT_LIMIT = 10

# (key, label, min orders, max orders)
CUSTOMER_SEGMENTS = [
    ("single", "1 order", 1, 1),
    ("repeat", "2-5 orders", 2, 5),
    ("loyal", "6+ orders", 6, None),
]

LINE_REVENUE = Sum(
    F("quantity") * F("price"), output_field=DecimalField(max_digits=14, decimal_places=2)
)


def _to_float(value) -> float:
    return float(value or 0)


def growth_rate(current, previous) -> float:
    """Percent change against the previous period, 0 when there is no baseline"""
    current, previous = _to_float(current), _to_float(previous)
    if previous == 0:
        return 0.0
    return round((current - previous) / previous * 100, 1)


def _parse_day(value: str, field: str):
    try:
        day = parse_date(value)
    except ValueError:
        day = None
    if day is None:
        raise InvalidInputError("Dates must use YYYY-MM-DD", field=field)
    return day


def resolve_period(
    range_key: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Tuple[datetime, datetime, str]:
    """
    Work out the reporting window

    An explicit start_date/end_date pair wins over range; the end day is
    included up to its last second.

    Returns:
        (start, end, cache_key)

    Raises:
        InvalidInputError: unknown range, malformed dates or end before start
    """
    if start_date and end_date:
        first = _parse_day(start_date, "start_date")
        last = _parse_day(end_date, "end_date")
        if last < first:
            raise InvalidInputError("end_date must not be before start_date", field="end_date")

        tz = timezone.get_current_timezone()
        start = timezone.make_aware(datetime.combine(first, time.min), tz)
        end = timezone.make_aware(datetime.combine(last, time.max), tz)
        return start, end, f"custom:{first.isoformat()}:{last.isoformat()}"

    range_key = range_key or DEFAULT_RANGE
    if range_key not in RANGE_DAYS:
        raise InvalidInputError(
            f"Invalid range. Must be one of: {', '.join(RANGE_DAYS)}", field="range"
        )

    end = timezone.now()
    start = end - timedelta(days=RANGE_DAYS[range_key])
    return start, end, f"range:{range_key}"


def _delivered(start: datetime, end: datetime):
    return Order.objects.filter(
        status=Order.STATUS_DELIVERED, created_at__gte=start, created_at__lte=end
    )


def _period_totals(start: datetime, end: datetime) -> Dict[str, Any]:
    totals = _delivered(start, end).aggregate(revenue=Sum("total_amount"), orders=Count("id"))
    revenue = totals["revenue"] or Decimal("0")
    orders = totals["orders"] or 0
    customers = User.objects.filter(
        is_staff=False, date_joined__gte=start, date_joined__lte=end
    ).count()
    placed = Order.objects.filter(created_at__gte=start, created_at__lte=end).count()
    return {
        "revenue": revenue,
        "orders": orders,
        "customers": customers,
        "placed": placed,
        "average_order_value": revenue / orders if orders else Decimal("0"),
    }


def get_overview(start: datetime, end: datetime) -> Dict[str, Any]:
    """Headline figures with growth against the previous equal-length period"""
    length = end - start
    current = _period_totals(start, end)
    previous = _period_totals(start - length, start)

    return {
        "total_revenue": _to_float(current["revenue"]),
        "total_orders": current["orders"],
        "total_customers": current["customers"],
        "average_order_value": round(_to_float(current["average_order_value"]), 2),
        "conversion_rate": (
            round(current["orders"] / current["placed"] * 100, 1) if current["placed"] else 0.0
        ),
        "revenue_growth": growth_rate(current["revenue"], previous["revenue"]),
        "order_growth": growth_rate(current["orders"], previous["orders"]),
        "customer_growth": growth_rate(current["customers"], previous["customers"]),
        "aov_growth": growth_rate(
            current["average_order_value"], previous["average_order_value"]
        ),
    }


def get_sales_trend(start: datetime, end: datetime) -> List[Dict[str, Any]]:
    rows = (
        _delivered(start, end)
        .annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(revenue=Sum("total_amount"), orders=Count("id"))
        .order_by("day")
    )
    return [
        {
            "date": row["day"].isoformat(),
            "revenue": _to_float(row["revenue"]),
            "orders": row["orders"],
        }
        for row in rows
    ]


def get_top_products(start: datetime, end: datetime, limit: int = TOP_PRODUCT_LIMIT):
    rows = list(
        OrderItem.objects.filter(order__in=_delivered(start, end))
        .values("product_id", "product__name", "product__sku")
        .annotate(
            revenue=LINE_REVENUE,
            units=Sum("quantity"),
            orders=Count("order", distinct=True),
        )
        .order_by("-revenue", "product__name")[:limit]
    )

    views = dict(
        ProductView.objects.filter(
            product_id__in=[row["product_id"] for row in rows],
            viewed_at__gte=start,
            viewed_at__lte=end,
        )
        .values("product_id")
        .annotate(count=Count("id"))
        .values_list("product_id", "count")
    )

    return [
        {
            "product_id": str(row["product_id"]),
            "name": row["product__name"],
            "sku": row["product__sku"],
            "revenue": _to_float(row["revenue"]),
            "units_sold": row["units"] or 0,
            "orders": row["orders"],
            "views": views.get(row["product_id"], 0),
        }
        for row in rows
    ]


def get_category_revenue(start: datetime, end: datetime) -> List[Dict[str, Any]]:
    rows = (
        OrderItem.objects.filter(order__in=_delivered(start, end))
        .values("product__category_id", "product__category__name")
        .annotate(revenue=LINE_REVENUE, units=Sum("quantity"))
        .order_by("-revenue")
    )
    return [
        {
            "category_id": str(row["product__category_id"]),
            "name": row["product__category__name"],
            "revenue": _to_float(row["revenue"]),
            "units_sold": row["units"] or 0,
        }
        for row in rows
    ]


def get_hourly_distribution(start: datetime, end: datetime) -> List[Dict[str, int]]:
    """Orders placed and orders delivered, by hour of the day they were placed"""

    def by_hour(queryset):
        return dict(
            queryset.annotate(hour=ExtractHour("created_at"))
            .values("hour")
            .annotate(count=Count("id"))
            .values_list("hour", "count")
        )

    placed = by_hour(Order.objects.filter(created_at__gte=start, created_at__lte=end))
    delivered = by_hour(_delivered(start, end))
    return [
        {"hour": hour, "placed": placed.get(hour, 0), "delivered": delivered.get(hour, 0)}
        for hour in range(24)
    ]


def get_customer_segments(start: datetime, end: datetime) -> List[Dict[str, Any]]:
    per_customer = (
        _delivered(start, end)
        .values("user")
        .annotate(orders=Count("id"), revenue=Sum("total_amount"))
        .order_by()
    )

    buckets = {
        key: {"segment": key, "label": label, "customers": 0, "orders": 0, "revenue": Decimal("0")}
        for key, label, _, _ in CUSTOMER_SEGMENTS
    }
    for row in per_customer:
        for key, _, low, high in CUSTOMER_SEGMENTS:
            if row["orders"] >= low and (high is None or row["orders"] <= high):
                bucket = buckets[key]
                bucket["customers"] += 1
                bucket["orders"] += row["orders"]
                bucket["revenue"] += row["revenue"] or Decimal("0")
                break

    segments = []
    for key, _, _, _ in CUSTOMER_SEGMENTS:
        bucket = buckets[key]
        orders = bucket.pop("orders")
        bucket["average_order_value"] = (
            round(_to_float(bucket["revenue"]) / orders, 2) if orders else 0.0
        )
        bucket["revenue"] = _to_float(bucket["revenue"])
        segments.append(bucket)
    return segments


def build_analytics(start: datetime, end: datetime) -> Dict[str, Any]:
    return {
        "period": {"start": start.isoformat(), "end": end.isoformat()},
        "overview": get_overview(start, end),
        "sales_trend": get_sales_trend(start, end),
        "top_products": get_top_products(start, end),
        "category_revenue": get_category_revenue(start, end),
        "hourly_distribution": get_hourly_distribution(start, end),
        "customer_segments": get_customer_segments(start, end),
    }


def get_analytics(
    range_key: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Dict[str, Any]:
    """Dashboard payload for one period, served from cache when fresh"""
    start, end, cache_key = resolve_period(range_key, start_date, end_date)

    def load():
        logger.info(f"Building analytics for {cache_key}")
        return build_analytics(start, end)

    return analytics_cache.get_or_set(cache_key, load)
