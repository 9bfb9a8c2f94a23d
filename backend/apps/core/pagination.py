# backend/apps/core/pagination.py
"""
page/limit pagination shared by list endpoints
"""
import math
from typing import Any, Dict, List, Tuple

from .utils import parse_int


def get_page_params(request, default_limit: int = 20, max_limit: int = 100) -> Tuple[int, int]:
    """Read ?page= and ?limit= with sane bounds"""
    page = parse_int(request.query_params.get("page"), 1, minimum=1)
    limit = parse_int(request.query_params.get("limit"), default_limit, minimum=1, maximum=max_limit)
    return page, limit


def paginate(queryset, page: int, limit: int) -> Tuple[List[Any], Dict[str, int]]:
    """
    Slice a queryset (or list) for one page

    Returns:
        (items, {"page", "limit", "total", "pages"})
    """
    total = queryset.count() if hasattr(queryset, "count") and not isinstance(queryset, list) else len(queryset)
    offset = (page - 1) * limit
    items = list(queryset[offset: offset + limit])

    return items, {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }
