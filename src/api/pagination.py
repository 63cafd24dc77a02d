from math import ceil
from typing import Any, Sequence

from django.db.models import QuerySet

from src.core.exceptions import ValidationError


def _positive_int(params, key: str, default: int) -> int:
    raw = params.get(key)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer", errors={key: ["not an integer"]})
    if value < 1:
        raise ValidationError(f"{key} must be >= 1", errors={key: ["must be >= 1"]})
    return value


class Paginator:
    """
    Pagination par numéro de page (?page=&page_size=).

        items, meta = Paginator(default_page_size=20).paginate_queryset(qs, request)

    page_size is capped at max_page_size. A page past the end returns an
    empty list with the real totals so clients can step back.
    """

    def __init__(self, *, default_page_size: int = 20, max_page_size: int = 100):
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    def page_params(self, request) -> tuple[int, int]:
        page = _positive_int(request.GET, "page", 1)
        size = _positive_int(request.GET, "page_size", self.default_page_size)
        return page, min(size, self.max_page_size)

    def paginate_queryset(self, data: QuerySet | Sequence[Any], request) -> tuple[list[Any], dict[str, Any]]:
        page, size = self.page_params(request)
        total = data.count() if isinstance(data, QuerySet) else len(data)
        offset = (page - 1) * size

        items = list(data[offset:offset + size])
        total_pages = max(1, ceil(total / size))

        return items, {
            "count": total,
            "page": page,
            "page_size": size,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        }
