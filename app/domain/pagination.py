# app/domain/pagination.py
import math

from app.domain.errors import InvalidInputError
from app.utils.settings import MAX_PAGE_LIMIT


def page_window(page: int, limit: int) -> tuple[int, int]:
    """(offset, limit) dla strony liczonej od 1."""
    if page < 1:
        raise InvalidInputError("Page must be at least 1")
    if limit < 1:
        raise InvalidInputError("Limit must be at least 1")

    limit = min(limit, MAX_PAGE_LIMIT)
    return (page - 1) * limit, limit


def pagination(page: int, limit: int, total: int) -> dict:
    limit = min(limit, MAX_PAGE_LIMIT)
    return {
        "current_page": page,
        "total_pages": math.ceil(total / limit),
        "total": total,
    }
