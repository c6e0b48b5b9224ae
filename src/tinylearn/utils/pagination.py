from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, List, TypeVar

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    total: int = 0
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def pagination(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "pages": self.pages,
        }


def normalize_page(page: Any, limit: Any) -> tuple:
    """Clamp page/limit query values into a usable range."""
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = DEFAULT_PAGE
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        limit = DEFAULT_LIMIT
    return max(page, 1), min(max(limit, 1), MAX_LIMIT)


def paginate(query, page: int, limit: int) -> Page:
    page, limit = normalize_page(page, limit)
    result = Page(total=query.order_by(None).count(), page=page, limit=limit)
    result.items = query.offset(result.offset).limit(limit).all()
    return result
