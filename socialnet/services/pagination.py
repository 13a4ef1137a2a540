# socialnet/services/pagination.py
"""Offset-based pagination shared by feed, listings and admin views."""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List

from sqlalchemy.orm import Query

from socialnet.config import MAX_PAGE_SIZE
from socialnet.errors import InvalidArgument


@dataclass
class Page:
    """One page of an ordered, finite result sequence."""
    items: List[Any]
    page: int
    page_size: int
    total: int
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page * self.page_size < self.total

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def meta(self) -> Dict[str, Any]:
        return {
            "current_page": self.page,
            "page_size": self.page_size,
            "total": self.total,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


def check_page_args(page: int, page_size: int) -> None:
    if page < 1:
        raise InvalidArgument(f"page must be >= 1, got {page}")
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise InvalidArgument(f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}")


def paginate(query: Query, page: int, page_size: int) -> Page:
    """
    Apply offset/limit to an already ordered query.

    Args:
        query: ORM query with a deterministic ORDER BY
        page: 1-based page number
        page_size: Items per page

    Returns:
        Page with the items and the total count of the unpaginated query
    """
    check_page_args(page, page_size)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return Page(items=items, page=page, page_size=page_size, total=total)
