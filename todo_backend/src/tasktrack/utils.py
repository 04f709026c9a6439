from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageMeta:
    current_page: int
    total_pages: int
    total_items: int
    limit: int
    has_next: bool
    has_prev: bool

    def as_dict(self) -> Dict[str, Any]:
        return {
            "current_page": self.current_page,
            "total_pages": self.total_pages,
            "total_items": self.total_items,
            "limit": self.limit,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


@dataclass(frozen=True)
class PageResult(Generic[T]):
    items: List[T]
    meta: PageMeta


def coerce_positive_int(value: Any, default: int) -> int:
    """Read ``value`` as an integer >= 1, falling back to ``default`` for anything else."""
    if isinstance(value, bool):
        return default
    try:
        number = int(value.strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if number >= 1 else default


# PUBLIC_INTERFACE
def paginate(items: Sequence[T], page: Any = 1, limit: Any = DEFAULT_PAGE_SIZE) -> PageResult[T]:
    """
    Slice one page out of ``items`` and compute page metadata.

    Args:
        items: The full, already filtered and sorted collection.
        page: 1-based page number; non-numeric or < 1 means page 1.
        limit: Page size; non-numeric or < 1 means DEFAULT_PAGE_SIZE.

    Returns:
        PageResult with the page's items and metadata. Pages past the end are
        empty rather than an error, and an empty collection has 0 total pages.
    """
    page_num = coerce_positive_int(page, 1)
    limit_num = coerce_positive_int(limit, DEFAULT_PAGE_SIZE)
    total = len(items)
    total_pages = math.ceil(total / limit_num)

    start = (page_num - 1) * limit_num
    materialized: List[T] = list(items[start:start + limit_num])

    return PageResult(
        items=materialized,
        meta=PageMeta(
            current_page=page_num,
            total_pages=total_pages,
            total_items=total,
            limit=limit_num,
            has_next=page_num < total_pages,
            has_prev=page_num > 1,
        ),
    )
