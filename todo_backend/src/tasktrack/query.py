from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, TypeVar

from .filters import filter_todos
from .sorting import DEFAULT_SORT, sort_todos
from .utils import DEFAULT_PAGE_SIZE, PageResult, paginate

T = TypeVar("T", bound=Mapping[str, Any])


@dataclass(frozen=True)
class ListQuery:
    """
    Query parameters for listing todos.
    """
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    search: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None  # 'completed', 'pending' or None for all
    sort_by: str = DEFAULT_SORT  # title, priority, due_date, created_at


# PUBLIC_INTERFACE
def run_query(todos: Iterable[T], query: Optional[ListQuery] = None, now: Optional[datetime] = None) -> PageResult[T]:
    """Filter, then sort, then paginate ``todos`` according to ``query``."""
    q = query or ListQuery()
    filtered = filter_todos(todos, search=q.search, priority=q.priority, status=q.status)
    ordered = sort_todos(filtered, q.sort_by, now=now)
    return paginate(ordered, q.page, q.limit)
