from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, TypeVar

from .normalizer import normalize_priority

T = TypeVar("T", bound=Mapping[str, Any])

STATUS_COMPLETED = "completed"
STATUS_PENDING = "pending"


def _matches_search(todo: Mapping[str, Any], term: str) -> bool:
    title = str(todo.get("title") or "").lower()
    description = str(todo.get("description") or "").lower()
    return term in title or term in description


# PUBLIC_INTERFACE
def filter_todos(
    todos: Iterable[T],
    search: Optional[str] = None,
    priority: Optional[str] = None,
    status: Optional[str] = None,
) -> List[T]:
    """
    Return the todos matching every given predicate (logical AND).

    - search: case-insensitive substring of title or description
    - priority: equality after normalization, so 'High' in storage matches 'high'
    - status: 'completed' or 'pending'; any other value disables the predicate

    Empty or None criteria are ignored. The input is never mutated.
    """
    result = list(todos)

    if search:
        term = search.lower()
        result = [t for t in result if _matches_search(t, term)]

    if priority and priority.strip():
        wanted = normalize_priority(priority)
        result = [t for t in result if normalize_priority(t.get("priority")) == wanted]

    if status == STATUS_COMPLETED:
        result = [t for t in result if t.get("completed") is True]
    elif status == STATUS_PENDING:
        result = [t for t in result if t.get("completed") is not True]

    return result
