from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

from .normalizer import normalize_priority, parse_datetime, strip_diacritics, to_utc, utc_or_none

T = TypeVar("T", bound=Mapping[str, Any])

SORT_TITLE = "title"
SORT_PRIORITY = "priority"
SORT_DUE_DATE = "due_date"
SORT_CREATED_AT = "created_at"
DEFAULT_SORT = SORT_CREATED_AT

_ALIASES = {"dueDate": SORT_DUE_DATE, "createdAt": SORT_CREATED_AT}

PRIORITY_RANK = {"high": 3, "medium": 2, "low": 1}


def _timestamp(value: Any) -> Optional[float]:
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    moment = utc_or_none(parsed)
    return None if moment is None else moment.timestamp()


def _title_key(todo: Mapping[str, Any]) -> Tuple[str, str]:
    # Accent/case-insensitive first, lowercase before uppercase on ties
    title = str(todo.get("title") or "")
    return strip_diacritics(title.casefold()), title.swapcase()


def _priority_key(todo: Mapping[str, Any]) -> int:
    return -PRIORITY_RANK.get(normalize_priority(todo.get("priority")), 0)


def _due_date_key(now_ts: float) -> Callable[[Mapping[str, Any]], Tuple[int, float]]:
    def key(todo: Mapping[str, Any]) -> Tuple[int, float]:
        due = _timestamp(todo.get("due_date"))
        if due is None:
            return 2, 0.0
        if due < now_ts and not todo.get("completed"):
            # overdue: most recently overdue first
            return 0, -due
        return 1, due

    return key


def _created_at_key(todo: Mapping[str, Any]) -> float:
    ts = _timestamp(todo.get("created_at"))
    return float("-inf") if ts is None else ts


def resolve_sort_key(sort_by: Optional[str]) -> str:
    """Map a requested sort key (camelCase accepted) to a supported one; unknown keys fall back to created_at."""
    key = (sort_by or "").strip()
    key = _ALIASES.get(key, key)
    if key in (SORT_TITLE, SORT_PRIORITY, SORT_DUE_DATE, SORT_CREATED_AT):
        return key
    return DEFAULT_SORT


# PUBLIC_INTERFACE
def sort_todos(todos: Iterable[T], sort_by: Optional[str] = None, now: Optional[datetime] = None) -> List[T]:
    """
    Return a new list of todos ordered by ``sort_by``.

    - title: ascending, accent- and case-insensitive
    - priority: high, medium, low, then unrecognized values
    - due_date: overdue (due before ``now`` and not completed) first, most
      recently overdue leading; then upcoming, soonest first; todos without
      a due date last
    - created_at (default, and fallback for unknown keys): newest first

    The sort is stable: todos with equal keys keep their input order.
    """
    items = list(todos)
    key = resolve_sort_key(sort_by)

    if key == SORT_TITLE:
        return sorted(items, key=_title_key)
    if key == SORT_PRIORITY:
        return sorted(items, key=_priority_key)
    if key == SORT_DUE_DATE:
        moment = to_utc(now) if now is not None else datetime.now(timezone.utc)
        return sorted(items, key=_due_date_key(moment.timestamp()))
    return sorted(items, key=_created_at_key, reverse=True)


SORT_KEYS: Dict[str, str] = {
    SORT_TITLE: "Title, A to Z",
    SORT_PRIORITY: "Priority, highest first",
    SORT_DUE_DATE: "Overdue first, then soonest due, undated last",
    SORT_CREATED_AT: "Newest first",
}
