from __future__ import annotations

from typing import Any, Iterable, Mapping

from .normalizer import normalize

COMPARED_FIELDS = ("title", "description", "priority", "due_date")


def _same_todo(a: Mapping[str, Any], b: Mapping[str, Any]) -> bool:
    return all(normalize(field, a.get(field)) == normalize(field, b.get(field)) for field in COMPARED_FIELDS)


# PUBLIC_INTERFACE
def is_duplicate(candidate: Mapping[str, Any], existing: Iterable[Mapping[str, Any]]) -> bool:
    """
    Return True when some single existing todo equals ``candidate`` on title,
    description, priority and due date after normalization.

    A match on only some of the fields never counts.
    """
    return any(_same_todo(candidate, other) for other in existing)
