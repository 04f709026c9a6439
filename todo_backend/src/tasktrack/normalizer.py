"""
Canonical forms of todo fields, used for equality comparison only.

Normalized values are never stored or displayed. Every function here is
total: bad input degrades to an empty/default value instead of raising.
"""

from __future__ import annotations

import unicodedata
from datetime import date, datetime, timezone
from typing import Any, Optional

from .models import DEFAULT_PRIORITY


def strip_diacritics(text: str) -> str:
    """Decompose to base letters + combining marks and drop the marks ('Café' -> 'Cafe')."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


# PUBLIC_INTERFACE
def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a date, datetime or ISO8601 string; return None when it cannot be parsed.

    Dates without a time component are promoted to midnight (naive). A
    trailing 'Z' is read as UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    s = value.strip()
    if not s:
        return None
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        pass
    try:
        d = date.fromisoformat(s)
    except ValueError:
        return None
    return datetime(d.year, d.month, d.day)


def to_utc(moment: datetime) -> datetime:
    """Make a datetime timezone-aware in UTC; naive values are taken as local time."""
    return moment.astimezone(timezone.utc)


def utc_or_none(moment: datetime) -> Optional[datetime]:
    """``to_utc``, or None when the UTC value falls outside the datetime range."""
    try:
        return to_utc(moment)
    except (OverflowError, ValueError, OSError):
        return None


def normalize_text(value: Any) -> str:
    if value is None:
        return ""
    return strip_diacritics(str(value).strip().lower())


def normalize_priority(value: Any) -> str:
    if value is None:
        return DEFAULT_PRIORITY
    s = str(value).strip().lower()
    return s or DEFAULT_PRIORITY


def normalize_due_date(value: Any) -> Optional[str]:
    """Canonical 'YYYY-MM-DD' of a due date, or None when absent/unparseable."""
    if value is None or value == "":
        return None
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    if parsed.tzinfo is not None:
        parsed = utc_or_none(parsed)
        if parsed is None:
            return None
    return parsed.date().isoformat()


_NORMALIZERS = {
    "title": normalize_text,
    "description": normalize_text,
    "priority": normalize_priority,
    "due_date": normalize_due_date,
}


# PUBLIC_INTERFACE
def normalize(field: str, value: Any) -> Any:
    """
    Return the canonical form of ``value`` for ``field``.

    - title/description: trimmed, lowercased, diacritics removed; None -> ''
    - priority: trimmed and lowercased; empty -> 'medium'
    - due_date: 'YYYY-MM-DD' or None
    - any other field: returned unchanged
    """
    normalizer = _NORMALIZERS.get(field)
    if normalizer is None:
        return value
    return normalizer(value)
