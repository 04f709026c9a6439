"""
Business rules for building and mutating todo records.

Functions here are pure: they receive plain dicts and return new dicts,
leaving persistence to the service layer.
"""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Collection, Dict, List, Mapping, Optional

from .models import DEFAULT_PRIORITY, PRIORITIES, AttachmentEntity, EditHistoryEntry, TodoEntity
from .normalizer import normalize_priority, parse_datetime

MUTABLE_FIELDS = ("title", "description", "priority", "due_date", "completed")
UPLOADS_URL_PREFIX = "/uploads"


def new_id() -> str:
    return uuid.uuid4().hex


def timestamp(now: Optional[datetime] = None) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def canonical_due_date(value: Any) -> Optional[str]:
    """Storage form of a due date: ISO8601 string, or None when absent or unparseable."""
    parsed = parse_datetime(value)
    return parsed.isoformat() if parsed is not None else None


def canonical_priority(value: Any) -> str:
    priority = normalize_priority(value)
    return priority if priority in PRIORITIES else DEFAULT_PRIORITY


# PUBLIC_INTERFACE
def build_new_todo(data: Mapping[str, Any], now: Optional[datetime] = None) -> TodoEntity:
    """Create a new todo record from validated input with a fresh id and timestamps."""
    ts = timestamp(now)
    return {
        "id": new_id(),
        "title": str(data.get("title") or "").strip(),
        "description": str(data.get("description") or "").strip(),
        "completed": bool(data.get("completed", False)),
        "priority": canonical_priority(data.get("priority")),
        "due_date": canonical_due_date(data.get("due_date")),
        "created_at": ts,
        "updated_at": ts,
        "attachments": [],
        "edit_history": [],
    }


# PUBLIC_INTERFACE
def apply_update(existing: TodoEntity, changes: Mapping[str, Any], now: Optional[datetime] = None) -> TodoEntity:
    """
    Return ``existing`` with ``changes`` applied.

    The values of the business fields before the update are appended to the
    edit history together with the delta. Only title, description, priority,
    due_date and completed can change; other keys in ``changes`` are ignored.
    """
    delta: Dict[str, Any] = {k: v for k, v in changes.items() if k in MUTABLE_FIELDS}
    ts = timestamp(now)

    entry: EditHistoryEntry = {
        "edited_at": ts,
        "changes": copy.deepcopy(delta),
        "previous_values": {field: existing.get(field) for field in MUTABLE_FIELDS},
    }

    updated: TodoEntity = copy.deepcopy(existing)
    updated.update(delta)  # type: ignore[typeddict-item]
    updated["updated_at"] = ts
    updated["edit_history"] = [*(updated.get("edit_history") or []), entry]
    return updated


def toggle_completed(existing: TodoEntity, now: Optional[datetime] = None) -> TodoEntity:
    return apply_update(existing, {"completed": not existing.get("completed", False)}, now=now)


# PUBLIC_INTERFACE
def build_attachment(
    filename: str,
    original_name: str,
    mimetype: str,
    size: int,
    existing_ids: Collection[str] = (),
    now: Optional[datetime] = None,
) -> AttachmentEntity:
    """Shape a stored upload into an attachment descriptor whose id is unique within the todo."""
    attachment_id = new_id()
    while attachment_id in existing_ids:
        attachment_id = new_id()
    return {
        "id": attachment_id,
        "filename": filename,
        "original_name": original_name,
        "mimetype": mimetype,
        "size": int(size),
        "uploaded_at": timestamp(now),
        "url": f"{UPLOADS_URL_PREFIX}/{filename}",
    }


def orphaned_attachments(todo: Mapping[str, Any]) -> List[AttachmentEntity]:
    """Attachments whose stored files are released when ``todo`` is deleted."""
    return list(todo.get("attachments") or [])


# PUBLIC_INTERFACE
def calculate_statistics(todos: Collection[Mapping[str, Any]]) -> Dict[str, Any]:
    """Count todos in total, per (normalized) priority and per completion status."""
    priorities = [normalize_priority(t.get("priority")) for t in todos]
    completed = sum(1 for t in todos if t.get("completed") is True)
    return {
        "total": len(todos),
        "priority": {p: priorities.count(p) for p in ("high", "medium", "low")},
        "status": {
            "completed": completed,
            "pending": len(todos) - completed,
        },
    }
