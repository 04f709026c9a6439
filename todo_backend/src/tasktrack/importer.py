"""
Reconciliation of a JSON import batch against the stored todos.

Every incoming entry ends up in exactly one bucket: accepted (ready to be
persisted), duplicate (reported, not persisted) or rejected (no title).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .business import canonical_due_date, canonical_priority, new_id, timestamp
from .duplicates import is_duplicate
from .errors import ImportFormatError
from .models import DEFAULT_PRIORITY, DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH, TodoEntity

# Key spellings used by exports of the earlier JavaScript service
_CAMEL_CASE_KEYS = {
    "dueDate": "due_date",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "importedAt": "imported_at",
    "editHistory": "edit_history",
    "originalName": "original_name",
    "uploadedAt": "uploaded_at",
}

_ATTACHMENT_KEYS = ("id", "filename", "original_name", "mimetype", "size", "uploaded_at", "url")


@dataclass
class ImportOutcome:
    accepted: List[TodoEntity] = field(default_factory=list)
    duplicates: List[Dict[str, Any]] = field(default_factory=list)
    rejected_count: int = 0

    @property
    def total_imported(self) -> int:
        return len(self.accepted)

    @property
    def total_duplicated(self) -> int:
        return len(self.duplicates)

    @property
    def total_processed(self) -> int:
        return self.total_imported + self.total_duplicated + self.rejected_count


# PUBLIC_INTERFACE
def extract_import_items(payload: Any) -> List[Any]:
    """
    Return the list of candidate todos carried by a decoded import payload.

    Accepts either a bare list or an object with a ``todos`` list (the export
    document shape). Anything else raises ImportFormatError.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping) and isinstance(payload.get("todos"), list):
        return payload["todos"]
    raise ImportFormatError("Invalid import format: expected a list of todos or an object with a 'todos' list")


def _snake_case_keys(raw: Mapping[str, Any]) -> Dict[str, Any]:
    entry = dict(raw)
    for camel, snake in _CAMEL_CASE_KEYS.items():
        if camel in entry:
            value = entry.pop(camel)
            entry.setdefault(snake, value)
    return entry


def _attachments(value: Any) -> List[Dict[str, Any]]:
    """Attachment descriptors carried by an imported entry; incomplete ones are dropped."""
    if not isinstance(value, list):
        return []
    result: List[Dict[str, Any]] = []
    seen = set()
    for item in value:
        if not isinstance(item, Mapping):
            continue
        attachment = _snake_case_keys(item)
        if all(attachment.get(key) is not None for key in _ATTACHMENT_KEYS) and attachment["id"] not in seen:
            seen.add(attachment["id"])
            result.append({key: attachment[key] for key in _ATTACHMENT_KEYS})
    return result


def _summary(entry: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "title": str(entry.get("title") or "").strip(),
        "description": str(entry.get("description") or ""),
        "priority": str(entry.get("priority") or DEFAULT_PRIORITY),
        "due_date": entry.get("due_date"),
    }


def _accept(entry: Mapping[str, Any], ts: str) -> TodoEntity:
    return {
        "id": new_id(),
        # Over-long text is cut to the limits enforced on create and update
        "title": str(entry.get("title") or "").strip()[:TITLE_MAX_LENGTH].rstrip(),
        "description": str(entry.get("description") or "").strip()[:DESCRIPTION_MAX_LENGTH].rstrip(),
        "completed": bool(entry.get("completed", False)),
        "priority": canonical_priority(entry.get("priority")),
        "due_date": canonical_due_date(entry.get("due_date")),
        "created_at": ts,
        "updated_at": ts,
        "imported_at": ts,
        "attachments": _attachments(entry.get("attachments")),
        "edit_history": [],
    }


# PUBLIC_INTERFACE
def reconcile(
    incoming: Iterable[Any],
    existing: Iterable[Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> ImportOutcome:
    """
    Classify each incoming entry, in input order, as accepted, duplicate or rejected.

    Duplicates are detected against ``existing`` only (the stored todos before
    this import); entries accepted earlier in the same batch are not
    compared against. Accepted entries get a new id, trimmed text, a
    canonical priority and due date, and created/updated/imported timestamps.

    Raises:
        ImportFormatError: when the batch holds no usable entry at all.
    """
    baseline = list(existing)
    ts = timestamp(now)
    outcome = ImportOutcome()

    for raw in incoming:
        if not isinstance(raw, Mapping):
            outcome.rejected_count += 1
            continue
        entry = _snake_case_keys(raw)
        if not str(entry.get("title") or "").strip():
            outcome.rejected_count += 1
            continue

        if is_duplicate(entry, baseline):
            outcome.duplicates.append(_summary(entry))
        else:
            outcome.accepted.append(_accept(entry, ts))

    if not outcome.accepted and not outcome.duplicates:
        raise ImportFormatError("No valid todos found in import data")
    return outcome
