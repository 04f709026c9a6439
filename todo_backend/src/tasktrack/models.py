from __future__ import annotations

from typing import Any, Dict, List, Optional, TypedDict

PRIORITIES = ("low", "medium", "high")
DEFAULT_PRIORITY = "medium"
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000


# PUBLIC_INTERFACE
class AttachmentEntity(TypedDict):
    """
    Descriptor of a file attached to a todo.

    Fields:
    - id: Identifier unique within the owning todo
    - filename: Name of the stored file inside the upload directory
    - original_name: File name as uploaded by the client
    - mimetype: MIME type reported at upload time
    - size: Size in bytes
    - uploaded_at: ISO8601 UTC timestamp
    - url: Retrieval path, '/uploads/<filename>'
    """

    id: str
    filename: str
    original_name: str
    mimetype: str
    size: int
    uploaded_at: str
    url: str


class EditHistoryEntry(TypedDict):
    """One prior state of a todo, recorded before an update is applied."""

    edited_at: str
    changes: Dict[str, Any]
    previous_values: Dict[str, Any]


# PUBLIC_INTERFACE
class TodoEntity(TypedDict, total=False):
    """
    A todo record as held by the record store (plain JSON-compatible dict).

    Fields:
    - id: Opaque unique string, never reassigned
    - title: Short title (1..200 chars after trimming)
    - description: Detailed description, '' by default
    - completed: Boolean completion flag
    - priority: 'low', 'medium' or 'high'
    - due_date: Optional ISO8601 date/datetime string
    - created_at / updated_at: ISO8601 UTC timestamps
    - imported_at: Set on records created by a JSON import
    - attachments: Ordered attachment descriptors
    - edit_history: Append-only log of prior states
    """

    id: str
    title: str
    description: str
    completed: bool
    priority: str
    due_date: Optional[str]
    created_at: str
    updated_at: str
    imported_at: str
    attachments: List[AttachmentEntity]
    edit_history: List[EditHistoryEntry]
