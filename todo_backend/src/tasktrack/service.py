"""
Todo service: every operation loads the whole collection, computes the new
state with the pure business/query functions and writes the collection back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from . import business
from .errors import NotFoundError, StorageError
from .importer import ImportOutcome, extract_import_items, reconcile
from .models import AttachmentEntity, EditHistoryEntry, TodoEntity
from .query import ListQuery, run_query
from .repositories import Repository
from .schemas import TodoCreate, TodoUpdate
from .uploads import UploadStorage
from .utils import PageResult

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


@dataclass(frozen=True)
class DeleteOutcome:
    todo: TodoEntity
    orphaned_attachments: List[AttachmentEntity]


def _find(todos: List[TodoEntity], todo_id: str) -> Optional[int]:
    for index, todo in enumerate(todos):
        if todo.get("id") == todo_id:
            return index
    return None


# PUBLIC_INTERFACE
class TodoService:
    """
    Operations on the todo collection.

    Lookups by id return None when the todo does not exist so callers can
    map that to their own 'not found' response. The service assumes it is
    the only writer of the underlying store.
    """

    def __init__(self, repository: Repository, uploads: UploadStorage) -> None:
        self.repository = repository
        self.uploads = uploads

    def _load_with_index(self, todo_id: str) -> Tuple[List[TodoEntity], Optional[int]]:
        todos = self.repository.load_all()
        return todos, _find(todos, todo_id)

    def list_todos(self, query: Optional[ListQuery] = None, now: Optional[datetime] = None) -> PageResult[TodoEntity]:
        return run_query(self.repository.load_all(), query, now=now)

    def get_todo(self, todo_id: str) -> Optional[TodoEntity]:
        todos, index = self._load_with_index(todo_id)
        return None if index is None else todos[index]

    def create_todo(self, payload: TodoCreate) -> TodoEntity:
        todos = self.repository.load_all()
        todo = business.build_new_todo(payload.model_dump())
        todos.append(todo)
        self.repository.save_all(todos)
        logger.info("Created todo %s", todo["id"])
        return todo

    def _apply(self, todo_id: str, changes: Dict[str, Any]) -> Optional[TodoEntity]:
        todos, index = self._load_with_index(todo_id)
        if index is None:
            return None
        updated = business.apply_update(todos[index], changes)
        todos[index] = updated
        self.repository.save_all(todos)
        logger.info("Updated todo %s fields=%s", todo_id, sorted(changes))
        return updated

    def update_todo(self, todo_id: str, payload: TodoUpdate) -> Optional[TodoEntity]:
        """Partial update: only fields sent by the client change."""
        return self._apply(todo_id, payload.changes())

    def replace_todo(self, todo_id: str, payload: TodoCreate) -> Optional[TodoEntity]:
        """Full update: every business field takes the payload's value (or its default)."""
        changes = payload.model_dump(mode="json")
        changes["description"] = (changes.get("description") or "").strip()
        return self._apply(todo_id, changes)

    def toggle_todo(self, todo_id: str) -> Optional[TodoEntity]:
        todos, index = self._load_with_index(todo_id)
        if index is None:
            return None
        todos[index] = business.toggle_completed(todos[index])
        self.repository.save_all(todos)
        return todos[index]

    def delete_todo(self, todo_id: str) -> Optional[DeleteOutcome]:
        """Remove a todo and release the files of its attachments."""
        todos, index = self._load_with_index(todo_id)
        if index is None:
            return None
        removed = todos.pop(index)
        self.repository.save_all(todos)

        orphaned = business.orphaned_attachments(removed)
        for attachment in orphaned:
            self.uploads.remove(attachment["filename"])
        logger.info("Deleted todo %s (%d attachment files released)", todo_id, len(orphaned))
        return DeleteOutcome(todo=removed, orphaned_attachments=orphaned)

    def history(self, todo_id: str) -> Optional[List[EditHistoryEntry]]:
        todo = self.get_todo(todo_id)
        return None if todo is None else list(todo.get("edit_history") or [])

    def add_attachment(self, todo_id: str, original_name: str, mimetype: str, content: bytes) -> Optional[TodoEntity]:
        """Store an already validated upload and attach it to the todo."""
        todos, index = self._load_with_index(todo_id)
        if index is None:
            return None

        stored = self.uploads.save(original_name, mimetype, content)
        todo = todos[index]
        attachments = list(todo.get("attachments") or [])
        attachment = business.build_attachment(
            filename=stored.filename,
            original_name=stored.original_name,
            mimetype=stored.mimetype,
            size=stored.size,
            existing_ids={a["id"] for a in attachments},
        )
        todo["attachments"] = [*attachments, attachment]
        todo["updated_at"] = business.timestamp()
        try:
            self.repository.save_all(todos)
        except StorageError:
            # Unreferenced once the save failed
            self.uploads.remove(stored.filename)
            raise
        logger.info("Attached %s to todo %s", stored.filename, todo_id)
        return todo

    def remove_attachment(self, todo_id: str, attachment_id: str) -> Optional[TodoEntity]:
        """
        Detach an attachment and delete its file.

        Returns None when the todo does not exist; raises NotFoundError when
        the todo exists but has no such attachment.
        """
        todos, index = self._load_with_index(todo_id)
        if index is None:
            return None

        todo = todos[index]
        attachments = list(todo.get("attachments") or [])
        match = next((a for a in attachments if a.get("id") == attachment_id), None)
        if match is None:
            raise NotFoundError("Attachment not found")

        todo["attachments"] = [a for a in attachments if a is not match]
        todo["updated_at"] = business.timestamp()
        self.repository.save_all(todos)
        self.uploads.remove(match["filename"])
        return todo

    def import_todos(self, payload: Any) -> ImportOutcome:
        """
        Reconcile a decoded JSON payload against the stored todos and persist
        the accepted ones. Nothing is written when the payload is unusable.
        """
        incoming = extract_import_items(payload)
        todos = self.repository.load_all()
        outcome = reconcile(incoming, todos)
        if outcome.accepted:
            self.repository.save_all([*todos, *outcome.accepted])
        logger.info(
            "Import processed=%d imported=%d duplicated=%d rejected=%d",
            outcome.total_processed,
            outcome.total_imported,
            outcome.total_duplicated,
            outcome.rejected_count,
        )
        return outcome

    def export_todos(self) -> Dict[str, Any]:
        todos = self.repository.load_all()
        return {
            "version": EXPORT_VERSION,
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "total": len(todos),
            "todos": todos,
        }

    def statistics(self) -> Dict[str, Any]:
        return business.calculate_statistics(self.repository.load_all())
