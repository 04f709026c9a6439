from __future__ import annotations

from typing import Iterable, List, Optional


class TodoError(Exception):
    """Base class for errors raised by the todo core and its collaborators."""

    kind = "TodoError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# PUBLIC_INTERFACE
class ValidationError(TodoError):
    """
    Field-level validation failure.

    Carries a list of human-readable messages so callers can report every
    problem at once instead of stopping at the first one.
    """

    kind = "ValidationError"

    def __init__(self, messages: Iterable[str], message: Optional[str] = None) -> None:
        self.messages: List[str] = list(messages)
        super().__init__(message or "; ".join(self.messages) or "Validation failed")


# PUBLIC_INTERFACE
class NotFoundError(TodoError):
    """A record (or attachment) addressed by id does not exist."""

    kind = "NotFoundError"


# PUBLIC_INTERFACE
class ImportFormatError(TodoError):
    """The import payload is not a list of todos, or has no usable entries."""

    kind = "ImportFormatError"


# PUBLIC_INTERFACE
class StorageError(TodoError):
    """Reading or writing the record store (or upload directory) failed."""

    kind = "StorageError"
