from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import DEFAULT_PRIORITY, DESCRIPTION_MAX_LENGTH, PRIORITIES, TITLE_MAX_LENGTH
from .normalizer import parse_datetime, utc_or_none

# Shared type for incoming due_date which can be a date, datetime, or ISO8601 string
DueDateInput = Union[date, datetime, str]


def _parse_due_date(value: Optional[DueDateInput]) -> Optional[datetime]:
    """
    Internal helper to validate due_date input into a datetime (naive allowed).
    - None or '' means no due date.
    - Strings are parsed as ISO8601 date or datetime; dates are set to 00:00.
    - Anything unparseable is rejected (unlike normalization, which degrades to None).
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if not isinstance(value, (date, datetime, str)):
        raise ValueError("Invalid type for due_date; expected date, datetime, or ISO8601 string.")
    parsed = parse_datetime(value)
    if parsed is None:
        raise ValueError(
            "Invalid due_date format. Use ISO8601 date or datetime string (e.g., '2025-01-31' or '2025-01-31T13:45:00')."
        )
    if utc_or_none(parsed) is None:
        raise ValueError("due_date is out of range once converted to UTC.")
    return parsed


def _validate_title(v: str) -> str:
    s = v.strip()
    if not (1 <= len(s) <= TITLE_MAX_LENGTH):
        raise ValueError("title length must be between 1 and 200 characters")
    return s


def _validate_priority(v: str) -> str:
    p = v.strip().lower()
    if p not in PRIORITIES:
        raise ValueError("priority must be one of: low, medium, high")
    return p


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "priority": "high",
                "due_date": "2025-02-01",
            }
        }
    )

    title: str = Field(..., description="Short title for the todo item", min_length=1)
    description: Optional[str] = Field(
        default="", description="Detailed description", max_length=DESCRIPTION_MAX_LENGTH
    )
    completed: bool = Field(default=False, description="Completion status flag")
    priority: str = Field(default=DEFAULT_PRIORITY, description="One of low, medium, high (case-insensitive)")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time of the todo item. Accepts ISO8601 date or datetime; dates are set to 00:00",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        return _validate_title(v)

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: str) -> str:
        return _validate_priority(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        """
        Normalize due_date from str/date/datetime to datetime.
        """
        return _parse_due_date(v)


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries and supplies",
                "priority": "low",
                "completed": True,
                "due_date": "2025-02-02T09:30:00",
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item", min_length=1)
    description: Optional[str] = Field(
        default=None, description="Detailed description", max_length=DESCRIPTION_MAX_LENGTH
    )
    completed: Optional[bool] = Field(default=None, description="Completion status flag")
    priority: Optional[str] = Field(default=None, description="One of low, medium, high (case-insensitive)")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time of the todo item. Accepts ISO8601 date or datetime; null clears it",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        """
        If title is provided, strip whitespace and enforce 1..200 length.
        """
        if v is None:
            return v
        return _validate_title(v)

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _validate_priority(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        return _parse_due_date(v)

    def changes(self) -> Dict[str, Any]:
        """
        The fields explicitly sent by the client, as JSON-compatible values.

        Explicit nulls are kept only for due_date (clearing it); a null
        title, priority or completed flag means 'leave unchanged'.
        """
        delta = self.model_dump(mode="json", exclude_unset=True)
        for key in ("title", "priority", "completed"):
            if key in delta and delta[key] is None:
                del delta[key]
        if "description" in delta:
            delta["description"] = (delta["description"] or "").strip()
        return delta


class AttachmentOut(BaseModel):
    id: str = Field(..., description="Attachment identifier, unique within its todo")
    filename: str = Field(..., description="Stored file name")
    original_name: str = Field(..., description="File name as uploaded")
    mimetype: str = Field(..., description="MIME type")
    size: int = Field(..., description="Size in bytes")
    uploaded_at: datetime = Field(..., description="Upload timestamp")
    url: str = Field(..., description="Path the file can be retrieved from")


class EditHistoryOut(BaseModel):
    edited_at: datetime = Field(..., description="When the update happened")
    changes: Dict[str, Any] = Field(default_factory=dict, description="Fields changed by the update")
    previous_values: Dict[str, Any] = Field(default_factory=dict, description="Values before the update")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "3f2c9a6e1b8d4c0f9e7a5b3d1c2e4f60",
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "priority": "high",
                "due_date": "2025-02-01T00:00:00",
                "created_at": "2025-01-25T10:15:30.123456+00:00",
                "updated_at": "2025-01-26T09:00:00.000001+00:00",
                "attachments": [],
                "edit_history": [],
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    description: str = Field(default="", description="Detailed description")
    completed: bool = Field(default=False, description="Completion status flag")
    priority: str = Field(default=DEFAULT_PRIORITY, description="low, medium or high")
    due_date: Optional[datetime] = Field(
        default=None, description="Due date/time of the todo item as an ISO8601 datetime"
    )
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    imported_at: Optional[datetime] = Field(default=None, description="Set when the todo came from an import")
    attachments: List[AttachmentOut] = Field(default_factory=list, description="Attached files")
    edit_history: List[EditHistoryOut] = Field(default_factory=list, description="Prior states, oldest first")

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: Optional[str]) -> str:
        return v or ""

    @field_validator("priority", mode="before")
    @classmethod
    def lowercase_priority(cls, v: Optional[str]) -> str:
        return (v or DEFAULT_PRIORITY).strip().lower() or DEFAULT_PRIORITY

    @field_validator("due_date", mode="before")
    @classmethod
    def read_due_date(cls, v: Any) -> Optional[datetime]:
        # Stored values that cannot be parsed are reported as no due date
        return parse_datetime(v)


class PaginationMeta(BaseModel):
    current_page: int = Field(..., description="Page returned")
    total_pages: int = Field(..., description="Number of pages (0 when nothing matches)")
    total_items: int = Field(..., description="Number of todos matching the filters")
    limit: int = Field(..., description="Page size")
    has_next: bool = Field(..., description="Whether a later page exists")
    has_prev: bool = Field(..., description="Whether an earlier page exists")


class TodoPage(BaseModel):
    """
    Envelope for paginated list responses.
    """
    items: List[TodoOut] = Field(..., description="Todos on this page")
    pagination: PaginationMeta = Field(..., description="Page metadata")


class DuplicateSummary(BaseModel):
    title: str
    description: str = ""
    priority: Optional[str] = None
    due_date: Optional[Any] = None


class ImportResult(BaseModel):
    total_processed: int = Field(..., description="Entries found in the import file")
    total_imported: int = Field(..., description="Entries stored as new todos")
    total_duplicated: int = Field(..., description="Entries skipped as duplicates of stored todos")
    total_rejected: int = Field(..., description="Entries skipped for having no title")
    new_todos: List[TodoOut] = Field(default_factory=list)
    duplicated_todos: List[DuplicateSummary] = Field(default_factory=list)


class ExportDocument(BaseModel):
    version: str = Field(..., description="Export format version")
    exported_at: datetime = Field(..., description="When the export was produced")
    total: int = Field(..., description="Number of todos exported")
    todos: List[TodoOut] = Field(default_factory=list)


class Statistics(BaseModel):
    total: int
    priority: Dict[str, int]
    status: Dict[str, int]
