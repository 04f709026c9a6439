from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from ..errors import ImportFormatError, NotFoundError, ValidationError
from ..query import ListQuery
from ..repositories import Repository, get_repository
from ..schemas import (
    EditHistoryOut,
    ExportDocument,
    ImportResult,
    PaginationMeta,
    Statistics,
    TodoCreate,
    TodoOut,
    TodoPage,
    TodoUpdate,
)
from ..service import TodoService
from ..settings import Settings, get_settings
from ..sorting import DEFAULT_SORT, SORT_KEYS
from ..uploads import UploadStorage, get_upload_storage
from ..utils import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, coerce_positive_int
from ..validators import validate_file_upload, validate_import_file

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/todos",
    tags=["todos"],
)

TODO_NOT_FOUND = "Todo not found"


def get_todo_service(
    repo: Repository = Depends(get_repository),
    uploads: UploadStorage = Depends(get_upload_storage),
) -> TodoService:
    """
    Dependency wiring the service to the configured store and upload directory.
    """
    return TodoService(repo, uploads)


def _found(item: Optional[Any]) -> Any:
    if item is None:
        raise NotFoundError(TODO_NOT_FOUND)
    return item


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item and return the created resource.",
    responses={
        201: {"description": "Todo created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_todo(payload: TodoCreate, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    """
    Create a new Todo.
    """
    return TodoOut(**service.create_todo(payload))


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=TodoPage,
    summary="List Todos",
    description=(
        "List todos with optional filters, sorting and pagination.\n\n"
        "Query parameters:\n"
        "- page: 1-based page number (invalid values mean 1)\n"
        "- limit: page size, capped at 100 (invalid values mean 10)\n"
        "- search: case-insensitive text matched against title/description\n"
        "- priority: low, medium or high\n"
        "- status: completed or pending\n"
        "- sort_by: " + "; ".join(f"{k} ({v})" for k, v in SORT_KEYS.items()) + "\n\n"
        "Returns the page items and pagination metadata."
    ),
    responses={
        200: {"description": "List retrieved successfully"},
    },
)
def list_todos(
    page: Optional[str] = Query(None, description="Page number, starting at 1; invalid values mean 1"),
    limit: Optional[str] = Query(
        None,
        description=f"Items per page, at most {MAX_PAGE_SIZE}; invalid values mean {DEFAULT_PAGE_SIZE}",
    ),
    search: Optional[str] = Query(None, description="Search text for title/description"),
    priority: Optional[str] = Query(None, description="Filter by priority"),
    status_filter: Optional[str] = Query(None, alias="status", description="completed or pending"),
    sort_by: str = Query(DEFAULT_SORT, description="title, priority, due_date or created_at"),
    service: TodoService = Depends(get_todo_service),
) -> TodoPage:
    """
    List todos with pagination and filters.
    """
    query = ListQuery(
        page=coerce_positive_int(page, 1),
        limit=min(coerce_positive_int(limit, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE),
        search=search.strip() if search else None,
        priority=priority,
        status=status_filter.strip().lower() if status_filter else None,
        sort_by=sort_by,
    )
    result = service.list_todos(query)
    return TodoPage(
        items=[TodoOut(**it) for it in result.items],
        pagination=PaginationMeta(**result.meta.as_dict()),
    )


# PUBLIC_INTERFACE
@router.get(
    "/stats",
    response_model=Statistics,
    summary="Todo Statistics",
    description="Count todos in total, per priority and per completion status.",
)
def get_statistics(service: TodoService = Depends(get_todo_service)) -> Statistics:
    return Statistics(**service.statistics())


# PUBLIC_INTERFACE
@router.get(
    "/export",
    response_model=ExportDocument,
    summary="Export Todos",
    description="Download every todo as a JSON document that can be imported again.",
)
def export_todos(response: Response, service: TodoService = Depends(get_todo_service)) -> ExportDocument:
    document = ExportDocument(**service.export_todos())
    day = document.exported_at.date().isoformat()
    response.headers["Content-Disposition"] = f'attachment; filename="todos-export-{day}.json"'
    return document


# PUBLIC_INTERFACE
@router.post(
    "/import",
    response_model=ImportResult,
    summary="Import Todos",
    description=(
        "Import todos from an uploaded JSON file holding either a list of todos or an "
        "object with a 'todos' list. Entries equal to a stored todo (title, description, "
        "priority and due date, ignoring case and accents) are reported as duplicates "
        "and skipped."
    ),
    responses={
        200: {"description": "Import processed"},
        400: {"description": "Invalid file or import format"},
    },
)
def import_todos(
    file: UploadFile = File(..., description="JSON file to import"),
    settings: Settings = Depends(get_settings),
    service: TodoService = Depends(get_todo_service),
) -> ImportResult:
    content = file.file.read()
    errors = validate_import_file(file.filename, len(content), settings.max_import_bytes)
    if errors:
        logger.warning("Rejected import file %s: %s", file.filename, errors)
        raise ValidationError(errors)

    try:
        payload = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Import file %s is not valid JSON: %s", file.filename, e)
        raise ImportFormatError("Import file is not valid JSON") from e

    outcome = service.import_todos(payload)
    return ImportResult(
        total_processed=outcome.total_processed,
        total_imported=outcome.total_imported,
        total_duplicated=outcome.total_duplicated,
        total_rejected=outcome.rejected_count,
        new_todos=[TodoOut(**t) for t in outcome.accepted],
        duplicated_todos=outcome.duplicates,
    )


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Get Todo",
    description="Get a single Todo item by ID.",
    responses={
        200: {"description": "Todo found"},
        404: {"description": "Todo not found"},
    },
)
def get_todo(todo_id: str, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    """
    Retrieve a single Todo item by its ID.
    """
    return TodoOut(**_found(service.get_todo(todo_id)))


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Replace Todo",
    description=(
        "Replace an existing Todo item. Any fields omitted will be set to their default/null "
        "equivalent as per the schema. The previous values are kept in the edit history."
    ),
    responses={
        200: {"description": "Todo updated"},
        404: {"description": "Todo not found"},
    },
)
def put_todo(todo_id: str, payload: TodoCreate, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    return TodoOut(**_found(service.replace_todo(todo_id, payload)))


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Update Todo",
    description="Partially update fields of a Todo item.",
    responses={
        200: {"description": "Todo updated"},
        404: {"description": "Todo not found"},
    },
)
def patch_todo(todo_id: str, payload: TodoUpdate, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    """
    Partial update of a Todo item.
    """
    return TodoOut(**_found(service.update_todo(todo_id, payload)))


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}/toggle",
    response_model=TodoOut,
    summary="Toggle Todo",
    description="Flip the completion flag of a Todo item.",
    responses={
        200: {"description": "Todo toggled"},
        404: {"description": "Todo not found"},
    },
)
def toggle_todo(todo_id: str, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    return TodoOut(**_found(service.toggle_todo(todo_id)))


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Todo",
    description="Delete a Todo item by ID, together with its attachment files.",
    responses={
        204: {"description": "Todo deleted"},
        404: {"description": "Todo not found"},
    },
)
def delete_todo(todo_id: str, service: TodoService = Depends(get_todo_service)) -> None:
    """
    Delete a Todo. Returns 204 on success, 404 if not found.
    """
    _found(service.delete_todo(todo_id))
    return None


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}/history",
    response_model=List[EditHistoryOut],
    summary="Todo Edit History",
    description="Prior states of a Todo item, oldest first.",
    responses={404: {"description": "Todo not found"}},
)
def get_history(todo_id: str, service: TodoService = Depends(get_todo_service)) -> List[EditHistoryOut]:
    return [EditHistoryOut(**entry) for entry in _found(service.history(todo_id))]


# PUBLIC_INTERFACE
@router.post(
    "/{todo_id}/attachments",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Attach File",
    description="Upload an image (JPEG, PNG, GIF or WebP, up to 5MB) and attach it to a Todo item.",
    responses={
        201: {"description": "File attached"},
        400: {"description": "File rejected"},
        404: {"description": "Todo not found"},
    },
)
def upload_attachment(
    todo_id: str,
    file: UploadFile = File(..., description="Image to attach"),
    settings: Settings = Depends(get_settings),
    service: TodoService = Depends(get_todo_service),
) -> TodoOut:
    content = file.file.read()
    errors = validate_file_upload(file.filename, file.content_type, len(content), settings.max_upload_bytes)
    if errors:
        raise ValidationError(errors)
    todo = service.add_attachment(todo_id, file.filename or "file", file.content_type or "", content)
    return TodoOut(**_found(todo))


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}/attachments/{attachment_id}",
    response_model=TodoOut,
    summary="Remove Attachment",
    description="Detach a file from a Todo item and delete it.",
    responses={
        200: {"description": "Attachment removed"},
        404: {"description": "Todo or attachment not found"},
    },
)
def remove_attachment(todo_id: str, attachment_id: str, service: TodoService = Depends(get_todo_service)) -> TodoOut:
    return TodoOut(**_found(service.remove_attachment(todo_id, attachment_id)))
