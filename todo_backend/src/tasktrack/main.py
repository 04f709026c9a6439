import logging
import os

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .errors import ImportFormatError, NotFoundError, StorageError, TodoError, ValidationError
from .logging_utils import configure_logging
from .routers import todos as todos_router
from .settings import get_settings

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "todos",
        "description": (
            "CRUD operations for Todo items with filtering, sorting, pagination, "
            "attachments and JSON import/export with duplicate detection."
        ),
    },
]

_settings = get_settings()
configure_logging(_settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Task Tracker Backend",
    description="Backend API service for managing todos stored in a JSON file.",
    version="0.2.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_STATUS_BY_ERROR = {
    ValidationError: 400,
    ImportFormatError: 400,
    NotFoundError: 404,
    StorageError: 500,
}


def _readable(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())[1:])
    message = str(error.get("msg", "Invalid value"))
    return f"{location}: {message}" if location else message


# Global exception handlers for consistent JSON on validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "message": "Request validation failed",
            "messages": ["title: Value error, title length must be ..."],
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    errors = exc.errors()
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "messages": [_readable(e) for e in errors],
            "detail": jsonable_encoder(errors),
        },
    )


@app.exception_handler(TodoError)
async def todo_error_handler(request: Request, exc: TodoError) -> JSONResponse:
    """
    Map domain errors to HTTP responses: validation and import format problems
    are 400, missing todos/attachments 404, storage failures 500.
    """
    status_code = _STATUS_BY_ERROR.get(type(exc), 500)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
    detail = exc.messages if isinstance(exc, ValidationError) else exc.message
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.kind, "message": exc.message, "detail": detail},
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


# Include routers
app.include_router(todos_router.router)

# Serve attachment files under the URL stored in each attachment descriptor
os.makedirs(_settings.upload_dir, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=_settings.upload_dir), name="uploads")


def run() -> None:
    """Serve the API with uvicorn (HOST/PORT from the environment)."""
    import uvicorn

    uvicorn.run(
        "src.tasktrack.main:app",
        host=_settings.host,
        port=_settings.port,
        log_level=_settings.log_level.lower(),
    )
