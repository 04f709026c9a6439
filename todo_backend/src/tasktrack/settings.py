from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'json' (default) or 'memory'
    - DATA_FILE: path to the JSON file holding all todos. Default './data/todos.json'
    - UPLOAD_DIR: directory for attachment files. Default './uploads'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name (default: INFO)
    - MAX_UPLOAD_BYTES: maximum attachment size in bytes (default: 5 MB)
    - MAX_IMPORT_BYTES: maximum import file size in bytes (default: 10 MB)
    - HOST / PORT: address uvicorn binds to (default: 127.0.0.1:8000)
    """

    persistence_backend: str
    data_file: str
    upload_dir: str
    cors_allow_origins: List[str]
    log_level: str
    max_upload_bytes: int
    max_import_bytes: int
    host: str
    port: int


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "json").strip().lower()
    if backend not in {"json", "memory"}:
        backend = "json"

    return Settings(
        persistence_backend=backend,
        data_file=_get_env("DATA_FILE", "./data/todos.json").strip(),
        upload_dir=_get_env("UPLOAD_DIR", "./uploads").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        max_upload_bytes=_parse_int(_get_env("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)), 5 * 1024 * 1024),
        max_import_bytes=_parse_int(_get_env("MAX_IMPORT_BYTES", str(10 * 1024 * 1024)), 10 * 1024 * 1024),
        host=_get_env("HOST", "127.0.0.1").strip(),
        port=_parse_int(_get_env("PORT", "8000"), 8000),
    )
