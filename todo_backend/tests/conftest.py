import os
import tempfile

# Default to the memory backend and a throwaway upload directory before the app is imported
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="tasktrack-uploads-"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src.tasktrack.main import app  # noqa: E402
from src.tasktrack.repositories import InMemoryRepository, get_repository  # noqa: E402
from src.tasktrack.uploads import UploadStorage, get_upload_storage  # noqa: E402


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def uploads(tmp_path) -> UploadStorage:
    return UploadStorage(str(tmp_path / "uploads"))


@pytest.fixture
def client(repository, uploads):
    """TestClient whose service runs against a fresh in-memory store per test."""
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_upload_storage] = lambda: uploads
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
