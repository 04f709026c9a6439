import json

import pytest

from src.tasktrack.errors import StorageError
from src.tasktrack.json_store import JsonFileRepository
from src.tasktrack.repositories import InMemoryRepository
from src.tasktrack.uploads import UploadStorage


class TestInMemoryRepository:
    def test_returns_copies(self):
        repo = InMemoryRepository([{"id": "1", "title": "a"}])
        loaded = repo.load_all()
        loaded[0]["title"] = "changed"
        loaded.append({"id": "2"})
        assert repo.load_all() == [{"id": "1", "title": "a"}]

    def test_save_replaces_collection(self):
        repo = InMemoryRepository([{"id": "1"}])
        repo.save_all([{"id": "2"}, {"id": "3"}])
        assert [t["id"] for t in repo.load_all()] == ["2", "3"]


class TestJsonFileRepository:
    def test_creates_directory_and_empty_file(self, tmp_path):
        path = tmp_path / "nested" / "todos.json"
        repo = JsonFileRepository(str(path))
        assert path.exists()
        assert json.loads(path.read_text(encoding="utf-8")) == []
        assert repo.load_all() == []

    def test_existing_file_is_kept(self, tmp_path):
        path = tmp_path / "todos.json"
        path.write_text(json.dumps([{"id": "keep"}]), encoding="utf-8")
        assert JsonFileRepository(str(path)).load_all() == [{"id": "keep"}]

    def test_save_then_load(self, tmp_path):
        repo = JsonFileRepository(str(tmp_path / "todos.json"))
        todos = [{"id": "1", "title": "Café"}, {"id": "2", "title": "Tea"}]
        repo.save_all(todos)
        assert repo.load_all() == todos
        assert list(tmp_path.iterdir()) == [tmp_path / "todos.json"]

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "todos.json"
        repo = JsonFileRepository(str(path))
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            repo.load_all()

    def test_non_list_document_raises_storage_error(self, tmp_path):
        path = tmp_path / "todos.json"
        repo = JsonFileRepository(str(path))
        path.write_text(json.dumps({"todos": []}), encoding="utf-8")
        with pytest.raises(StorageError):
            repo.load_all()

    def test_unserializable_value_raises_storage_error(self, tmp_path):
        repo = JsonFileRepository(str(tmp_path / "todos.json"))
        with pytest.raises(StorageError):
            repo.save_all([{"id": object()}])
        assert repo.load_all() == []


class TestUploadStorage:
    def test_save_and_remove(self, tmp_path):
        storage = UploadStorage(str(tmp_path / "uploads"))
        stored = storage.save("../my photo.png", "image/png", b"\x89PNG")
        assert stored.filename.endswith("-my_photo.png")
        assert stored.size == 4
        assert (tmp_path / "uploads" / stored.filename).read_bytes() == b"\x89PNG"

        assert storage.remove(stored.filename) is True
        assert storage.remove(stored.filename) is False
