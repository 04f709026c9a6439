from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from typing import Generator, Iterable, List, TextIO

from .errors import StorageError
from .models import TodoEntity
from .repositories import Repository

logger = logging.getLogger(__name__)


class JsonFileRepository(Repository):
    """
    Repository persisting the whole todo list as one JSON array in a file.

    The file (and its directory) is created on first use. Writes go to a
    temporary file in the same directory which then replaces the data file,
    so readers never see a half-written document. There is no locking:
    callers must serialize writers.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._init_file()

    @property
    def path(self) -> str:
        return self._path

    def _init_file(self) -> None:
        try:
            os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
            if not os.path.exists(self._path):
                self.save_all([])
                logger.info("Created empty todo data file at %s", self._path)
        except OSError as e:
            raise StorageError(f"Cannot initialise data file {self._path}: {e}") from e

    @contextmanager
    def _atomic_writer(self) -> Generator[TextIO, None, None]:
        directory = os.path.dirname(self._path) or "."
        fd, tmp_path = tempfile.mkstemp(prefix=".todos-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yield f
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def load_all(self) -> List[TodoEntity]:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read todo data file %s: %s", self._path, e)
            raise StorageError(f"Cannot read todos from {self._path}") from e

        if not isinstance(data, list):
            raise StorageError(f"Todo data file {self._path} does not contain a JSON array")
        return data

    def save_all(self, todos: Iterable[TodoEntity]) -> None:
        items = list(todos)
        try:
            with self._atomic_writer() as f:
                json.dump(items, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to write todo data file %s: %s", self._path, e)
            raise StorageError(f"Cannot write todos to {self._path}") from e
        logger.debug("Wrote %d todos to %s", len(items), self._path)
