from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from functools import lru_cache
from threading import RLock
from typing import Iterable, List

from .models import TodoEntity
from .settings import get_settings


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Abstract whole-collection store for todos.

    Every mutation is a read-all / compute / write-all cycle; stores never
    update single records.
    """

    @abstractmethod
    def load_all(self) -> List[TodoEntity]:
        """Return every stored todo, in stored order."""

    @abstractmethod
    def save_all(self, todos: Iterable[TodoEntity]) -> None:
        """Replace the stored collection with ``todos``."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and the 'memory' backend.
    """

    def __init__(self, todos: Iterable[TodoEntity] = ()) -> None:
        self._lock = RLock()
        self._items: List[TodoEntity] = copy.deepcopy(list(todos))

    def load_all(self) -> List[TodoEntity]:
        with self._lock:
            # Return copies to avoid external mutation
            return copy.deepcopy(self._items)

    def save_all(self, todos: Iterable[TodoEntity]) -> None:
        with self._lock:
            self._items = copy.deepcopy(list(todos))


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the configured repository based on settings, one per process.
    - json: JsonFileRepository writing DATA_FILE
    - memory: InMemoryRepository
    """
    settings = get_settings()
    if settings.persistence_backend == "memory":
        return InMemoryRepository()

    from .json_store import JsonFileRepository

    return JsonFileRepository(settings.data_file)
