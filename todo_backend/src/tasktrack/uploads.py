from __future__ import annotations

import logging
import os
import re
import time
from dataclasses import dataclass
from functools import lru_cache

from .errors import StorageError
from .settings import get_settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class StoredFile:
    filename: str
    original_name: str
    mimetype: str
    size: int
    path: str


def _safe_name(original_name: str) -> str:
    base = os.path.basename(original_name.replace("\\", "/"))
    return _UNSAFE_CHARS.sub("_", base).strip("._") or "file"


# PUBLIC_INTERFACE
class UploadStorage:
    """
    Attachment files on local disk.

    Files are stored as '<epoch millis>-<sanitized original name>' directly
    inside ``directory``, which is created on first write.
    """

    def __init__(self, directory: str) -> None:
        self._directory = directory

    @property
    def directory(self) -> str:
        return self._directory

    def save(self, original_name: str, mimetype: str, content: bytes) -> StoredFile:
        filename = f"{int(time.time() * 1000)}-{_safe_name(original_name)}"
        path = os.path.join(self._directory, filename)
        try:
            os.makedirs(self._directory, exist_ok=True)
            with open(path, "wb") as f:
                f.write(content)
        except OSError as e:
            logger.error("Failed to store upload %s: %s", original_name, e)
            raise StorageError(f"Cannot store uploaded file {original_name}") from e
        logger.info("Stored upload %s as %s (%d bytes)", original_name, filename, len(content))
        return StoredFile(
            filename=filename,
            original_name=original_name,
            mimetype=mimetype,
            size=len(content),
            path=path,
        )

    def remove(self, filename: str) -> bool:
        """Delete a stored file. Returns False when it was already gone."""
        path = os.path.join(self._directory, os.path.basename(filename))
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.warning("Attachment file %s already removed", filename)
            return False
        except OSError as e:
            raise StorageError(f"Cannot remove attachment file {filename}") from e
        return True


@lru_cache(maxsize=1)
def get_upload_storage() -> UploadStorage:
    return UploadStorage(get_settings().upload_dir)
