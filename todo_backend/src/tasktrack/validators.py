"""Checks on uploaded files that happen before anything is written to disk."""

from __future__ import annotations

from typing import List, Optional

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp")
MAX_UPLOAD_BYTES = 5 * 1024 * 1024
MAX_IMPORT_BYTES = 10 * 1024 * 1024


# PUBLIC_INTERFACE
def validate_file_upload(
    filename: Optional[str],
    content_type: Optional[str],
    size: int,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> List[str]:
    """Return the problems with an attachment upload; an empty list means it is acceptable."""
    if not filename:
        return ["No file was uploaded"]

    errors: List[str] = []
    if (content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
        errors.append("Only image files are accepted (JPEG, PNG, GIF, WebP)")
    if size > max_bytes:
        errors.append(f"File is too large. Maximum size is {max_bytes // (1024 * 1024)}MB")
    return errors


# PUBLIC_INTERFACE
def validate_import_file(filename: Optional[str], size: int, max_bytes: int = MAX_IMPORT_BYTES) -> List[str]:
    """Return the problems with an import upload; an empty list means it is acceptable."""
    if not filename:
        return ["No file was uploaded"]

    errors: List[str] = []
    if not filename.lower().endswith(".json"):
        errors.append("Only JSON files are accepted")
    if size > max_bytes:
        errors.append(f"File is too large. Maximum size is {max_bytes // (1024 * 1024)}MB")
    return errors
