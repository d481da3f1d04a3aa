"""
Error taxonomy for file storage operations.

Every failure carries a stable ``code`` so callers can render a specific
message. Storage-medium faults are wrapped in InternalStorageError and never
expose the underlying OSError text.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator


logger = logging.getLogger(__name__)


class FileStorageError(Exception):
    """Base class for all file storage failures."""

    code = "internal"
    default_message = "Internal storage error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidPathError(FileStorageError):
    code = "invalid_path"
    default_message = "Invalid file path"


class InvalidNameError(FileStorageError):
    code = "invalid_name"
    default_message = "Invalid name"


class TenantRequiredError(FileStorageError):
    code = "tenant_required"
    default_message = "Tenant ID required"


class NotFoundError(FileStorageError):
    code = "not_found"
    default_message = "File not found"


class IsDirectoryError(FileStorageError):
    code = "is_directory"
    default_message = "Cannot access directory"


class AlreadyExistsError(FileStorageError):
    code = "already_exists"
    default_message = "Already exists"


class NoFilesProvidedError(FileStorageError):
    code = "no_files_provided"
    default_message = "No files provided"


class TooManyFilesError(FileStorageError):
    code = "too_many_files"
    default_message = "Too many files"

    def __init__(self, limit: int) -> None:
        super().__init__(f"Maximum {limit} files allowed")
        self.limit = limit


class TotalSizeExceededError(FileStorageError):
    code = "total_size_exceeded"
    default_message = "Total file size exceeds limit"

    def __init__(self, limit_bytes: int) -> None:
        super().__init__(f"Total file size exceeds {limit_bytes} bytes limit")
        self.limit_bytes = limit_bytes


class NoValidFilesError(FileStorageError):
    code = "no_valid_files"
    default_message = "No valid files found"


class InternalStorageError(FileStorageError):
    code = "internal"
    default_message = "Internal storage error"


@contextmanager
def internal_errors(action: str, target: object) -> Iterator[None]:
    """
    Classify unexpected medium faults as InternalStorageError.

    FileStorageError passes through untouched; any other OSError is logged
    with its traceback and replaced by a generic error.
    """
    try:
        yield
    except FileStorageError:
        raise
    except OSError as exc:
        logger.exception("Storage failure while %s: %s", action, target)
        raise InternalStorageError() from exc
