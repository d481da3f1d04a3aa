"""
Models for file storage operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, BinaryIO, Optional
from urllib.parse import quote


class EntryKind(str, Enum):
    """Kind of a stored entry."""
    FILE = "file"
    FOLDER = "folder"


@dataclass(frozen=True)
class Entry:
    """
    A file or folder inside a tenant root.

    ``id`` and ``path`` are the same tenant-anchored path ("/gallery/a.png").
    """
    id: str
    name: str
    kind: EntryKind
    modified_at: datetime
    path: str
    size: Optional[int] = None  # Files only

    def to_public_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.kind.value,
            "modified": self.modified_at.date().isoformat(),
            "path": self.path,
        }
        if self.size is not None:
            data["size"] = self.size
        return data


@dataclass
class UploadItem:
    """
    An incoming byte stream.

    ``name`` may embed sub-paths for folder uploads ("images/thumbs/a.png").
    """
    name: str
    stream: BinaryIO


@dataclass(frozen=True)
class UploadSummary:
    """A file persisted by an upload; etag matches what serving the file reports."""
    name: str
    size: int
    path: str
    etag: str

    def to_public_dict(self) -> dict[str, Any]:
        return {"name": self.name, "size": self.size, "path": self.path, "etag": self.etag}


@dataclass(frozen=True)
class ItemFailure:
    """A single item skipped during a batch operation."""
    name: str
    error: str

    def to_public_dict(self) -> dict[str, Any]:
        return {"name": self.name, "error": self.error}


@dataclass
class UploadResult:
    """Outcome of an upload batch."""
    files: list[UploadSummary] = field(default_factory=list)
    failed: list[ItemFailure] = field(default_factory=list)


@dataclass(frozen=True)
class RemovalResult:
    """Outcome of removing one entry."""
    path: str
    permanent: bool
    trash_path: Optional[str] = None  # Set for soft deletes


@dataclass
class BulkRemovalResult:
    """Outcome of removing several entries."""
    removed: list[RemovalResult] = field(default_factory=list)
    failed: list[ItemFailure] = field(default_factory=list)


def content_disposition(filename: str) -> str:
    """
    Build an attachment Content-Disposition value.

    The name is percent-encoded (RFC 5987) so non-ASCII names survive.
    """
    return f"attachment; filename*=UTF-8''{quote(filename, safe='')}"


@dataclass(frozen=True)
class ServedContent:
    """Bytes of one stored file plus what a transport needs to send them."""
    data: bytes
    content_type: str
    size: int
    filename: str
    modified_at: datetime
    etag: str
    cache_max_age: int

    def inline_headers(self) -> dict[str, str]:
        return {
            "Content-Type": self.content_type,
            "Content-Length": str(self.size),
            "Cache-Control": f"public, max-age={self.cache_max_age}",
            "ETag": f'"{self.etag}"',
        }

    def attachment_headers(self) -> dict[str, str]:
        return {
            "Content-Type": self.content_type,
            "Content-Length": str(self.size),
            "Content-Disposition": content_disposition(self.filename),
        }
