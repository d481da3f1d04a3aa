"""
Archive utilities for packing selected files into a single zip.

Members are stored flat under their base names; the archive is built in
memory and handed back as one byte string.
"""

from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import NamedTuple

from .errors import TotalSizeExceededError
from .naming import find_available_name


DEFAULT_MAX_FILES = 100
DEFAULT_MAX_TOTAL_BYTES = 100 * 1024 * 1024  # 100 MB
DEFAULT_MAX_FILE_BYTES = 100 * 1024 * 1024  # 100 MB
DEFAULT_COMPRESSION_LEVEL = 6  # Favors speed over ratio


@dataclass
class ArchiveLimits:
    """
    Limits applied to one archive export.

    Attributes:
        max_files: Maximum number of requested paths.
        max_total_bytes: Cap on the summed size of included members.
        max_file_bytes: Members larger than this are skipped.
        compression_level: Deflate level (0-9).
    """
    max_files: int = DEFAULT_MAX_FILES
    max_total_bytes: int = DEFAULT_MAX_TOTAL_BYTES
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    compression_level: int = DEFAULT_COMPRESSION_LEVEL

    def validate(self) -> tuple[bool, str]:
        """Check the limits are usable; returns (ok, error message)."""
        if self.max_files < 1:
            return False, "max_files must be >= 1"
        if self.max_total_bytes < 1:
            return False, "max_total_bytes must be >= 1"
        if self.max_file_bytes < 1:
            return False, "max_file_bytes must be >= 1"
        if not 0 <= self.compression_level <= 9:
            return False, "compression_level must be between 0 and 9"
        return True, ""

    def to_persist_dict(self) -> dict:
        return {
            "max_files": self.max_files,
            "max_total_bytes": self.max_total_bytes,
            "max_file_bytes": self.max_file_bytes,
            "compression_level": self.compression_level,
        }

    @classmethod
    def from_persist_dict(cls, data: dict) -> "ArchiveLimits":
        defaults = cls()
        values = {}
        for name in ("max_files", "max_total_bytes", "max_file_bytes", "compression_level"):
            try:
                values[name] = int(data.get(name, getattr(defaults, name)))
            except (TypeError, ValueError):
                values[name] = getattr(defaults, name)
        limits = cls(**values)
        ok, _ = limits.validate()
        return limits if ok else defaults


class ArchiveResult(NamedTuple):
    """Result of an archive export."""
    data: bytes
    filename: str
    files_archived: int
    bytes_archived: int
    skipped: list[str]


def generate_archive_name(prefix: str = "files") -> str:
    """
    Generate a timestamped archive filename.

    Format: {prefix}_archive_{YYYYMMDD_HHMMSS}.zip
    """
    now = datetime.now(timezone.utc)
    timestamp = now.strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_archive_{timestamp}.zip"


class ArchiveJob:
    """
    In-memory zip under construction with a running byte count.

    Usage:
        job = ArchiveJob(limits)
        job.add("a.txt", data)  # raises TotalSizeExceededError past the cap
        payload = job.finish()
    """

    def __init__(self, limits: ArchiveLimits):
        self._limits = limits
        self._buffer = io.BytesIO()
        self._zip = zipfile.ZipFile(
            self._buffer,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=limits.compression_level,
        )
        self._names: set[str] = set()
        self._total_bytes = 0

    @property
    def member_count(self) -> int:
        return len(self._names)

    @property
    def total_bytes(self) -> int:
        return self._total_bytes

    def add(self, name: str, data: bytes) -> str:
        """
        Add a member under a flat name.

        A repeated name gets a numbered suffix (a.txt, a_1.txt, ...).

        Returns:
            The name actually used inside the archive.

        Raises:
            TotalSizeExceededError: If the running total passes the cap.
        """
        arcname = find_available_name(name, lambda candidate: candidate in self._names)
        self._zip.writestr(arcname, data)
        self._names.add(arcname)
        self._total_bytes += len(data)

        if self._total_bytes > self._limits.max_total_bytes:
            self.close()
            raise TotalSizeExceededError(self._limits.max_total_bytes)
        return arcname

    def finish(self) -> bytes:
        """Close the archive and return its bytes."""
        self._zip.close()
        return self._buffer.getvalue()

    def close(self) -> None:
        """Discard the archive."""
        self._zip.close()
        self._buffer.close()
