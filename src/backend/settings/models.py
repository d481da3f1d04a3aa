from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..fs.archive_zip import ArchiveLimits
from ..files.content import DEFAULT_CACHE_MAX_AGE


DEFAULT_STORAGE_ROOT = "uploads"


@dataclass
class StorageSettings:
    storage_root: str = DEFAULT_STORAGE_ROOT
    cache_max_age: int = DEFAULT_CACHE_MAX_AGE
    archive: Optional[ArchiveLimits] = None

    def get_archive_limits(self) -> ArchiveLimits:
        """Get archive limits, using defaults if not set."""
        return self.archive or ArchiveLimits()

    def to_persist_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "version": 1,
            "storage_root": self.storage_root,
            "cache_max_age": self.cache_max_age,
        }
        if self.archive is not None:
            data["archive"] = self.archive.to_persist_dict()
        return data

    @classmethod
    def from_persist_dict(cls, data: dict[str, Any]) -> "StorageSettings":
        storage_root = str(data.get("storage_root", DEFAULT_STORAGE_ROOT) or DEFAULT_STORAGE_ROOT)
        try:
            cache_max_age = int(data.get("cache_max_age", DEFAULT_CACHE_MAX_AGE))
        except (TypeError, ValueError):
            cache_max_age = DEFAULT_CACHE_MAX_AGE
        if cache_max_age < 0:
            cache_max_age = DEFAULT_CACHE_MAX_AGE

        raw_archive = data.get("archive")
        archive = None
        if isinstance(raw_archive, dict):
            archive = ArchiveLimits.from_persist_dict(raw_archive)

        return cls(
            storage_root=storage_root,
            cache_max_age=cache_max_age,
            archive=archive,
        )
