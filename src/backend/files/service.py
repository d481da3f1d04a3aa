"""
File storage engine: one medium and one resolver shared by every operation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from src.backend.fs import (
    ArchiveLimits,
    ArchiveResult,
    LocalStorageMedium,
    StorageMedium,
    TenantPathResolver,
)

from .content import DEFAULT_CACHE_MAX_AGE, ContentServer
from .exporter import ArchiveExporter
from .folders import DirectoryMutator
from .lister import EntryLister
from .models import (
    BulkRemovalResult,
    Entry,
    RemovalResult,
    ServedContent,
    UploadItem,
    UploadResult,
)
from .trash import TrashManager
from .uploads import UploadIngestor


class FileStorageEngine:
    """
    Tenant-isolated file operations.

    Usage:
        engine = FileStorageEngine.local(Path("uploads"))
        engine.create_folder("acme", "/", "gallery")
        engine.ingest("acme", "/gallery", [UploadItem("a.png", stream)])
        entries = engine.list("acme", "/gallery")
        engine.remove("acme", "/gallery/a.png")          # -> /.trash/a.png
        engine.remove("acme", "/.trash/a.png")           # gone for good
    """

    def __init__(
        self,
        medium: StorageMedium,
        *,
        cache_max_age: int = DEFAULT_CACHE_MAX_AGE,
        trash: Optional[TrashManager] = None,
    ):
        self.medium = medium
        self.resolver = TenantPathResolver(medium)
        self.lister = EntryLister(medium, self.resolver)
        self.folders = DirectoryMutator(medium, self.resolver)
        self.trash = trash or TrashManager(medium, self.resolver)
        self.content = ContentServer(medium, self.resolver, cache_max_age=cache_max_age)
        self.uploads = UploadIngestor(medium, self.resolver)
        self.exporter = ArchiveExporter(medium, self.resolver)

    @classmethod
    def local(cls, root: Path, **kwargs) -> "FileStorageEngine":
        """Create an engine storing tenant roots under a local directory."""
        return cls(LocalStorageMedium(root), **kwargs)

    def list(self, tenant_id: str, directory: str = "/") -> list[Entry]:
        return self.lister.list(tenant_id, directory)

    def create_folder(self, tenant_id: str, parent_dir: str, name: str) -> Entry:
        return self.folders.create_folder(tenant_id, parent_dir, name)

    def remove(self, tenant_id: str, path: str) -> RemovalResult:
        return self.trash.remove(tenant_id, path)

    def remove_many(self, tenant_id: str, paths: Sequence[str]) -> BulkRemovalResult:
        return self.trash.remove_many(tenant_id, paths)

    def read(self, tenant_id: str, path: str) -> ServedContent:
        return self.content.read(tenant_id, path)

    def ingest(self, tenant_id: str, target_dir: str, items: Sequence[UploadItem]) -> UploadResult:
        return self.uploads.ingest(tenant_id, target_dir, items)

    def export(
        self,
        tenant_id: str,
        paths: Sequence[str],
        limits: Optional[ArchiveLimits] = None,
    ) -> ArchiveResult:
        return self.exporter.export(tenant_id, paths, limits)
