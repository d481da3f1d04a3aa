"""
Tenant-isolated file operations.

Provides:
- FileStorageEngine: facade over every operation
- EntryLister, DirectoryMutator, TrashManager, ContentServer,
  UploadIngestor, ArchiveExporter: the individual components
- File API router
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from .models import Entry, EntryKind, UploadItem, UploadSummary, ServedContent, content_disposition
from .lister import EntryLister
from .folders import DirectoryMutator
from .trash import TrashManager
from .content import ContentServer
from .uploads import UploadIngestor
from .exporter import ArchiveExporter
from .service import FileStorageEngine

if TYPE_CHECKING:
    from src.backend.fs import ArchiveLimits
    from fastapi import APIRouter  # pragma: no cover


def create_files_router(
    *,
    engine: FileStorageEngine,
    archive_limits: "Callable[[], ArchiveLimits]",
) -> "APIRouter":
    """
    Lazily import FastAPI router to keep non-web imports lightweight.
    """
    from .api import create_files_router as _create_files_router

    return _create_files_router(engine=engine, archive_limits=archive_limits)

__all__ = [
    "Entry",
    "EntryKind",
    "UploadItem",
    "UploadSummary",
    "ServedContent",
    "content_disposition",
    "EntryLister",
    "DirectoryMutator",
    "TrashManager",
    "ContentServer",
    "UploadIngestor",
    "ArchiveExporter",
    "FileStorageEngine",
    "create_files_router",
]
