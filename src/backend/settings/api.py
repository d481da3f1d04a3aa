from __future__ import annotations

import tempfile
from pathlib import Path

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..files.service import FileStorageEngine
from ..fs.archive_zip import ArchiveLimits
from .models import StorageSettings
from .store import SettingsStore


class StorageRootIn(BaseModel):
    storage_root: str = Field(min_length=1)


class ArchiveLimitsIn(BaseModel):
    max_files: int = Field(ge=1, le=10_000, default=100)
    max_total_bytes: int = Field(ge=1, default=100 * 1024 * 1024)
    max_file_bytes: int = Field(ge=1, default=100 * 1024 * 1024)
    compression_level: int = Field(ge=0, le=9, default=6)


class CacheIn(BaseModel):
    max_age_s: int = Field(ge=0, le=31_536_000)


class ArchiveLimitsOut(BaseModel):
    max_files: int
    max_total_bytes: int
    max_file_bytes: int
    compression_level: int


class SettingsOut(BaseModel):
    storage_root: str
    active_storage_root: str
    cache_max_age: int
    archive: ArchiveLimitsOut


def _public_settings(settings: StorageSettings, *, active_root: Path) -> SettingsOut:
    archive = settings.get_archive_limits()
    return SettingsOut(
        storage_root=settings.storage_root,
        active_storage_root=str(active_root),
        cache_max_age=settings.cache_max_age,
        archive=ArchiveLimitsOut(
            max_files=archive.max_files,
            max_total_bytes=archive.max_total_bytes,
            max_file_bytes=archive.max_file_bytes,
            compression_level=archive.compression_level,
        ),
    )


def resolve_storage_root(storage_root: str, *, base_dir: Path) -> Path:
    raw = storage_root.strip()
    if not raw:
        raise ValueError("Storage root must not be empty")

    p = Path(raw).expanduser()
    if not p.is_absolute():
        p = (base_dir / p).resolve()
    return p


def _ensure_dir_writable(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ValueError(f"Cannot create directory: {exc}") from exc

    if not path.is_dir():
        raise ValueError("Storage root is not a directory")

    try:
        with tempfile.NamedTemporaryFile(prefix=".tfs_write_test_", dir=str(path), delete=True):
            pass
    except PermissionError as exc:
        raise ValueError("Storage root is not writable") from exc
    except OSError as exc:
        raise ValueError(f"Cannot write to storage root: {exc}") from exc


def create_settings_router(
    *, store: SettingsStore, engine: FileStorageEngine, active_root: Path, base_dir: Path
) -> APIRouter:
    router = APIRouter(prefix="/api/settings", tags=["settings"])

    @router.get("", response_model=SettingsOut)
    def get_settings() -> SettingsOut:
        return _public_settings(store.load(), active_root=active_root)

    @router.post("/storage-root", response_model=SettingsOut)
    def set_storage_root(body: StorageRootIn) -> SettingsOut:
        """Takes effect on the next start; active_storage_root shows the root in use."""
        try:
            root = resolve_storage_root(body.storage_root, base_dir=base_dir)
            _ensure_dir_writable(root)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        updated = store.set_value(key="storage_root", value=str(root))
        return _public_settings(updated, active_root=active_root)

    @router.post("/archive-limits", response_model=SettingsOut)
    def set_archive_limits(body: ArchiveLimitsIn) -> SettingsOut:
        limits = ArchiveLimits(
            max_files=body.max_files,
            max_total_bytes=body.max_total_bytes,
            max_file_bytes=body.max_file_bytes,
            compression_level=body.compression_level,
        )

        try:
            updated = store.set_archive_limits(limits)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return _public_settings(updated, active_root=active_root)

    @router.post("/cache", response_model=SettingsOut)
    def set_cache(body: CacheIn) -> SettingsOut:
        """Applies to files served from now on, without a restart."""
        try:
            updated = store.set_cache_max_age(body.max_age_s)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        engine.content.cache_max_age = updated.cache_max_age
        return _public_settings(updated, active_root=active_root)

    return router
