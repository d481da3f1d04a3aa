"""
Upload ingestion.

Folder uploads send names with embedded sub-paths; the sub-path is appended
to the target directory and missing directories are created:

    target "/gallery" + item "images/thumbs/a.png"
        -> /gallery/images/thumbs/a.png

Files are written last-write-wins: an existing file at the exact target
path is overwritten.
The trash folder name directly under the tenant root is reserved and never
written as a file.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Sequence

from src.backend.fs import ResolvedPath, StorageMedium, TenantPathResolver
from src.backend.fs.errors import NoFilesProvidedError
from src.backend.fs.hashing import StreamHasher, copy_stream

from .models import ItemFailure, UploadItem, UploadResult, UploadSummary


class _PlannedWrite(NamedTuple):
    item: UploadItem
    target: ResolvedPath


def split_upload_name(name: str) -> list[str]:
    """Split a declared upload name into path segments."""
    return [s for s in name.replace("\\", "/").split("/") if s and s != "."]


class UploadIngestor:
    """Persists batches of uploaded byte streams under a target directory."""

    def __init__(self, medium: StorageMedium, resolver: TenantPathResolver):
        self._medium = medium
        self._resolver = resolver
        self._log = logging.getLogger(__name__)

    def ingest(self, tenant_id: str, target_dir: str, items: Sequence[UploadItem]) -> UploadResult:
        """
        Write uploaded items.

        Every item's destination is validated before anything is written, so
        an invalid path fails the whole batch without side effects. Storage
        failures while writing are recorded per item and the batch goes on.

        Args:
            tenant_id: Trusted tenant identifier.
            target_dir: Tenant-anchored directory receiving the files.
            items: Uploaded streams, names may embed sub-paths.

        Returns:
            UploadResult with one summary per written file and the failures.

        Raises:
            TenantRequiredError: If tenant_id is missing.
            NoFilesProvidedError: If items is empty.
            InvalidPathError: If the target or any item path is invalid.
        """
        self._resolver.tenant_root(tenant_id)
        if not items:
            raise NoFilesProvidedError()

        base = self._resolver.resolve_entry(tenant_id, target_dir)
        result = UploadResult()

        planned: list[_PlannedWrite] = []
        for item in items:
            segments = split_upload_name(item.name or "")
            if not segments:
                result.failed.append(ItemFailure(name=item.name or "", error="File name is required"))
                continue
            relative = segments if base.is_root else [*base.relative.parts, *segments]
            target = self._resolver.resolve(tenant_id, "/".join(relative))
            if target.is_trash_container:
                result.failed.append(ItemFailure(name=item.name, error="Name is reserved for the trash folder"))
                continue
            planned.append(_PlannedWrite(item, target))

        for write in planned:
            try:
                hasher = self._write(write.item, write.target)
            except OSError as exc:
                self._log.warning("Upload of %s to %s failed: %s", write.item.name, write.target.key, exc)
                result.failed.append(ItemFailure(name=write.item.name, error="Upload failed"))
                continue
            result.files.append(
                UploadSummary(
                    name=write.item.name,
                    size=hasher.size,
                    path=write.target.entry_path,
                    etag=hasher.hexdigest(),
                )
            )

        self._log.info(
            "Uploaded %d file(s) to %s/%s (%d failed)",
            len(result.files),
            tenant_id,
            base.entry_path,
            len(result.failed),
        )
        return result

    def _write(self, item: UploadItem, target: ResolvedPath) -> StreamHasher:
        self._medium.make_dir(target.parent.key, parents=True, exist_ok=True)
        with self._medium.open_write(target.key) as out:
            return copy_stream(item.stream, out)
