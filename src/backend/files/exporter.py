"""
Multi-file archive export.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Sequence

from src.backend.fs import (
    ArchiveJob,
    ArchiveLimits,
    ArchiveResult,
    ResolvedPath,
    StorageMedium,
    TenantPathResolver,
)
from src.backend.fs.archive_zip import generate_archive_name
from src.backend.fs.errors import (
    InvalidPathError,
    NoFilesProvidedError,
    NoValidFilesError,
    TooManyFilesError,
)


logger = logging.getLogger(__name__)


class _Member(NamedTuple):
    requested: str
    target: ResolvedPath


class ArchiveExporter:
    """
    Bundles selected files of one tenant into a flat zip archive.

    Paths are given with the tenant prefix ("<tenant_id>/gallery/a.png").
    Any path outside the caller's tenant fails the whole request; members
    that are missing, unreadable, folders, or over the per-file limit are
    skipped with a warning.
    """

    def __init__(self, medium: StorageMedium, resolver: TenantPathResolver):
        self._medium = medium
        self._resolver = resolver

    def export(
        self,
        tenant_id: str,
        paths: Sequence[str],
        limits: Optional[ArchiveLimits] = None,
    ) -> ArchiveResult:
        """
        Build a zip of the requested files.

        Raises:
            TenantRequiredError: If tenant_id is missing.
            NoFilesProvidedError: If paths is empty.
            TooManyFilesError: If more than limits.max_files paths are given.
            InvalidPathError: If any path is outside the tenant or malformed.
            TotalSizeExceededError: If included members pass limits.max_total_bytes.
            NoValidFilesError: If no member could be included.
        """
        limits = limits or ArchiveLimits()
        root = self._resolver.tenant_root(tenant_id)

        if not paths:
            raise NoFilesProvidedError("File paths array required")
        if len(paths) > limits.max_files:
            raise TooManyFilesError(limits.max_files)

        members = [_Member(p, self._resolve_member(root, p)) for p in paths]

        job = ArchiveJob(limits)
        skipped: list[str] = []
        for member in members:
            data = self._read_member(member, limits)
            if data is None:
                skipped.append(member.requested)
                continue
            job.add(member.target.name, data)

        if job.member_count == 0:
            job.close()
            raise NoValidFilesError()

        files_archived = job.member_count
        bytes_archived = job.total_bytes
        payload = job.finish()
        logger.info(
            "Archive built for %s: %d file(s), %d bytes in, %d bytes out, %d skipped",
            tenant_id,
            files_archived,
            bytes_archived,
            len(payload),
            len(skipped),
        )
        return ArchiveResult(
            data=payload,
            filename=generate_archive_name(),
            files_archived=files_archived,
            bytes_archived=bytes_archived,
            skipped=skipped,
        )

    def _resolve_member(self, root: ResolvedPath, path: str) -> ResolvedPath:
        prefix = f"{root.tenant_id}/"
        if not isinstance(path, str) or not path.startswith(prefix):
            raise InvalidPathError()
        target = self._resolver.resolve(root.tenant_id, path[len(prefix):])
        if target.is_root:
            raise InvalidPathError()
        return target

    def _read_member(self, member: _Member, limits: ArchiveLimits) -> Optional[bytes]:
        key = member.target.key
        try:
            st = self._medium.stat(key)
            if st.is_dir:
                logger.warning("Skipping folder in archive request: %s", key)
                return None
            if st.size > limits.max_file_bytes:
                logger.warning("Skipping %s: %d bytes over per-file limit", key, st.size)
                return None
            return self._medium.read_bytes(key)
        except OSError as exc:
            logger.warning("Failed to add %s to archive: %s", key, exc)
            return None
