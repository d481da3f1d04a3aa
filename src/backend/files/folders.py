"""
Folder creation.
"""

from __future__ import annotations

import logging

from src.backend.fs import StorageMedium, TenantPathResolver, validate_entry_name
from src.backend.fs.errors import AlreadyExistsError, InvalidPathError, internal_errors

from .models import Entry, EntryKind


logger = logging.getLogger(__name__)


class DirectoryMutator:
    """Creates folders; an existing name is a hard conflict, never renamed."""

    def __init__(self, medium: StorageMedium, resolver: TenantPathResolver):
        self._medium = medium
        self._resolver = resolver

    def create_folder(self, tenant_id: str, parent_dir: str, name: str) -> Entry:
        """
        Create a folder exclusively.

        Args:
            tenant_id: Trusted tenant identifier.
            parent_dir: Tenant-anchored parent directory, created if missing.
            name: Folder name; surrounding whitespace is stripped.

        Returns:
            Entry describing the new folder.

        Raises:
            InvalidNameError: If the name is empty or contains separators or "..".
            InvalidPathError: If the parent path is invalid.
            AlreadyExistsError: If anything already exists at the target.
        """
        folder_name = validate_entry_name(name)
        parent = self._resolver.resolve_entry(tenant_id, parent_dir)
        target = self._resolver.resolve_entry(tenant_id, parent.child(folder_name).entry_path)

        with internal_errors("creating folder", target.key):
            try:
                self._medium.make_dir(parent.key, parents=True, exist_ok=True)
            except (FileExistsError, NotADirectoryError) as exc:
                raise InvalidPathError("Parent is not a folder") from exc
            try:
                self._medium.make_dir(target.key)
            except FileExistsError as exc:
                raise AlreadyExistsError("Folder already exists") from exc
            st = self._medium.stat(target.key)

        logger.info("Folder created: %s", target.key)
        return Entry(
            id=target.entry_path,
            name=folder_name,
            kind=EntryKind.FOLDER,
            modified_at=st.modified_at,
            path=target.entry_path,
        )
