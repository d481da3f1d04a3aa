"""
Directory listing for a tenant.
"""

from __future__ import annotations

import logging

from src.backend.fs import StorageMedium, TenantPathResolver, TRASH_DIR_NAME
from src.backend.fs.errors import internal_errors

from .models import Entry, EntryKind
from .trash import ensure_trash_container


class EntryLister:
    """
    Enumerates directory contents as Entry metadata.

    Results are recomputed on every call; nothing is cached.
    """

    def __init__(self, medium: StorageMedium, resolver: TenantPathResolver):
        self._medium = medium
        self._resolver = resolver
        self._log = logging.getLogger(__name__)

    def list(self, tenant_id: str, directory: str = "/") -> list[Entry]:
        """
        List the entries of a directory.

        Args:
            tenant_id: Trusted tenant identifier.
            directory: Tenant-anchored directory path ("/" for the root).

        Returns:
            Folders first, then files, each sorted by case-folded name.
            Missing directories yield an empty list; the trash folder is
            created on demand when requested directly.

        Raises:
            TenantRequiredError: If tenant_id is missing.
            InvalidPathError: If the path is malformed or escapes the root.
            AlreadyExistsError: If a file occupies the trash folder name.
        """
        target = self._resolver.resolve_entry(tenant_id, directory)

        with internal_errors("listing", target.key):
            if target.is_trash_container:
                ensure_trash_container(self._medium, target)

            try:
                names = self._medium.list_dir(target.key)
            except (FileNotFoundError, NotADirectoryError):
                return []

        entries: list[Entry] = []
        for name in names:
            child = target.child(name)
            try:
                st = self._medium.stat(child.key)
            except OSError as exc:
                # Vanished or unreadable mid-scan
                self._log.debug("Dropping entry %s from listing: %s", child.key, exc)
                continue

            # A stray file under the trash name stays visible so it can be removed
            if target.is_root and name == TRASH_DIR_NAME and st.is_dir:
                continue

            entries.append(
                Entry(
                    id=child.entry_path,
                    name=name,
                    kind=EntryKind.FOLDER if st.is_dir else EntryKind.FILE,
                    modified_at=st.modified_at,
                    path=child.entry_path,
                    size=None if st.is_dir else st.size,
                )
            )

        entries.sort(key=lambda e: (e.kind != EntryKind.FOLDER, e.name.casefold(), e.name))
        return entries
