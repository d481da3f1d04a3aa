"""
Trash (soft delete) and permanent removal.

Lifecycle of an entry:
    Active --remove--> Trashed (moved under /.trash) --remove--> Removed

There is no restore operation and no trash ledger: whether a removal is
permanent is decided purely by whether the path lies inside the trash
folder.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Callable, Optional, Sequence

from src.backend.fs import (
    ResolvedPath,
    StorageMedium,
    TenantPathResolver,
    TRASH_DIR_NAME,
    find_available_name,
)
from src.backend.fs.errors import (
    AlreadyExistsError,
    FileStorageError,
    InternalStorageError,
    InvalidPathError,
    NoFilesProvidedError,
    NotFoundError,
    internal_errors,
)
from src.backend.fs.naming import DEFAULT_MAX_NAME_ATTEMPTS, NameExhaustedError

from .models import BulkRemovalResult, ItemFailure, RemovalResult


# How often the name search restarts after losing a race for a trash name
DEFAULT_MAX_MOVE_ATTEMPTS = 5

logger = logging.getLogger(__name__)


def ensure_trash_container(medium: StorageMedium, trash: ResolvedPath) -> None:
    """
    Create the trash folder if missing.

    Raises:
        AlreadyExistsError: If a file occupies the trash folder name.
    """
    try:
        medium.make_dir(trash.key, parents=True, exist_ok=True)
    except (FileExistsError, NotADirectoryError) as exc:
        raise AlreadyExistsError("A file named .trash blocks the trash folder") from exc


class TrashManager:
    """
    Moves entries into the tenant's trash folder or purges trashed entries.

    Args:
        medium: Storage backend.
        resolver: Tenant path resolver over the same medium.
        exists_probe: Returns True when a storage key is taken; defaults to
            medium.exists. Tests inject their own to simulate collisions.
        max_name_attempts: Suffixed names probed per search.
        max_move_attempts: Searches tried when the chosen name is taken
            between probe and move.
    """

    def __init__(
        self,
        medium: StorageMedium,
        resolver: TenantPathResolver,
        *,
        exists_probe: Optional[Callable[[PurePosixPath], bool]] = None,
        max_name_attempts: int = DEFAULT_MAX_NAME_ATTEMPTS,
        max_move_attempts: int = DEFAULT_MAX_MOVE_ATTEMPTS,
    ):
        self._medium = medium
        self._resolver = resolver
        self._exists = exists_probe or medium.exists
        self._max_name_attempts = max_name_attempts
        self._max_move_attempts = max_move_attempts

    def remove(self, tenant_id: str, path: str) -> RemovalResult:
        """
        Soft delete an active entry, or permanently delete a trashed one.

        Args:
            tenant_id: Trusted tenant identifier.
            path: Tenant-anchored entry path.

        Returns:
            RemovalResult; trash_path is set for soft deletes.

        Raises:
            InvalidPathError: If the path is invalid or is the tenant root.
            NotFoundError: If nothing exists at the path.
            AlreadyExistsError: If a file occupies the trash folder name.
        """
        target = self._resolver.resolve_entry(tenant_id, path)
        if target.is_root:
            raise InvalidPathError("Cannot delete the root folder")

        with internal_errors("removing", target.key):
            if not self._medium.exists(target.key):
                raise NotFoundError()

            if target.in_trash or target.is_trash_container:
                return self._purge(target)
            return self._move_to_trash(target)

    def remove_many(self, tenant_id: str, paths: Sequence[str]) -> BulkRemovalResult:
        """
        Remove several entries, continuing past per-path failures.

        Raises:
            TenantRequiredError: If tenant_id is missing.
            NoFilesProvidedError: If paths is empty.
        """
        self._resolver.tenant_root(tenant_id)
        if not paths:
            raise NoFilesProvidedError("Paths array is required")

        result = BulkRemovalResult()
        for path in paths:
            try:
                result.removed.append(self.remove(tenant_id, path))
            except FileStorageError as exc:
                logger.warning("Skipping removal of %s: %s", path, exc.message)
                result.failed.append(ItemFailure(name=path, error=exc.message))
        return result

    def _purge(self, target: ResolvedPath) -> RemovalResult:
        try:
            self._medium.remove(target.key)
        except FileNotFoundError as exc:
            raise NotFoundError() from exc

        logger.info("Entry permanently deleted: %s", target.key)
        return RemovalResult(path=target.entry_path, permanent=True)

    def _move_to_trash(self, target: ResolvedPath) -> RemovalResult:
        trash = self._resolver.tenant_root(target.tenant_id).child(TRASH_DIR_NAME)
        ensure_trash_container(self._medium, trash)

        for _ in range(self._max_move_attempts):
            try:
                trash_name = find_available_name(
                    target.name,
                    lambda candidate: self._exists(trash.key / candidate),
                    max_attempts=self._max_name_attempts,
                )
            except NameExhaustedError as exc:
                logger.error("No free trash name for %s: %s", target.key, exc)
                raise InternalStorageError() from exc

            destination = trash.child(trash_name)
            try:
                self._medium.move(target.key, destination.key)
            except FileExistsError:
                logger.debug("Trash name %s taken concurrently, retrying", destination.key)
                continue
            except FileNotFoundError as exc:
                raise NotFoundError() from exc

            logger.info("Entry moved to trash: %s -> %s", target.key, destination.key)
            return RemovalResult(
                path=target.entry_path,
                permanent=False,
                trash_path=destination.entry_path,
            )

        logger.error("Gave up moving %s to trash after %d attempts", target.key, self._max_move_attempts)
        raise InternalStorageError()
