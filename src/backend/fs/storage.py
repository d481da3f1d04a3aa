"""
Storage medium abstraction.

Every component talks to storage through a StorageMedium, addressing
objects by keys relative to the medium root:

    <tenant_id>/
    <tenant_id>/gallery/a.png
    <tenant_id>/.trash/report.txt

The medium's own create/rename primitives are the only concurrency
mechanism; nothing here takes application-level locks.
"""

from __future__ import annotations

import os
import shutil
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import BinaryIO, NamedTuple, Optional


class MediumStat(NamedTuple):
    """Metadata for a single stored object."""
    is_dir: bool
    size: int
    modified_at: datetime


class StorageMedium(ABC):
    """Backend performing the actual I/O for all tenants."""

    @abstractmethod
    def stat(self, key: PurePosixPath) -> MediumStat:
        """
        Get metadata for a key.

        Raises:
            FileNotFoundError: If nothing is stored at the key.
        """

    def exists(self, key: PurePosixPath) -> bool:
        try:
            self.stat(key)
        except FileNotFoundError:
            return False
        return True

    @abstractmethod
    def list_dir(self, key: PurePosixPath) -> list[str]:
        """
        List child names of a directory.

        Raises:
            FileNotFoundError: If the directory does not exist.
            NotADirectoryError: If the key is a file.
        """

    @abstractmethod
    def make_dir(self, key: PurePosixPath, *, parents: bool = False, exist_ok: bool = False) -> None:
        """
        Create a directory.

        Raises:
            FileExistsError: If the key exists and exist_ok is False.
            FileNotFoundError: If the parent is missing and parents is False.
        """

    @abstractmethod
    def move(self, src: PurePosixPath, dst: PurePosixPath) -> None:
        """
        Rename src to dst in one step.

        Raises:
            FileNotFoundError: If src does not exist.
            FileExistsError: If dst already exists.
        """

    @abstractmethod
    def remove(self, key: PurePosixPath) -> None:
        """Unlink a file or remove a directory tree."""

    @abstractmethod
    def open_read(self, key: PurePosixPath) -> BinaryIO:
        """Open a stored file for binary reading."""

    @abstractmethod
    def open_write(self, key: PurePosixPath) -> BinaryIO:
        """Open a file for binary writing, truncating any existing content."""

    @abstractmethod
    def real_key(self, key: PurePosixPath) -> Optional[PurePosixPath]:
        """
        Resolve links in a key.

        Returns:
            The key the medium will actually touch, or None if it lies
            outside the medium root.
        """

    def read_bytes(self, key: PurePosixPath) -> bytes:
        with self.open_read(key) as f:
            return f.read()


class LocalStorageMedium(StorageMedium):
    """
    Stores objects as plain files and directories under one root directory.

    Directory structure:
        <root>/<tenant_id>/...
    """

    def __init__(self, root: Path):
        """
        Initialize the local medium.

        Args:
            root: The directory holding every tenant root.
        """
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        """Get the storage root directory."""
        return self._root

    def os_path(self, key: PurePosixPath) -> Path:
        """Map a key to its location on disk."""
        return self._root.joinpath(*key.parts)

    def stat(self, key: PurePosixPath) -> MediumStat:
        st = self.os_path(key).stat()
        return MediumStat(
            is_dir=os.path.isdir(self.os_path(key)),
            size=st.st_size,
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    def list_dir(self, key: PurePosixPath) -> list[str]:
        return os.listdir(self.os_path(key))

    def make_dir(self, key: PurePosixPath, *, parents: bool = False, exist_ok: bool = False) -> None:
        self.os_path(key).mkdir(parents=parents, exist_ok=exist_ok)

    def move(self, src: PurePosixPath, dst: PurePosixPath) -> None:
        src_path = self.os_path(src)
        dst_path = self.os_path(dst)
        if not src_path.exists():
            raise FileNotFoundError(str(src))
        # os.rename silently replaces files on POSIX
        if dst_path.exists():
            raise FileExistsError(str(dst))
        os.rename(src_path, dst_path)

    def remove(self, key: PurePosixPath) -> None:
        path = self.os_path(key)
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()

    def open_read(self, key: PurePosixPath) -> BinaryIO:
        return open(self.os_path(key), "rb")

    def open_write(self, key: PurePosixPath) -> BinaryIO:
        return open(self.os_path(key), "wb")

    def real_key(self, key: PurePosixPath) -> Optional[PurePosixPath]:
        real = Path(os.path.realpath(self.os_path(key)))
        try:
            rel = real.relative_to(self._root)
        except ValueError:
            return None
        return PurePosixPath(rel.as_posix())
