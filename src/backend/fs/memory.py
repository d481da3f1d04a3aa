"""
In-memory storage medium.

Mirrors LocalStorageMedium's error semantics so components can be exercised
without touching the disk, and so tests can count or fail individual calls.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import BinaryIO, Callable, Optional

from .storage import MediumStat, StorageMedium


ROOT_KEY = PurePosixPath(".")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Node:
    is_dir: bool
    data: bytes = b""
    modified_at: datetime = field(default_factory=_utc_now)


class _WriteBuffer(io.BytesIO):
    """Buffer that stores its content into the medium when closed."""

    def __init__(self, commit: Callable[[bytes], None]):
        super().__init__()
        self._commit = commit

    def close(self) -> None:
        if not self.closed:
            self._commit(self.getvalue())
        super().close()


class MemoryStorageMedium(StorageMedium):
    """Dictionary-backed medium; keys map straight to nodes."""

    def __init__(self) -> None:
        self._nodes: dict[PurePosixPath, _Node] = {ROOT_KEY: _Node(is_dir=True)}
        self.calls: list[tuple[str, PurePosixPath]] = []

    def _record(self, op: str, key: PurePosixPath) -> None:
        self.calls.append((op, key))

    def _node(self, key: PurePosixPath) -> _Node:
        node = self._nodes.get(key)
        if node is None:
            raise FileNotFoundError(str(key))
        return node

    def _require_parent_dir(self, key: PurePosixPath) -> None:
        parent = self._nodes.get(key.parent)
        if parent is None:
            raise FileNotFoundError(str(key.parent))
        if not parent.is_dir:
            raise NotADirectoryError(str(key.parent))

    def stat(self, key: PurePosixPath) -> MediumStat:
        self._record("stat", key)
        node = self._node(key)
        return MediumStat(is_dir=node.is_dir, size=len(node.data), modified_at=node.modified_at)

    def list_dir(self, key: PurePosixPath) -> list[str]:
        self._record("list_dir", key)
        node = self._node(key)
        if not node.is_dir:
            raise NotADirectoryError(str(key))
        return [k.name for k in self._nodes if k != ROOT_KEY and k.parent == key]

    def make_dir(self, key: PurePosixPath, *, parents: bool = False, exist_ok: bool = False) -> None:
        self._record("make_dir", key)
        existing = self._nodes.get(key)
        if existing is not None:
            if exist_ok and existing.is_dir:
                return
            raise FileExistsError(str(key))
        if parents and key.parent != key:
            self.make_dir(key.parent, parents=True, exist_ok=True)
        self._require_parent_dir(key)
        self._nodes[key] = _Node(is_dir=True)

    def move(self, src: PurePosixPath, dst: PurePosixPath) -> None:
        self._record("move", src)
        self._node(src)
        if dst in self._nodes:
            raise FileExistsError(str(dst))
        self._require_parent_dir(dst)
        moved = [k for k in self._nodes if k == src or src in k.parents]
        for k in moved:
            self._nodes[dst / k.relative_to(src)] = self._nodes.pop(k)

    def remove(self, key: PurePosixPath) -> None:
        self._record("remove", key)
        self._node(key)
        for k in [k for k in self._nodes if k == key or key in k.parents]:
            del self._nodes[k]

    def open_read(self, key: PurePosixPath) -> BinaryIO:
        self._record("open_read", key)
        node = self._node(key)
        if node.is_dir:
            raise IsADirectoryError(str(key))
        return io.BytesIO(node.data)

    def open_write(self, key: PurePosixPath) -> BinaryIO:
        self._record("open_write", key)
        existing = self._nodes.get(key)
        if existing is not None and existing.is_dir:
            raise IsADirectoryError(str(key))
        self._require_parent_dir(key)

        def commit(data: bytes) -> None:
            self._nodes[key] = _Node(is_dir=False, data=data)

        return _WriteBuffer(commit)

    def real_key(self, key: PurePosixPath) -> Optional[PurePosixPath]:
        return key
