"""
Tenant path resolution.

Turns a trusted tenant id plus user-supplied path text into a storage key
that is guaranteed to lie inside that tenant's root:

    resolve("acme", "gallery/a.png")        -> acme/gallery/a.png
    resolve_entry("acme", "/gallery/a.png") -> acme/gallery/a.png
    resolve("acme", "../other/a.png")       -> InvalidPathError

Entry paths shown to callers are anchored at the tenant root ("/" is the
root itself) and always use forward slashes.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import NamedTuple, Optional

from .errors import InvalidPathError, TenantRequiredError
from .storage import StorageMedium


# Reserved folder directly under each tenant root holding soft-deleted entries
TRASH_DIR_NAME = ".trash"

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


class ResolvedPath(NamedTuple):
    """A validated location inside one tenant root."""
    tenant_id: str
    relative: PurePosixPath  # "." for the tenant root
    key: PurePosixPath       # <tenant_id>/<relative>

    @property
    def is_root(self) -> bool:
        return self.relative == PurePosixPath(".")

    @property
    def name(self) -> str:
        return self.relative.name

    @property
    def entry_path(self) -> str:
        """Tenant-anchored, slash-separated path used as the entry id."""
        if self.is_root:
            return "/"
        return "/" + self.relative.as_posix()

    @property
    def is_trash_container(self) -> bool:
        return self.relative == PurePosixPath(TRASH_DIR_NAME)

    @property
    def in_trash(self) -> bool:
        """True for anything stored beneath the trash container."""
        parts = self.relative.parts
        return len(parts) > 1 and parts[0] == TRASH_DIR_NAME

    def child(self, name: str) -> "ResolvedPath":
        relative = PurePosixPath(name) if self.is_root else self.relative / name
        return ResolvedPath(self.tenant_id, relative, self.key / name)

    @property
    def parent(self) -> "ResolvedPath":
        return ResolvedPath(self.tenant_id, self.relative.parent, self.key.parent)


def _split_segments(raw: str) -> list[str]:
    """Split path text on either separator, keeping empty and '.' segments."""
    return raw.replace("\\", "/").split("/")


class TenantPathResolver:
    """
    Validates user paths against a tenant root on a given medium.

    Lexical checks run before the medium is touched; the final link check
    asks the medium where the key really points.
    """

    def __init__(self, medium: StorageMedium):
        self._medium = medium

    def tenant_root(self, tenant_id: Optional[str]) -> ResolvedPath:
        """
        Get the root location for a tenant.

        Raises:
            TenantRequiredError: If tenant_id is missing or blank.
            InvalidPathError: If tenant_id is not a single plain segment.
        """
        if tenant_id is None or not str(tenant_id).strip():
            raise TenantRequiredError()
        tenant_id = str(tenant_id)
        if (
            tenant_id != tenant_id.strip()
            or tenant_id in (".", "..")
            or "/" in tenant_id
            or "\\" in tenant_id
            or "\x00" in tenant_id
            or _DRIVE_PREFIX.match(tenant_id)
        ):
            raise InvalidPathError("Invalid tenant ID")
        return ResolvedPath(tenant_id, PurePosixPath("."), PurePosixPath(tenant_id))

    def resolve(self, tenant_id: Optional[str], relative_path: str) -> ResolvedPath:
        """
        Resolve a tenant-relative path.

        Args:
            tenant_id: Trusted tenant identifier.
            relative_path: Path text without a leading separator.

        Returns:
            ResolvedPath strictly inside the tenant root (or the root itself
            for an empty path).

        Raises:
            TenantRequiredError: If tenant_id is missing.
            InvalidPathError: If the path is malformed or escapes the root.
        """
        root = self.tenant_root(tenant_id)
        raw = relative_path or ""

        if "\x00" in raw:
            raise InvalidPathError()
        if raw.startswith(("/", "\\")) or _DRIVE_PREFIX.match(raw):
            raise InvalidPathError()

        segments = _split_segments(raw)
        if ".." in segments:
            raise InvalidPathError()

        parts = [s for s in segments if s not in ("", ".")]
        relative = PurePosixPath(*parts) if parts else PurePosixPath(".")
        key = root.key.joinpath(*parts)

        # Lexical containment re-check on the joined key
        if key != root.key and root.key not in key.parents:
            raise InvalidPathError()

        resolved = ResolvedPath(root.tenant_id, relative, key)
        self._check_links(root, resolved)
        return resolved

    def resolve_entry(self, tenant_id: Optional[str], entry_path: Optional[str]) -> ResolvedPath:
        """
        Resolve a tenant-anchored entry path such as "/" or "/gallery/a.png".

        A single leading slash anchors the path at the tenant root; a bare
        relative path is accepted as well.
        """
        raw = entry_path or ""
        if raw.startswith("/") and not raw.startswith("//"):
            raw = raw[1:]
        return self.resolve(tenant_id, raw)

    def _check_links(self, root: ResolvedPath, resolved: ResolvedPath) -> None:
        real = self._medium.real_key(resolved.key)
        if real is None:
            raise InvalidPathError()
        real_root = self._medium.real_key(root.key)
        if real_root is None:
            raise InvalidPathError()
        if real != real_root and real_root not in real.parents:
            raise InvalidPathError()
