"""
Serving the bytes of a single stored file.
"""

from __future__ import annotations

from src.backend.fs import StorageMedium, TenantPathResolver, get_content_type
from src.backend.fs.errors import IsDirectoryError, NotFoundError, internal_errors
from src.backend.fs.hashing import compute_bytes_hash

from .models import ServedContent


# One year, for inline delivery of stored files
DEFAULT_CACHE_MAX_AGE = 31_536_000


class ContentServer:
    """Reads stored files together with their content type and cache metadata."""

    def __init__(
        self,
        medium: StorageMedium,
        resolver: TenantPathResolver,
        *,
        cache_max_age: int = DEFAULT_CACHE_MAX_AGE,
    ):
        self._medium = medium
        self._resolver = resolver
        self.cache_max_age = cache_max_age

    def read(self, tenant_id: str, path: str) -> ServedContent:
        """
        Read one stored file.

        Raises:
            InvalidPathError: If the path is invalid.
            NotFoundError: If nothing exists at the path.
            IsDirectoryError: If the path is a folder.
        """
        target = self._resolver.resolve_entry(tenant_id, path)

        with internal_errors("reading", target.key):
            try:
                st = self._medium.stat(target.key)
            except FileNotFoundError as exc:
                raise NotFoundError() from exc
            if st.is_dir:
                raise IsDirectoryError()

            try:
                data = self._medium.read_bytes(target.key)
            except FileNotFoundError as exc:
                raise NotFoundError() from exc

        return ServedContent(
            data=data,
            content_type=get_content_type(target.name),
            size=len(data),
            filename=target.name,
            modified_at=st.modified_at,
            etag=compute_bytes_hash(data),
            cache_max_age=self.cache_max_age,
        )
