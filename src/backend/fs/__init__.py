"""
Storage primitives shared by every file operation.

Provides:
- Storage medium interface and backends (storage.py, memory.py)
- Tenant path resolution and the trash folder name (paths.py)
- Conflict naming and name validation (naming.py)
- Content type lookup (content_types.py)
- Content hashing (hashing.py)
- Zip archive construction (archive_zip.py)
- Error taxonomy (errors.py)
"""

from .storage import StorageMedium, LocalStorageMedium, MediumStat
from .memory import MemoryStorageMedium
from .paths import TRASH_DIR_NAME, ResolvedPath, TenantPathResolver
from .naming import find_available_name, generate_conflict_name, validate_entry_name
from .content_types import get_content_type
from .archive_zip import ArchiveJob, ArchiveLimits, ArchiveResult

__all__ = [
    "StorageMedium",
    "LocalStorageMedium",
    "MemoryStorageMedium",
    "MediumStat",
    "TRASH_DIR_NAME",
    "ResolvedPath",
    "TenantPathResolver",
    "find_available_name",
    "generate_conflict_name",
    "validate_entry_name",
    "get_content_type",
    "ArchiveJob",
    "ArchiveLimits",
    "ArchiveResult",
]
