"""
Content hashing utilities.

Uses SHA-256. The full hex digest of a stored file's bytes is its entity tag.
StreamHasher computes that tag and the byte count while an upload is copied
to storage, so an upload summary reports the same tag serving does later.
"""

from __future__ import annotations

import hashlib
from typing import BinaryIO


# Hash algorithm to use
HASH_ALGORITHM = "sha256"

# Buffer size for streaming copies and hashing
BUFFER_SIZE = 65536  # 64 KB


def compute_bytes_hash(data: bytes) -> str:
    """
    Compute the SHA-256 hash of bytes.

    Args:
        data: The bytes to hash.

    Returns:
        Lowercase hexadecimal hash string.
    """
    return hashlib.new(HASH_ALGORITHM, data).hexdigest()


class StreamHasher:
    """
    A write-through hasher that computes hash and size while copying data.

    Usage:
        hasher = StreamHasher()
        with medium.open_write(key) as out:
            for chunk in iter(lambda: source.read(BUFFER_SIZE), b""):
                out.write(chunk)
                hasher.update(chunk)
        written = hasher.size
    """

    def __init__(self):
        """Initialize a new stream hasher."""
        self._hasher = hashlib.new(HASH_ALGORITHM)
        self._size = 0

    def update(self, data: bytes) -> None:
        """Update the hash with more data."""
        self._hasher.update(data)
        self._size += len(data)

    def hexdigest(self) -> str:
        """Get the hexadecimal hash string."""
        return self._hasher.hexdigest()

    @property
    def size(self) -> int:
        """Get the total size of data hashed so far."""
        return self._size


def copy_stream(source: BinaryIO, target: BinaryIO) -> StreamHasher:
    """
    Copy a binary stream in chunks, hashing on the way.

    Returns:
        The StreamHasher holding the digest and byte count of the copy.
    """
    hasher = StreamHasher()
    while True:
        chunk = source.read(BUFFER_SIZE)
        if not chunk:
            break
        target.write(chunk)
        hasher.update(chunk)
    return hasher
