"""
Content digest for blobs.

The descriptor stored next to each blob carries a SHA-1 digest (20 bytes).
``Digest`` is fed incrementally, one chunk at a time, so the result always
covers every byte that passed through it.
"""
from __future__ import annotations

import hashlib

__all__ = ["ALGORITHM", "DIGEST_SIZE", "Digest", "digest_bytes"]

ALGORITHM = "sha1"
DIGEST_SIZE = 20


class Digest:
    """Running SHA-1 over a byte stream."""

    def __init__(self) -> None:
        self._hash = hashlib.new(ALGORITHM)
        self._count = 0

    def update(self, chunk: bytes | bytearray | memoryview) -> None:
        self._hash.update(chunk)
        self._count += len(chunk)

    @property
    def byte_count(self) -> int:
        """Number of bytes hashed so far."""
        return self._count

    def digest(self) -> bytes:
        return self._hash.digest()

    def hexdigest(self) -> str:
        return self._hash.hexdigest()


def digest_bytes(data: bytes) -> bytes:
    """Compute the digest of an in-memory buffer in one call."""
    return hashlib.new(ALGORITHM, data).digest()
