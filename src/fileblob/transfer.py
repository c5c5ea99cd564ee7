"""
Transfer engine for blob content.

Two directions:

- materialize: chunked copy from a raw source (e.g. the blob column) into
  a destination stream or file, used on the read path when no local copy
  exists yet.
- read_and_digest: read a handle's stream fully while hashing it, used on
  the write path to produce the bytes and the descriptor digest together.

Chunked reads stop at the first empty or short read. Files and in-memory
streams only return a short read at end of stream; a transport that can
return short reads mid-stream (pipes, sockets) must be wrapped in a
buffered reader that fills each chunk before it is passed here.
"""
from __future__ import annotations

import io
import logging
import os
import tempfile
from contextlib import closing
from pathlib import Path
from typing import BinaryIO, IO, Iterable, Optional, Tuple, Union

from .digest import Digest
from .errors import BlobDigestMismatch
from .settings import DEFAULT_CHUNK_SIZE
from .streams import StreamHandle

__all__ = [
    "CHUNK_SIZE",
    "ByteStream",
    "materialize",
    "materialize_handle",
    "materialize_atomically",
    "read_and_digest",
    "read_handle",
]

logger = logging.getLogger(__name__)

CHUNK_SIZE = DEFAULT_CHUNK_SIZE

# Raw column content: bytes, file-like with read()/readinto(), or an iterable of chunks
ByteStream = Union[bytes, bytearray, memoryview, IO[bytes], Iterable[bytes]]


def _iter_chunks(source: ByteStream, chunk_size: int) -> Iterable[memoryview]:
    """
    Yield chunks from source, reusing one buffer for file-like sources.

    Each yielded view is only valid until the next chunk is requested.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    if isinstance(source, (bytes, bytearray, memoryview)):
        source = io.BytesIO(source)

    if hasattr(source, "readinto"):
        buffer = bytearray(chunk_size)
        view = memoryview(buffer)
        while True:
            n = source.readinto(view) or 0
            if n == 0:
                break
            yield view[:n]
            if n < chunk_size:
                break
    elif hasattr(source, "read"):
        while True:
            chunk = source.read(chunk_size)
            if not chunk:
                break
            yield memoryview(chunk)
            if len(chunk) < chunk_size:
                break
    else:
        # Iterables decide their own chunking
        for chunk in source:
            if chunk:
                yield memoryview(chunk)


def materialize(
    source: ByteStream,
    destination: IO[bytes],
    *,
    chunk_size: int = CHUNK_SIZE,
    digest: Optional[Digest] = None,
) -> int:
    """
    Copy source into destination chunk by chunk.

    Neither stream is closed here; both belong to the caller.

    Args:
        source: Raw content (file-like or iterable of bytes)
        destination: Writable binary stream
        chunk_size: Bytes requested per read
        digest: Optional running digest updated with every chunk written

    Returns:
        Number of bytes written

    Raises:
        OSError: For I/O errors (partial output is left in place)
    """
    total = 0
    for chunk in _iter_chunks(source, chunk_size):
        destination.write(chunk)
        if digest is not None:
            digest.update(chunk)
        total += len(chunk)
    return total


def materialize_handle(
    source: ByteStream,
    handle: StreamHandle,
    *,
    expected_digest: Optional[bytes] = None,
    chunk_size: int = CHUNK_SIZE,
) -> int:
    """
    Materialize source into the handle's writer, closing the writer afterwards.

    Unlike materialize_atomically, the bytes are already in place when the
    digest is checked; a mismatch is reported but not rolled back.

    Raises:
        BlobDigestMismatch: If expected_digest is given and does not match
        OSError: For I/O errors
    """
    digest = Digest()
    with closing(handle.writer()) as out:
        total = materialize(source, out, chunk_size=chunk_size, digest=digest)
        out.flush()

    actual = digest.digest()
    if expected_digest is not None and actual != expected_digest:
        raise BlobDigestMismatch(
            f"Digest mismatch for {handle.provenance}: expected {expected_digest.hex()}, got {actual.hex()}",
            expected=expected_digest.hex(),
            actual=actual.hex(),
        )
    logger.debug(f"Materialized {total} bytes into {handle.provenance}")
    return total


def materialize_atomically(
    source: ByteStream,
    target_path: Union[str, Path],
    *,
    expected_digest: Optional[bytes] = None,
    chunk_size: int = CHUNK_SIZE,
) -> bytes:
    """
    Materialize into a file through a temp file + rename.

    The temp file lives in the target's directory so the rename is atomic;
    on any failure it is removed and the target is left untouched.

    Args:
        source: Raw content (file-like or iterable of bytes)
        target_path: Final path for the file
        expected_digest: If given, the written bytes must hash to this digest
        chunk_size: Bytes requested per read

    Returns:
        Digest of the bytes written

    Raises:
        BlobDigestMismatch: If expected_digest is given and does not match
        OSError: If file operations fail
    """
    target_path = Path(target_path)
    target_path.parent.mkdir(parents=True, exist_ok=True)

    digest = Digest()
    fd, temp_name = tempfile.mkstemp(prefix=".fileblob.tmp.", dir=target_path.parent)
    temp_path = Path(temp_name)

    try:
        with os.fdopen(fd, "wb") as out:
            materialize(source, out, chunk_size=chunk_size, digest=digest)
            out.flush()
            os.fsync(out.fileno())

        actual = digest.digest()
        if expected_digest is not None and actual != expected_digest:
            raise BlobDigestMismatch(
                f"Digest mismatch for {target_path}: expected {expected_digest.hex()}, got {actual.hex()}",
                expected=expected_digest.hex(),
                actual=actual.hex(),
            )

        os.replace(temp_path, target_path)
    except Exception:
        try:
            temp_path.unlink()
        except FileNotFoundError:
            pass
        raise

    logger.debug(f"Atomically materialized {digest.byte_count} bytes into {target_path}")
    return actual


def _remaining_length(stream: IO[bytes]) -> Optional[int]:
    """Bytes between the current position and the end, or None if unknown."""
    try:
        if not stream.seekable():
            return None
        pos = stream.tell()
        end = stream.seek(0, os.SEEK_END)
        stream.seek(pos)
    except (AttributeError, OSError):
        return None
    return max(end - pos, 0)


def read_and_digest(source: BinaryIO, *, chunk_size: int = CHUNK_SIZE) -> Tuple[bytes, bytes]:
    """
    Read source to the end while computing its digest.

    The buffer is sized to the stream's remaining length when the stream is
    seekable; otherwise chunks are accumulated. The digest is fed with each
    chunk as it arrives, so it covers exactly the bytes returned.

    Returns:
        (content bytes, 20-byte SHA-1 digest)

    Raises:
        OSError: For I/O errors
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    digest = Digest()
    length = _remaining_length(source)

    if length is None or not hasattr(source, "readinto"):
        parts = []
        for chunk in _iter_chunks(source, chunk_size):
            digest.update(chunk)
            parts.append(bytes(chunk))
        return b"".join(parts), digest.digest()

    buffer = bytearray(length)
    view = memoryview(buffer)
    cursor = 0
    while cursor < length:
        window = view[cursor:cursor + min(chunk_size, length - cursor)]
        n = source.readinto(window) or 0
        if n == 0:
            break
        digest.update(window[:n])
        cursor += n

    if cursor < length:
        logger.debug(f"Stream ended after {cursor} of {length} expected bytes")
    return bytes(view[:cursor]), digest.digest()


def read_handle(handle: StreamHandle, *, chunk_size: int = CHUNK_SIZE) -> Tuple[bytes, bytes]:
    """Read a handle fully and digest it, closing the reader afterwards."""
    with closing(handle.reader()) as reader:
        data, digest = read_and_digest(reader, chunk_size=chunk_size)
    logger.debug(f"Read {len(data)} bytes from {handle.provenance}")
    return data, digest
