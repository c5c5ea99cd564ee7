"""
Tests for the transfer engine.

Covers chunked materialization, read-and-digest, and the atomic
temp-file-then-rename path.
"""
from __future__ import annotations

import hashlib
import io

import pytest

from fileblob.digest import Digest
from fileblob.errors import BlobDigestMismatch
from fileblob.streams import FileStreamHandle, MemoryStreamHandle
from fileblob.transfer import (
    CHUNK_SIZE,
    materialize,
    materialize_atomically,
    materialize_handle,
    read_and_digest,
    read_handle,
)

# Empty, sub-chunk, exact chunk, chunk + 1, multiple whole chunks, trailing partial chunk
SIZES = [0, 1, 100, CHUNK_SIZE - 1, CHUNK_SIZE, CHUNK_SIZE + 1, 3 * CHUNK_SIZE, 3 * CHUNK_SIZE + 17]


def _payload(size: int) -> bytes:
    return bytes((i * 31 + 7) % 256 for i in range(size))


class _ReadOnlyStream:
    """Stream exposing only read(), no readinto() or seek()."""

    def __init__(self, data: bytes):
        self._inner = io.BytesIO(data)

    def read(self, n: int = -1) -> bytes:
        return self._inner.read(n)


class _NonSeekableStream(io.RawIOBase):
    """Readable stream that cannot report its length."""

    def __init__(self, data: bytes):
        self._inner = io.BytesIO(data)

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        return self._inner.readinto(b)


class _ShortReadStream(io.RawIOBase):
    """Returns a short first read even though more data follows."""

    def __init__(self, data: bytes, first: int):
        self._inner = io.BytesIO(data)
        self._first = first
        self._reads = 0

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        self._reads += 1
        if self._reads == 1:
            return self._inner.readinto(memoryview(b)[:self._first])
        return self._inner.readinto(b)


class _FailingStream(io.RawIOBase):
    """Delivers one full chunk, then fails."""

    def __init__(self, chunk: bytes):
        self._chunk = chunk
        self._sent = False

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        if self._sent:
            raise OSError("connection reset")
        self._sent = True
        b[:len(self._chunk)] = self._chunk
        return len(self._chunk)


class TestMaterialize:
    """Test chunked copy from source to destination."""

    @pytest.mark.parametrize("size", SIZES)
    def test_copies_all_bytes(self, size):
        data = _payload(size)
        dest = io.BytesIO()

        written = materialize(io.BytesIO(data), dest)

        assert written == size
        assert dest.getvalue() == data

    @pytest.mark.parametrize("chunk_size", [1, 7, 4096, 65536])
    def test_chunk_size_does_not_change_result(self, chunk_size):
        data = _payload(10_000)
        dest = io.BytesIO()
        materialize(io.BytesIO(data), dest, chunk_size=chunk_size)
        assert dest.getvalue() == data

    def test_read_only_source(self):
        data = _payload(CHUNK_SIZE * 2 + 5)
        dest = io.BytesIO()
        materialize(_ReadOnlyStream(data), dest)
        assert dest.getvalue() == data

    def test_iterable_source(self):
        chunks = [b"abc", b"", b"defgh", b"i"]
        dest = io.BytesIO()
        assert materialize(iter(chunks), dest) == 9
        assert dest.getvalue() == b"abcdefghi"

    def test_short_read_ends_transfer(self):
        """A short read is treated as end of stream."""
        data = _payload(CHUNK_SIZE * 2)
        dest = io.BytesIO()

        written = materialize(_ShortReadStream(data, first=10), dest)

        assert written == 10
        assert dest.getvalue() == data[:10]

    def test_updates_digest(self):
        data = _payload(CHUNK_SIZE * 2 + 3)
        digest = Digest()
        materialize(io.BytesIO(data), io.BytesIO(), digest=digest)
        assert digest.digest() == hashlib.sha1(data).digest()

    def test_does_not_close_streams(self):
        source, dest = io.BytesIO(b"abc"), io.BytesIO()
        materialize(source, dest)
        assert not source.closed
        assert not dest.closed

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError, match="chunk_size must be positive"):
            materialize(io.BytesIO(b"x"), io.BytesIO(), chunk_size=0)

    def test_into_memory_handle(self):
        handle = MemoryStreamHandle("m", bytes(6))
        assert materialize_handle(io.BytesIO(b"abcdef"), handle) == 6
        assert handle.getvalue() == b"abcdef"

    def test_into_file_handle(self, tmp_path):
        data = _payload(CHUNK_SIZE + 1)
        handle = FileStreamHandle(tmp_path / "out.bin")

        materialize_handle(io.BytesIO(data), handle)

        assert (tmp_path / "out.bin").read_bytes() == data

    def test_io_error_leaves_partial_output(self, tmp_path):
        """Failures propagate unchanged and partial output is not rolled back."""
        handle = FileStreamHandle(tmp_path / "partial.bin")
        chunk = _payload(CHUNK_SIZE)

        with pytest.raises(OSError, match="connection reset"):
            materialize_handle(_FailingStream(chunk), handle)

        assert (tmp_path / "partial.bin").read_bytes() == chunk

    @pytest.mark.parametrize("source", [b"raw bytes", bytearray(b"raw bytes"), memoryview(b"raw bytes")])
    def test_bytes_like_source(self, source):
        dest = io.BytesIO()
        assert materialize(source, dest, chunk_size=4) == 9
        assert dest.getvalue() == b"raw bytes"

    def test_empty_bytes_source(self):
        dest = io.BytesIO()
        assert materialize(b"", dest) == 0
        assert dest.getvalue() == b""

    def test_handle_digest_checked(self):
        handle = MemoryStreamHandle("m", bytes(3))
        materialize_handle(b"abc", handle, expected_digest=hashlib.sha1(b"abc").digest())
        assert handle.getvalue() == b"abc"

    def test_handle_digest_mismatch(self):
        handle = MemoryStreamHandle("m", bytes(3))

        with pytest.raises(BlobDigestMismatch) as exc_info:
            materialize_handle(b"abd", handle, expected_digest=hashlib.sha1(b"abc").digest())

        assert exc_info.value.actual == hashlib.sha1(b"abd").hexdigest()
        # Bytes are written before the check and stay in place
        assert handle.getvalue() == b"abd"


class TestMaterializeAtomically:
    """Test temp file + rename materialization."""

    def test_writes_and_returns_digest(self, tmp_path):
        data = _payload(CHUNK_SIZE * 2 + 1)
        target = tmp_path / "sub" / "blob.bin"

        digest = materialize_atomically(io.BytesIO(data), target)

        assert target.read_bytes() == data
        assert digest == hashlib.sha1(data).digest()
        assert [p.name for p in target.parent.iterdir()] == ["blob.bin"]

    def test_matching_expected_digest(self, tmp_path):
        data = b"verified"
        target = tmp_path / "blob.bin"
        materialize_atomically(io.BytesIO(data), target, expected_digest=hashlib.sha1(data).digest())
        assert target.read_bytes() == data

    def test_mismatch_raises_and_keeps_target(self, tmp_path):
        target = tmp_path / "blob.bin"
        target.write_bytes(b"previous")
        expected = hashlib.sha1(b"something else").digest()

        with pytest.raises(BlobDigestMismatch) as exc_info:
            materialize_atomically(io.BytesIO(b"actual"), target, expected_digest=expected)

        assert exc_info.value.expected == expected.hex()
        assert exc_info.value.actual == hashlib.sha1(b"actual").hexdigest()
        assert target.read_bytes() == b"previous"
        assert [p.name for p in tmp_path.iterdir()] == ["blob.bin"]

    def test_io_error_removes_temp_file(self, tmp_path):
        target = tmp_path / "blob.bin"

        with pytest.raises(OSError, match="connection reset"):
            materialize_atomically(_FailingStream(_payload(CHUNK_SIZE)), target)

        assert list(tmp_path.iterdir()) == []


class TestReadAndDigest:
    """Test whole-stream read with a running digest."""

    @pytest.mark.parametrize("size", SIZES)
    def test_digest_matches_sha1(self, size):
        data = _payload(size)
        content, digest = read_and_digest(io.BytesIO(data))
        assert content == data
        assert digest == hashlib.sha1(data).digest()

    @pytest.mark.parametrize("chunk_size", [1, 7, 1000])
    def test_digest_covers_every_chunk(self, chunk_size):
        """The digest is over the whole stream, not just the final chunk."""
        data = _payload(2500)
        _, digest = read_and_digest(io.BytesIO(data), chunk_size=chunk_size)
        assert digest == hashlib.sha1(data).digest()
        assert digest != hashlib.sha1(data[-(len(data) % chunk_size or chunk_size):]).digest()

    def test_reads_from_current_position(self):
        stream = io.BytesIO(b"headerPAYLOAD")
        stream.seek(6)
        content, digest = read_and_digest(stream)
        assert content == b"PAYLOAD"
        assert digest == hashlib.sha1(b"PAYLOAD").digest()

    def test_non_seekable_stream(self):
        data = _payload(CHUNK_SIZE * 2 + 9)
        content, digest = read_and_digest(_NonSeekableStream(data))
        assert content == data
        assert digest == hashlib.sha1(data).digest()

    def test_read_only_stream(self):
        data = _payload(CHUNK_SIZE + 9)
        content, digest = read_and_digest(_ReadOnlyStream(data))
        assert content == data
        assert digest == hashlib.sha1(data).digest()

    def test_file_handle(self, tmp_path):
        data = _payload(CHUNK_SIZE * 3 + 17)
        path = tmp_path / "in.bin"
        path.write_bytes(data)

        content, digest = read_handle(FileStreamHandle(path))

        assert content == data
        assert digest == hashlib.sha1(data).digest()

    def test_memory_handle(self):
        data = _payload(CHUNK_SIZE + 1)
        content, digest = read_handle(MemoryStreamHandle("m", data))
        assert content == data
        assert digest == hashlib.sha1(data).digest()

    def test_read_handle_closes_reader(self):
        opened = []

        class TrackingHandle(MemoryStreamHandle):
            def reader(self):
                stream = super().reader()
                opened.append(stream)
                return stream

        read_handle(TrackingHandle("m", b"abc"))

        assert len(opened) == 1
        assert opened[0].closed
