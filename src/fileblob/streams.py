"""
Stream handles for blob content.

A stream handle names a resource and opens readable or writable streams
over it. The transfer engine only talks to this protocol, so a blob can be
materialized into a file or served from an in-process buffer the same way.

Handles own nothing until a stream is opened; every stream returned by
``reader()`` or ``writer()`` belongs to the caller, who must close it.
"""
from __future__ import annotations

import io
import os
from pathlib import Path
from typing import BinaryIO, Optional, Protocol, Union, runtime_checkable

from .errors import BlobNotFound

__all__ = ["StreamHandle", "FileStreamHandle", "MemoryStreamHandle"]


@runtime_checkable
class StreamHandle(Protocol):
    """Protocol for a named resource that can be read and written as a stream."""

    @property
    def provenance(self) -> str:
        """Unique identifier of the underlying resource (e.g. absolute path)."""
        ...

    @property
    def name(self) -> str:
        """Logical name, matched against the descriptor's name."""
        ...

    def reader(self) -> BinaryIO:
        """
        Open a new readable stream positioned at the start of the resource.

        Raises:
            BlobNotFound: If the resource does not exist
            OSError: For other I/O errors
        """
        ...

    def writer(self) -> BinaryIO:
        """
        Open a new writable stream positioned at the start of the resource.

        Raises:
            OSError: For I/O errors
        """
        ...


class FileStreamHandle:
    """Stream handle over a local file."""

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path).resolve()

    @property
    def provenance(self) -> str:
        return str(self._path)

    @property
    def name(self) -> str:
        return self._path.name

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def reader(self) -> BinaryIO:
        try:
            return open(self._path, "rb")
        except FileNotFoundError as e:
            raise BlobNotFound(f"File {self._path} does not exist", path=str(self._path)) from e

    def writer(self) -> BinaryIO:
        # Creates missing parent directories, then creates or truncates
        self._path.parent.mkdir(parents=True, exist_ok=True)
        return open(self._path, "wb")

    def __repr__(self) -> str:
        return f"FileStreamHandle({self.provenance!r})"


class _FixedBufferIO(io.RawIOBase):
    """Seekable view over a bytearray whose size never changes."""

    def __init__(self, buffer: bytearray, *, writable: bool) -> None:
        super().__init__()
        self._view = memoryview(buffer)
        self._pos = 0
        self._writable = writable

    def readable(self) -> bool:
        return True

    def writable(self) -> bool:
        return self._writable

    def seekable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        self._check_open()
        n = min(len(b), len(self._view) - self._pos)
        if n <= 0:
            return 0
        b[:n] = self._view[self._pos:self._pos + n]
        self._pos += n
        return n

    def write(self, b) -> int:
        self._check_open()
        if not self._writable:
            raise io.UnsupportedOperation("stream is not writable")
        data = memoryview(b).cast("B")
        end = self._pos + len(data)
        if end > len(self._view):
            raise io.UnsupportedOperation(
                f"memory buffer is not resizable: write of {len(data)} bytes at offset "
                f"{self._pos} exceeds capacity {len(self._view)}"
            )
        self._view[self._pos:end] = data
        self._pos = end
        return len(data)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        self._check_open()
        if whence == os.SEEK_SET:
            pos = offset
        elif whence == os.SEEK_CUR:
            pos = self._pos + offset
        elif whence == os.SEEK_END:
            pos = len(self._view) + offset
        else:
            raise ValueError(f"invalid whence: {whence}")
        if pos < 0:
            raise ValueError(f"negative seek position {pos}")
        self._pos = pos
        return pos

    def tell(self) -> int:
        self._check_open()
        return self._pos

    def _check_open(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed stream")


class MemoryStreamHandle:
    """
    Stream handle over a fixed-size in-memory buffer.

    Reader and writer are views over the same buffer, so bytes written
    through one writer are visible to every later reader. Writes past the
    end of the buffer fail instead of growing it.
    """

    def __init__(self, name: str, data: Union[bytes, bytearray], *, provenance: Optional[str] = None) -> None:
        self._name = name
        self._buffer = bytearray(data)
        self._provenance = provenance if provenance is not None else name

    @property
    def provenance(self) -> str:
        return self._provenance

    @property
    def name(self) -> str:
        return self._name

    @property
    def size(self) -> int:
        return len(self._buffer)

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def reader(self) -> BinaryIO:
        return _FixedBufferIO(self._buffer, writable=False)  # type: ignore[return-value]

    def writer(self) -> BinaryIO:
        return _FixedBufferIO(self._buffer, writable=True)  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"MemoryStreamHandle({self._name!r}, size={len(self._buffer)})"
