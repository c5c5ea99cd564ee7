"""
Data models for blob descriptors.

A blob is persisted as two columns: the raw bytes and an info string
``<name>;<hex digest>``. ``BlobReference`` is the parsed form of that info
string. ``FileBlob`` is the value handed to callers for a blob that lives
in a local file.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field, field_validator

from .digest import DIGEST_SIZE
from .errors import BlobFormatError, BlobNotFound
from .streams import FileStreamHandle

__all__ = ["SEPARATOR", "BlobReference", "FileBlob", "encode_reference", "decode_reference"]

SEPARATOR = ";"

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


class BlobReference(BaseModel):
    """
    Serializable descriptor of a blob: its logical name and content digest.

    Invariants:
    - name: non-empty, never contains the ';' separator
    - digest: exactly DIGEST_SIZE bytes
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Logical blob name, e.g. a file's base name")
    digest: bytes = Field(..., description="SHA-1 of the full blob content")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v:
            raise ValueError("name must not be empty")
        if SEPARATOR in v:
            raise ValueError(f"name must not contain '{SEPARATOR}': {v!r}")
        return v

    @field_validator("digest")
    @classmethod
    def validate_digest(cls, v: bytes) -> bytes:
        if len(v) != DIGEST_SIZE:
            raise ValueError(f"digest must be {DIGEST_SIZE} bytes, got {len(v)}")
        return v

    @computed_field
    @property
    def hexdigest(self) -> str:
        """Lowercase hex form of the digest."""
        return self.digest.hex()

    def to_info(self) -> str:
        """Encode as ``name;hexdigest`` for the info column."""
        return f"{self.name}{SEPARATOR}{self.hexdigest}"

    @classmethod
    def from_info(cls, text: str) -> BlobReference:
        """
        Decode an info column value.

        Raises:
            BlobFormatError: If the text is not exactly two ';'-separated
                fields, the digest is not even-length hex, or either field
                fails validation
        """
        fields = text.split(SEPARATOR)
        if len(fields) != 2:
            raise BlobFormatError(
                f"Invalid blob info, expected 'name{SEPARATOR}hexdigest' with exactly one separator: {text!r}",
                text=text,
            )

        name, hex_digest = fields
        if len(hex_digest) % 2 != 0 or not _HEX_RE.fullmatch(hex_digest):
            raise BlobFormatError(f"Invalid digest hex in blob info: {hex_digest!r}", text=text)

        try:
            return cls(name=name, digest=bytes.fromhex(hex_digest))
        except ValidationError as e:
            raise BlobFormatError(f"Invalid blob info {text!r}: {e}", text=text) from e


def encode_reference(ref: BlobReference) -> str:
    return ref.to_info()


def decode_reference(text: str) -> BlobReference:
    return BlobReference.from_info(text)


class FileBlob:
    """
    A blob that lives in an existing local file.

    Only the path is held; bytes are read on demand through ``as_handle()``.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        p = Path(path)
        if not p.is_file():
            raise BlobNotFound(f"File {path} does not exist", path=str(path))
        self._path = p.resolve()

    @property
    def path(self) -> str:
        """Absolute path to the file."""
        return str(self._path)

    @property
    def name(self) -> str:
        return self._path.name

    def as_handle(self) -> FileStreamHandle:
        return FileStreamHandle(self._path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileBlob):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"FileBlob({self.path!r})"
