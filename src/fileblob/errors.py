"""
Error classes for FileBlob.

Provides the taxonomy of errors raised while resolving, decoding and
transferring blobs. Underlying I/O failures are plain ``OSError`` and are
never wrapped, so callers see the original errno and path.
"""
from __future__ import annotations


class FileBlobError(Exception):
    """Base class for all FileBlob errors."""
    pass


class BlobNotFound(FileBlobError, FileNotFoundError):
    """
    Referenced resource does not exist.

    Raised when:
    - FileBlob(path) is constructed over a missing file
    - A reader is requested from a file handle whose file is absent
    """

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class BlobFormatError(FileBlobError, ValueError):
    """
    Info column text is not a valid ``name;hexdigest`` descriptor.

    Raised when:
    - The text does not split into exactly two fields
    - The digest field has odd length or non-hex characters
    - The decoded digest has the wrong length for the algorithm
    """

    def __init__(self, message: str, text: str | None = None):
        super().__init__(message)
        self.text = text


class BlobDigestMismatch(FileBlobError):
    """
    Content digest validation failed.

    Only raised by the verifying materialization path; the default
    resolution never compares content.
    """

    def __init__(self, message: str, expected: str | None = None, actual: str | None = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


__all__ = [
    "FileBlobError",
    "BlobNotFound",
    "BlobFormatError",
    "BlobDigestMismatch",
]
