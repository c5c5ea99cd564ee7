"""
FileBlob - content-addressed blob references for record stores.

Persist a compact ``name;hexdigest`` descriptor next to a blob's raw bytes
and resolve it back to a local, stream-capable copy on demand.
"""
from .column import BlobColumn, ColumnValues
from .digest import DIGEST_SIZE, Digest, digest_bytes
from .errors import BlobDigestMismatch, BlobFormatError, BlobNotFound, FileBlobError
from .location import (
    DefaultLocationStrategy,
    LocationRegistry,
    LocationStrategy,
    Resolution,
    RootedLocationStrategy,
    VerifyingLocationStrategy,
)
from .models import BlobReference, FileBlob, decode_reference, encode_reference
from .settings import ColumnConfig, Settings, create_settings_from_env
from .streams import FileStreamHandle, MemoryStreamHandle, StreamHandle
from .transfer import materialize, materialize_atomically, materialize_handle, read_and_digest, read_handle

__all__ = [
    "BlobColumn",
    "BlobDigestMismatch",
    "BlobFormatError",
    "BlobNotFound",
    "BlobReference",
    "ColumnConfig",
    "ColumnValues",
    "DIGEST_SIZE",
    "DefaultLocationStrategy",
    "Digest",
    "FileBlob",
    "FileBlobError",
    "FileStreamHandle",
    "LocationRegistry",
    "LocationStrategy",
    "MemoryStreamHandle",
    "Resolution",
    "RootedLocationStrategy",
    "Settings",
    "StreamHandle",
    "VerifyingLocationStrategy",
    "create_settings_from_env",
    "decode_reference",
    "digest_bytes",
    "encode_reference",
    "materialize",
    "materialize_atomically",
    "materialize_handle",
    "read_and_digest",
    "read_handle",
]
