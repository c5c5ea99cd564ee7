"""
Blob column adapter.

Bridges a record store and the resolution engine. A blob is stored as two
columns: the raw bytes and the ``name;hexdigest`` info string. ``load``
turns those columns back into a stream handle, copying the bytes into
place only when no local copy exists; ``dump`` does the reverse for a
handle being persisted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from pydantic import ValidationError

from .errors import BlobFormatError, BlobNotFound
from .location import LocationRegistry
from .models import BlobReference, FileBlob
from .settings import ColumnConfig, Settings
from .streams import FileStreamHandle, StreamHandle
from .transfer import ByteStream, materialize_atomically, materialize_handle, read_handle

__all__ = ["ColumnValues", "BlobColumn"]

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class ColumnValues:
    """Values to persist for one blob: raw bytes and the encoded descriptor."""
    raw: bytes
    info: str
    reference: BlobReference


class BlobColumn:
    """
    Record-store binding for a blob column pair.

    Args:
        registry: Location registry used to resolve descriptors
        config: Per-column configuration (the ``location`` option)
        settings: Transfer settings (chunk size, atomic writes, verification)
    """

    def __init__(
        self,
        registry: LocationRegistry,
        config: Optional[ColumnConfig] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.registry = registry
        self.config = config if config is not None else ColumnConfig()
        self.settings = settings if settings is not None else Settings()

    @property
    def location(self) -> str:
        """Location key for this column; the column option wins over settings."""
        if self.config.location:
            return self.config.location
        return self.settings.location

    def load(self, raw: Optional[ByteStream], info: Optional[str]) -> Optional[StreamHandle]:
        """
        Resolve a stored blob to a readable handle.

        Args:
            raw: Raw column content (bytes or a binary stream); may be None
                when the blob is known to be materialized already
            info: Info column text, or None for a null column

        Returns:
            Handle over the local copy, or None if info is None

        Raises:
            BlobFormatError: If info is not a valid descriptor
            BlobNotFound: If materialization is needed but raw is None
            BlobDigestMismatch: If verification is enabled and bytes differ
            OSError: For I/O errors while materializing
        """
        if info is None:
            return None

        ref = BlobReference.from_info(info)
        resolution = self.registry.resolve(self.location, ref.name, ref.digest)
        handle = resolution.handle

        if not resolution.needs_materialize:
            logger.debug(f"Reusing local copy {handle.provenance}")
            return handle

        if raw is None:
            raise BlobNotFound(
                f"No local copy of {ref.name!r} at {handle.provenance} and no raw content to materialize",
                path=handle.provenance,
            )

        expected = ref.digest if self.settings.verify_digest else None
        if self.settings.atomic_writes and isinstance(handle, FileStreamHandle):
            materialize_atomically(raw, handle.path, expected_digest=expected, chunk_size=self.settings.chunk_size)
        else:
            materialize_handle(raw, handle, expected_digest=expected, chunk_size=self.settings.chunk_size)
        return handle

    def dump(self, value: Union[StreamHandle, FileBlob, None]) -> Optional[ColumnValues]:
        """
        Read a handle fully and produce the column values to persist.

        Returns:
            ColumnValues, or None if value is None

        Raises:
            BlobFormatError: If the handle's name cannot be encoded
            BlobNotFound: If the handle's resource does not exist
            OSError: For I/O errors while reading
        """
        if value is None:
            return None

        handle = value.as_handle() if isinstance(value, FileBlob) else value
        return self._values_for(handle)

    def dump_file(self, blob: FileBlob) -> ColumnValues:
        """Column values for a file on disk."""
        return self._values_for(blob.as_handle())

    def _values_for(self, handle: StreamHandle) -> ColumnValues:
        data, digest = read_handle(handle, chunk_size=self.settings.chunk_size)

        try:
            ref = BlobReference(name=handle.name, digest=digest)
        except ValidationError as e:
            raise BlobFormatError(f"Cannot encode blob name {handle.name!r}: {e}") from e

        return ColumnValues(raw=data, info=ref.to_info(), reference=ref)

