"""
Operations Facade - Application service layer.

Provides a clean interface between the CLI and the engine, keeping
registry and settings construction in one place.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..column import BlobColumn, ColumnValues
from ..location import LocationRegistry, Resolution
from ..models import BlobReference, FileBlob
from ..settings import ColumnConfig, Settings
from ..transfer import read_handle


@dataclass(frozen=True)
class LoadResult:
    """Outcome of loading a stored blob back to a local file."""
    provenance: str
    materialized: bool


class Operations:
    """
    Application service facade for CLI operations.

    One method per CLI verb. Exceptions bubble up for central mapping in
    ``run_and_exit``.
    """

    def __init__(self, settings: Optional[Settings] = None, registry: Optional[LocationRegistry] = None):
        """
        Initialize Operations facade.

        Args:
            settings: Optional settings (if None, loaded from environment)
            registry: Location registry (if None, built from settings)
        """
        if settings is None:
            from ..settings import create_settings_from_env
            settings = create_settings_from_env()
        self.settings = settings
        self.registry = registry if registry is not None else LocationRegistry.from_settings(settings)

    def _column(self, location: Optional[str]) -> BlobColumn:
        return BlobColumn(self.registry, ColumnConfig(location=location), self.settings)

    def digest(self, path: str) -> str:
        """Hex digest of a local file."""
        _, digest = read_handle(FileBlob(path).as_handle(), chunk_size=self.settings.chunk_size)
        return digest.hex()

    def dump(self, path: str, raw_out: Optional[str] = None) -> ColumnValues:
        """
        Produce column values for a local file, optionally writing the raw
        bytes to raw_out.
        """
        values = self._column(None).dump(FileBlob(path))
        if raw_out:
            Path(raw_out).write_bytes(values.raw)
        return values

    def resolve(self, info: str, location: Optional[str] = None) -> tuple[BlobReference, str, Resolution]:
        """Decode info and resolve it without copying any bytes."""
        column = self._column(location)
        ref = BlobReference.from_info(info)
        return ref, column.location, self.registry.resolve(column.location, ref.name, ref.digest)

    def load(self, info: str, raw_path: Optional[str] = None, location: Optional[str] = None) -> LoadResult:
        """Load a stored blob, materializing it from raw_path when needed."""
        column = self._column(location)
        ref = BlobReference.from_info(info)
        before = self.registry.resolve(column.location, ref.name, ref.digest)

        if raw_path is None or not before.needs_materialize:
            handle = column.load(None, info)
        else:
            with open(raw_path, "rb") as raw:
                handle = column.load(raw, info)
        return LoadResult(provenance=handle.provenance, materialized=before.needs_materialize)
