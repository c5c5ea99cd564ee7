"""
Settings and configuration for FileBlob.

Centralizes configuration values and provides validation with fail-fast behavior.
Settings are loaded from environment variables on request; nothing is read
at import time.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Settings",
    "ColumnConfig",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_DATA_DIRNAME",
    "create_settings_from_env",
    "default_data_dir",
]

DEFAULT_CHUNK_SIZE = 0x1000
DEFAULT_DATA_DIRNAME = "FileBlobData"


def default_data_dir() -> Path:
    """
    Platform default root for materialized blobs.

    Uses $XDG_DATA_HOME/FileBlobData when set, otherwise
    ~/.local/share/FileBlobData. The directory is not created here.
    """
    xdg = os.getenv("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / DEFAULT_DATA_DIRNAME


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for blob resolution and transfer.

    Attributes:
        data_dir: Root used for the empty location key (None = platform default)
        location: Location key used when a column does not name one
        chunk_size: Transfer chunk size in bytes
        atomic_writes: Materialize through a temp file + rename
        verify_digest: Check materialized bytes against the descriptor digest
    """
    data_dir: Optional[Path] = None
    location: str = ""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    atomic_writes: bool = False
    verify_digest: bool = False

    def __post_init__(self):
        """Validate settings on construction."""
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")

        if self.location is None:
            raise ValueError("location must be a string (use '' for the default location)")

        if self.verify_digest and not self.atomic_writes:
            raise ValueError("verify_digest requires atomic_writes (mismatched bytes must not replace the target)")

    def resolved_data_dir(self) -> Path:
        return Path(self.data_dir) if self.data_dir is not None else default_data_dir()


class ColumnConfig(BaseModel):
    """
    Typed per-column configuration.

    The only recognized option is ``location``, naming the registered
    location strategy for the column. Empty or absent selects the default
    strategy and its default root.
    """
    model_config = ConfigDict(frozen=True)

    location: Optional[str] = Field(default=None, description="Registered location key")

    @classmethod
    def from_parameters(cls, parameters: Mapping[str, str]) -> ColumnConfig:
        """Build from an untyped parameter mapping; unknown keys are ignored."""
        return cls(location=parameters.get("location"))


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - FILEBLOB_DATA_DIR (optional, default root for the empty location)
        - FILEBLOB_LOCATION (default: "")
        - FILEBLOB_CHUNK_SIZE (default: 4096)
        - FILEBLOB_ATOMIC_WRITES (default: false)
        - FILEBLOB_VERIFY_DIGEST (default: false)

    Returns:
        Settings object with validated configuration

    Raises:
        ValueError: If configuration is invalid

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def str_to_bool(value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    data_dir = os.getenv("FILEBLOB_DATA_DIR")

    return Settings(
        data_dir=Path(data_dir) if data_dir else None,
        location=os.getenv("FILEBLOB_LOCATION", ""),
        chunk_size=get_int("FILEBLOB_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
        atomic_writes=str_to_bool(os.getenv("FILEBLOB_ATOMIC_WRITES", "false")),
        verify_digest=str_to_bool(os.getenv("FILEBLOB_VERIFY_DIGEST", "false")),
    )
