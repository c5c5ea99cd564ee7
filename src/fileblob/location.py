"""
Location strategies and the registry that selects them.

A location key names where a blob's local copy lives. The registry maps
keys to strategies; a strategy turns (key, name, digest) into a stream
handle plus a flag saying whether the bytes still have to be copied in.

Registration is expected during process setup. The registry does no
locking, and two concurrent resolutions of the same (key, name) may both
see the resource as missing and both materialize it; the last writer wins.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol, Union, runtime_checkable

from .path_safety import safe_blob_name
from .settings import Settings, default_data_dir
from .streams import FileStreamHandle, StreamHandle
from .transfer import read_handle

__all__ = [
    "Resolution",
    "LocationStrategy",
    "DefaultLocationStrategy",
    "RootedLocationStrategy",
    "VerifyingLocationStrategy",
    "LocationRegistry",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of resolving a blob descriptor.

    needs_materialize is True when no resource exists yet at the handle's
    provenance and the caller has to copy the bytes in.
    """
    needs_materialize: bool
    handle: StreamHandle


@runtime_checkable
class LocationStrategy(Protocol):
    """Protocol for mapping a location key and blob name to a resource."""

    def resolve(self, location: str, name: str) -> StreamHandle:
        """
        Return a handle for name under location.

        Args:
            location: Location key; empty selects the strategy's default root
            name: Blob name from the descriptor

        Raises:
            ValueError: If name is not a safe single path component
        """
        ...

    def resolve_with_digest(self, location: str, name: str, digest: Optional[bytes]) -> Resolution:
        """
        Resolve and decide whether materialization is required.

        Args:
            location: Location key; empty selects the strategy's default root
            name: Blob name from the descriptor
            digest: Descriptor digest; strategies may use it to judge freshness
        """
        ...


class DefaultLocationStrategy:
    """
    Filesystem strategy: a non-empty location key is a directory path, the
    empty key maps to the default root.

    A location directory that does not exist yet is created when the first
    blob is written into it. Existence is decided by path only. The digest is accepted but not
    compared, so an existing file with the same name is reused as-is; use
    VerifyingLocationStrategy when content must match.
    """

    def __init__(self, default_root: Union[str, Path, None] = None) -> None:
        self._configured_root = Path(default_root) if default_root is not None else None
        self._root: Optional[Path] = None

    @property
    def default_root(self) -> Path:
        """Default root directory, created on first access."""
        if self._root is None:
            root = self._configured_root
            if root is None:
                root = default_data_dir()
            root.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Using default blob root {root}")
            self._root = root.resolve()
        return self._root

    def resolve(self, location: str, name: str) -> FileStreamHandle:
        name = safe_blob_name(name)
        root = Path(location) if location else self.default_root
        return FileStreamHandle(root / name)

    def resolve_with_digest(self, location: str, name: str, digest: Optional[bytes]) -> Resolution:
        handle = self.resolve(location, name)
        exists = handle.exists()
        logger.debug(f"Resolved {name!r} at location {location!r} to {handle.provenance} (exists={exists})")
        return Resolution(needs_materialize=not exists, handle=handle)


class RootedLocationStrategy:
    """
    Filesystem strategy bound to one root directory whatever the key.

    Register it under a key to give that key its own storage area.
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self._root = Path(root)

    def resolve(self, location: str, name: str) -> FileStreamHandle:
        name = safe_blob_name(name)
        self._root.mkdir(parents=True, exist_ok=True)
        return FileStreamHandle(self._root / name)

    def resolve_with_digest(self, location: str, name: str, digest: Optional[bytes]) -> Resolution:
        handle = self.resolve(location, name)
        return Resolution(needs_materialize=not handle.exists(), handle=handle)


class VerifyingLocationStrategy:
    """
    Strategy that also requires an existing resource to match the digest.

    Wraps another strategy for the actual placement. When the resource
    exists but hashes to something other than the descriptor digest, the
    resolution asks for materialization so the stale copy is replaced.
    """

    def __init__(self, inner: Optional[LocationStrategy] = None) -> None:
        self._inner = inner if inner is not None else DefaultLocationStrategy()

    @property
    def inner(self) -> LocationStrategy:
        return self._inner

    def resolve(self, location: str, name: str) -> StreamHandle:
        return self._inner.resolve(location, name)

    def resolve_with_digest(self, location: str, name: str, digest: Optional[bytes]) -> Resolution:
        resolution = self._inner.resolve_with_digest(location, name, digest)
        if resolution.needs_materialize or digest is None:
            return resolution

        _, actual = read_handle(resolution.handle)
        if actual != digest:
            logger.warning(
                f"Stale local copy {resolution.handle.provenance}: expected {digest.hex()}, got {actual.hex()}"
            )
            return Resolution(needs_materialize=True, handle=resolution.handle)
        return resolution


class LocationRegistry:
    """
    Mapping from location key to strategy, with a default for unknown keys.

    Construct one per process (or per test) and pass it to whatever needs
    to resolve blobs; there is no module-level instance.
    """

    def __init__(self, default: Optional[LocationStrategy] = None) -> None:
        self._default = default if default is not None else DefaultLocationStrategy()
        self._strategies: Dict[str, LocationStrategy] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> LocationRegistry:
        """Registry whose default strategy is rooted at the configured data dir."""
        default: LocationStrategy = DefaultLocationStrategy(settings.resolved_data_dir())
        if settings.verify_digest:
            default = VerifyingLocationStrategy(default)
        return cls(default=default)

    @property
    def default(self) -> LocationStrategy:
        return self._default

    def register(self, key: str, strategy: LocationStrategy) -> None:
        """Associate strategy with key; a later registration for the same key wins."""
        if key in self._strategies:
            logger.info(f"Replacing location strategy for key {key!r}")
        else:
            logger.info(f"Registered location strategy for key {key!r}")
        self._strategies[key] = strategy

    def get(self, key: Optional[str]) -> LocationStrategy:
        """Return the strategy for key, or the default strategy. Never fails."""
        return self._strategies.get(key or "", self._default)

    def resolve(self, location: Optional[str], name: str, digest: Optional[bytes] = None) -> Resolution:
        key = location or ""
        return self.get(key).resolve_with_digest(key, name, digest)

    def __contains__(self, key: object) -> bool:
        return key in self._strategies
