"""
Name safety utilities for FileBlob.

Blob names come from the info column of stored records and are joined onto
a storage root, so they are validated before they ever touch the filesystem.
"""
from __future__ import annotations

from pathlib import PurePosixPath, PureWindowsPath


def safe_blob_name(name: str) -> str:
    """
    Validate a blob name so it names exactly one entry directly under a root.

    This function enforces the following safety rules:
    - No empty strings, "." or ".."
    - No directory separators ('/' or '\\')
    - No drive or absolute forms

    Args:
        name: Blob name from a descriptor

    Returns:
        The name, unchanged

    Raises:
        ValueError: If the name violates safety rules

    Examples:
        >>> safe_blob_name("report.pdf")
        'report.pdf'

        >>> safe_blob_name("../secrets.txt")
        ValueError: unsafe blob name: ../secrets.txt
    """
    if not name or name in (".", ".."):
        raise ValueError(f"unsafe blob name: {name}")
    if "/" in name or "\\" in name:
        raise ValueError(f"unsafe blob name: {name}")
    if PurePosixPath(name).is_absolute() or PureWindowsPath(name).drive:
        raise ValueError(f"unsafe blob name: {name}")
    return name
