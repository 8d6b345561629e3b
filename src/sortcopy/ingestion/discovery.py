"""Origin tree listing."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

LOGGER = logging.getLogger(__name__)


def list_entries(directory: Path) -> Optional[list[os.DirEntry[str]]]:
    """Return the entries of ``directory`` sorted by name.

    Returns:
        Optional[list[os.DirEntry[str]]]: Directory entries, or None when the
        directory cannot be listed. Callers treat None as an empty branch.
    """
    try:
        with os.scandir(directory) as iterator:
            entries = list(iterator)
    except OSError as exc:
        LOGGER.debug("Cannot list %s: %s", directory, exc)
        return None
    entries.sort(key=lambda entry: entry.name)
    return entries


def is_directory(entry: os.DirEntry[str]) -> bool:
    """Return True for real directories; symlinked directories are not entered."""
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def is_regular_file(entry: os.DirEntry[str]) -> bool:
    """Return True when the entry resolves to a regular file."""
    try:
        return entry.is_file()
    except OSError:
        return False


__all__ = ["list_entries", "is_directory", "is_regular_file"]
