"""Content hashing used to compare source and destination files."""

from __future__ import annotations

import hashlib
from pathlib import Path

DEFAULT_CHUNK_BYTES = 1024 * 1024


class HashComputer:
    """Compute MD5 digests by streaming the file in fixed-size chunks."""

    def __init__(self, chunk_bytes: int = DEFAULT_CHUNK_BYTES) -> None:
        self.chunk_bytes = chunk_bytes

    def compute(self, path: Path) -> str:
        """Return the hex digest of the file contents.

        Raises:
            OSError: If the file cannot be read.
        """
        digest = hashlib.md5(usedforsecurity=False)
        with path.open("rb") as fh:
            for chunk in iter(lambda: fh.read(self.chunk_bytes), b""):
                digest.update(chunk)
        return digest.hexdigest()

    def same_content(self, first: Path, second: Path) -> bool:
        """Return True when both files hash identically."""
        if first.stat().st_size != second.stat().st_size:
            return False
        return self.compute(first) == self.compute(second)


__all__ = ["DEFAULT_CHUNK_BYTES", "HashComputer"]
