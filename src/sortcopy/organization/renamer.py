"""Date-stamped renaming of destination files."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

DATE_NAME_FORMAT = "%Y-%m-%d_%H-%M-%S"


class FileRenamer:
    """Replace a destination file name with its resolved date.

    The new name is ``<yyyy-MM-dd_HH-mm-ss>.<suffix>`` where ``<suffix>`` is
    the original suffix *including* its dot, so ``img.png`` becomes
    ``2024-03-05_10-15-30..png`` and ``README`` becomes
    ``2024-03-05_10-15-30.``. Existing trees depend on this naming.
    """

    def rename(self, destination: Path, date: Optional[datetime]) -> Path:
        """Return ``destination`` renamed after ``date``.

        Args:
            destination: Destination file path carrying the original name.
            date: Resolved date; when None the path is returned unchanged.

        Returns:
            Path: Sibling of ``destination`` with the date-stamped name.
        """
        if date is None:
            return destination

        name = destination.name
        index = name.rfind(".")
        suffix = name[index:] if index > 0 else ""
        return destination.with_name(f"{date.strftime(DATE_NAME_FORMAT)}.{suffix}")


__all__ = ["DATE_NAME_FORMAT", "FileRenamer"]
