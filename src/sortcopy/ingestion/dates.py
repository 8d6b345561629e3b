"""Date resolution for classification and renaming.

Dates are naive local date-times. Each classification mode reads a single
source; failures are reported as ``None`` and never raised.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from sortcopy.classification.models import ClassificationMode

from .extractors import MetadataExtractor, normalize_exif_date

LOGGER = logging.getLogger(__name__)

# Null date written by QuickTime-style containers (seconds since 1904 = 0).
NULL_DATE_SENTINEL = "1904-01-01T00:00:00Z"

# Checked in order; the first tag present decides the result.
METADATA_DATE_TAGS: tuple[str, ...] = (
    "dcterms:created",
    "photoshop:DateCreated",
    "Exif:DateTimeOriginal",
    "xmp:CreateDate",
    "xmp:ModifyDate",
    "dc:created",
    "Creation-Date",
    "meta:created",
    "created",
    "date",
)

_FALLBACK_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S")


def parse_metadata_date(value: str) -> Optional[datetime]:
    """Parse a metadata date string.

    Tries ISO 8601 date-time first, then ``yyyy-MM-dd HH:mm:ss`` and
    ``yyyy-MM-dd'T'HH:mm:ss``. A trailing ``Z`` is removed and any UTC offset
    is dropped, keeping the wall-clock reading.

    Args:
        value: Raw date string taken from a metadata tag.

    Returns:
        Optional[datetime]: Parsed date, or None for the null-date sentinel and
        for strings in no supported format.
    """
    text = value.strip()
    if text == NULL_DATE_SENTINEL:
        return None
    if text.endswith("Z"):
        text = text[:-1]

    # A bare date is not a date-time.
    if len(text) > 10:
        try:
            return datetime.fromisoformat(text).replace(tzinfo=None)
        except ValueError:
            pass

    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


class DateResolver:
    """Resolve the date a file is classified and renamed by."""

    def __init__(self, extractor: MetadataExtractor | None = None) -> None:
        self._extractor = extractor or MetadataExtractor()

    def resolve(self, path: Path, mode: ClassificationMode) -> Optional[datetime]:
        """Return the date for ``path`` under ``mode``.

        Non-date modes always resolve to None.
        """
        if mode is ClassificationMode.BY_CREATION_DATE:
            return self.creation_date(path)
        if mode is ClassificationMode.BY_LAST_MODIFIED_DATE:
            return self.last_modified_date(path)
        if mode is ClassificationMode.BY_METADATA_DATE:
            return self.metadata_date(path)
        return None

    def creation_date(self, path: Path) -> Optional[datetime]:
        """Return the file-system creation time.

        Platforms that do not record a birth time report the last-modified
        time instead.
        """
        try:
            stat = path.stat()
        except OSError as exc:
            LOGGER.debug("Cannot stat %s: %s", path, exc)
            return None
        stamp = getattr(stat, "st_birthtime", None)
        if stamp is None:
            stamp = stat.st_ctime if os.name == "nt" else stat.st_mtime
        return datetime.fromtimestamp(stamp)

    def last_modified_date(self, path: Path) -> Optional[datetime]:
        """Return the file-system last-modified time."""
        try:
            return datetime.fromtimestamp(path.stat().st_mtime)
        except OSError as exc:
            LOGGER.debug("Cannot stat %s: %s", path, exc)
            return None

    def metadata_date(self, path: Path) -> Optional[datetime]:
        """Return the creation date embedded in the file's metadata.

        The first tag of :data:`METADATA_DATE_TAGS` present in the file is
        parsed; when none is present the EXIF ``DateTimeOriginal`` value is
        read directly. Any failure yields None.
        """
        try:
            tags = self._extractor.extract(path)
            for name in METADATA_DATE_TAGS:
                value = tags.get(name)
                if value is not None:
                    return parse_metadata_date(value)

            original = self._extractor.exif_original_date(path)
            if original is None:
                return None
            return parse_metadata_date(normalize_exif_date(original))
        except Exception as exc:
            LOGGER.debug("Metadata date unavailable for %s: %s", path, exc)
            return None


__all__ = [
    "METADATA_DATE_TAGS",
    "NULL_DATE_SENTINEL",
    "DateResolver",
    "parse_metadata_date",
]
