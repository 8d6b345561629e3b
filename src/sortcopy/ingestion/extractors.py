"""Embedded metadata extraction helpers.

Tags from the different readers are gathered into a single mapping keyed by
their XMP/EXIF-style names (``Exif:DateTimeOriginal``, ``xmp:CreateDate``,
``dcterms:created``...) so date lookup can walk one ordered list of names
regardless of the file format.
"""

from __future__ import annotations

import logging
import re
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional
from xml.etree import ElementTree

import exifread
from hachoir.core import config as hachoir_config
from hachoir.metadata import extractMetadata
from hachoir.parser import createParser
from PIL import ExifTags, Image, UnidentifiedImageError
from pypdf import PdfReader

LOGGER = logging.getLogger(__name__)

hachoir_config.quiet = True
# exifread warns once per file it cannot identify.
logging.getLogger("exifread").setLevel(logging.ERROR)

_EXIF_TAG_NAMES = {
    ExifTags.Base.DateTimeOriginal: "Exif:DateTimeOriginal",
    ExifTags.Base.DateTimeDigitized: "xmp:CreateDate",
    ExifTags.Base.DateTime: "xmp:ModifyDate",
}

_XMP_TAG_NAMES = (
    "photoshop:DateCreated",
    "xmp:CreateDate",
    "xmp:ModifyDate",
    "dc:created",
    "dcterms:created",
)

_EXIF_DATE = re.compile(r"^(\d{4}):(\d{2}):(\d{2})[ T](\d{2}:\d{2}:\d{2})")

_PDF_MAGIC = b"%PDF-"

_OOXML_CORE = "docProps/core.xml"
_ODF_META = "meta.xml"
_OFFICE_NS = {
    "cp": "http://schemas.openxmlformats.org/package/2006/metadata/core-properties",
    "dc": "http://purl.org/dc/elements/1.1/",
    "dcterms": "http://purl.org/dc/terms/",
    "meta": "urn:oasis:names:tc:opendocument:xmlns:meta:1.0",
    "office": "urn:oasis:names:tc:opendocument:xmlns:office:1.0",
}
# Element paths, relative to the part root, mapped to lookup tag names.
_OOXML_TAGS = (("dcterms:created", "dcterms:created"), ("dcterms:modified", "date"))
_ODF_TAGS = (
    ("office:meta/meta:creation-date", "meta:created"),
    ("office:meta/dc:date", "date"),
)


def normalize_exif_date(value: str) -> str:
    """Rewrite an EXIF ``yyyy:MM:dd HH:mm:ss`` stamp as ISO 8601.

    Values in any other shape are returned stripped but otherwise untouched.
    """
    text = value.strip().strip("\x00").strip()
    match = _EXIF_DATE.match(text)
    if match is None:
        return text
    year, month, day, clock = match.groups()
    return f"{year}-{month}-{day}T{clock}"


class MetadataExtractor:
    """Collect embedded date tags from images, PDFs, office documents and media."""

    def extract(self, path: Path) -> Dict[str, str]:
        """Return embedded date tags for ``path``.

        Args:
            path: File to inspect.

        Returns:
            Dict[str, str]: Tag names mapped to raw date strings. Unreadable or
            unsupported files yield an empty mapping.
        """
        tags = self._image_tags(path)
        if tags is not None:
            return tags
        if self._looks_like_pdf(path):
            return self._pdf_tags(path)
        if zipfile.is_zipfile(path):
            return self._office_tags(path)
        return self._media_tags(path)

    def exif_original_date(self, path: Path) -> Optional[str]:
        """Return the raw EXIF ``DateTimeOriginal`` value read by exifread."""
        try:
            with path.open("rb") as fh:
                exif = exifread.process_file(fh, details=False)
        except Exception as exc:  # exifread raises a wide range of errors on bad input
            LOGGER.debug("EXIF read failed for %s: %s", path, exc)
            return None
        value = exif.get("EXIF DateTimeOriginal")
        if value is None:
            return None
        return str(value).strip() or None

    # Internal helpers -------------------------------------------------

    def _image_tags(self, path: Path) -> Optional[Dict[str, str]]:
        """Return image tags, or None when Pillow does not recognise the file."""
        try:
            with Image.open(path) as img:
                exif = img.getexif()
                raw: dict[int, object] = dict(exif)
                raw.update(exif.get_ifd(ExifTags.IFD.Exif))
                xmp = img.info.get("xmp") or img.info.get("XML:com.adobe.xmp")
        except UnidentifiedImageError:
            return None
        except Exception as exc:  # corrupt images
            LOGGER.debug("Image metadata read failed for %s: %s", path, exc)
            return {}

        tags: Dict[str, str] = {}
        for tag_id, name in _EXIF_TAG_NAMES.items():
            value = raw.get(tag_id)
            if isinstance(value, bytes):
                value = value.decode("ascii", errors="ignore")
            if isinstance(value, str) and value.strip("\x00 "):
                tags[name] = normalize_exif_date(value)
        if xmp:
            for name, value in self._xmp_tags(xmp).items():
                tags.setdefault(name, value)
        return tags

    def _xmp_tags(self, packet: bytes | str) -> Dict[str, str]:
        text = packet.decode("utf-8", errors="ignore") if isinstance(packet, bytes) else packet
        tags: Dict[str, str] = {}
        for name in _XMP_TAG_NAMES:
            escaped = re.escape(name)
            match = re.search(rf'{escaped}="([^"]+)"', text) or re.search(
                rf"<{escaped}>\s*([^<]+?)\s*</{escaped}>", text
            )
            if match:
                tags[name] = match.group(1).strip()
        return tags

    def _looks_like_pdf(self, path: Path) -> bool:
        try:
            with path.open("rb") as fh:
                return fh.read(len(_PDF_MAGIC)) == _PDF_MAGIC
        except OSError:
            return False

    def _pdf_tags(self, path: Path) -> Dict[str, str]:
        try:
            info = PdfReader(path).metadata
            created = info.creation_date if info is not None else None
        except Exception as exc:  # malformed documents
            LOGGER.debug("PDF metadata read failed for %s: %s", path, exc)
            return {}
        if created is None:
            return {}
        return {"dcterms:created": created.isoformat()}

    def _office_tags(self, path: Path) -> Dict[str, str]:
        """Read OOXML ``docProps/core.xml`` or ODF ``meta.xml`` dates."""
        try:
            with zipfile.ZipFile(path) as archive:
                names = set(archive.namelist())
                if _OOXML_CORE in names:
                    part, wanted = archive.read(_OOXML_CORE), _OOXML_TAGS
                elif _ODF_META in names:
                    part, wanted = archive.read(_ODF_META), _ODF_TAGS
                else:
                    return {}
            root = ElementTree.fromstring(part)
        except (zipfile.BadZipFile, ElementTree.ParseError, OSError, KeyError) as exc:
            LOGGER.debug("Office metadata read failed for %s: %s", path, exc)
            return {}

        tags: Dict[str, str] = {}
        for element_path, name in wanted:
            value = root.findtext(element_path, namespaces=_OFFICE_NS)
            if value and value.strip():
                tags[name] = value.strip()
        return tags

    def _media_tags(self, path: Path) -> Dict[str, str]:
        try:
            parser = createParser(str(path))
        except Exception as exc:
            LOGGER.debug("No metadata parser for %s: %s", path, exc)
            return {}
        if not parser:
            return {}

        try:
            with parser:
                metadata = extractMetadata(parser)
                created = None
                if metadata and metadata.has("creation_date"):
                    created = metadata.get("creation_date")
        except Exception as exc:
            LOGGER.debug("Media metadata read failed for %s: %s", path, exc)
            return {}

        if not isinstance(created, datetime):
            return {}
        # Container timestamps are UTC.
        stamp = created.isoformat()
        if created.tzinfo is None:
            stamp += "Z"
        return {"dcterms:created": stamp}


__all__ = ["MetadataExtractor", "normalize_exif_date"]
