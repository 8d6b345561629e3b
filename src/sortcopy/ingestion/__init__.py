"""Reading the origin tree: listing, hashing and date resolution."""

from .dates import METADATA_DATE_TAGS, NULL_DATE_SENTINEL, DateResolver, parse_metadata_date
from .detectors import HashComputer
from .discovery import is_directory, is_regular_file, list_entries
from .extractors import MetadataExtractor

__all__ = [
    "DateResolver",
    "HashComputer",
    "METADATA_DATE_TAGS",
    "MetadataExtractor",
    "NULL_DATE_SENTINEL",
    "is_directory",
    "is_regular_file",
    "list_entries",
    "parse_metadata_date",
]
