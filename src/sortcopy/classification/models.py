"""Classification data models."""

from __future__ import annotations

from enum import Enum


class ClassificationMode(str, Enum):
    """Rule deciding where a copied file lands.

    The three date modes share one strategy and only differ in the date
    source feeding it.
    """

    BY_CREATION_DATE = "creation-date"
    BY_METADATA_DATE = "metadata-date"
    BY_LAST_MODIFIED_DATE = "modified-date"
    BY_EXTENSION = "extension"
    BY_TYPE = "type"

    @property
    def is_date_based(self) -> bool:
        """Return True for modes that classify by a resolved date."""
        return self in _DATE_MODES


_DATE_MODES = frozenset(
    {
        ClassificationMode.BY_CREATION_DATE,
        ClassificationMode.BY_METADATA_DATE,
        ClassificationMode.BY_LAST_MODIFIED_DATE,
    }
)


__all__ = ["ClassificationMode"]
