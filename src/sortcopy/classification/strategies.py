"""Strategies mapping a source file onto a destination directory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional

from .file_types import category_for_extension, file_extension
from .models import ClassificationMode

PENDING_DIRNAME = "0_Pending"


class ClassificationStrategy(ABC):
    """Base class for the fixed set of classification rules."""

    @abstractmethod
    def classify(
        self,
        origin: Path,
        destination_root: Path,
        date: Optional[datetime],
        pending: bool,
    ) -> Optional[Path]:
        """Return the destination directory for ``origin``.

        Args:
            origin: Source file being classified.
            destination_root: Root of the destination tree.
            date: Date resolved for the file, if any.
            pending: Whether undated files may go to the pending folder.

        Returns:
            Optional[Path]: Directory the file belongs in, or None when the
            file cannot be classified.
        """


class DateClassificationStrategy(ClassificationStrategy):
    """Place files under ``<year>/<month>``, month without zero padding."""

    def classify(
        self,
        origin: Path,
        destination_root: Path,
        date: Optional[datetime],
        pending: bool,
    ) -> Optional[Path]:
        if date is not None:
            return destination_root / str(date.year) / str(date.month)
        if pending:
            return destination_root / PENDING_DIRNAME / origin.parent.name
        return None


class ExtensionClassificationStrategy(ClassificationStrategy):
    """Place files in a folder named after their extension, case preserved."""

    def classify(
        self,
        origin: Path,
        destination_root: Path,
        date: Optional[datetime],
        pending: bool,
    ) -> Optional[Path]:
        return destination_root / file_extension(origin)


class TypeClassificationStrategy(ClassificationStrategy):
    """Place files in a folder named after their file-type category."""

    def classify(
        self,
        origin: Path,
        destination_root: Path,
        date: Optional[datetime],
        pending: bool,
    ) -> Optional[Path]:
        return destination_root / category_for_extension(file_extension(origin))


_DATE_STRATEGY = DateClassificationStrategy()

_STRATEGIES: dict[ClassificationMode, ClassificationStrategy] = {
    ClassificationMode.BY_CREATION_DATE: _DATE_STRATEGY,
    ClassificationMode.BY_METADATA_DATE: _DATE_STRATEGY,
    ClassificationMode.BY_LAST_MODIFIED_DATE: _DATE_STRATEGY,
    ClassificationMode.BY_EXTENSION: ExtensionClassificationStrategy(),
    ClassificationMode.BY_TYPE: TypeClassificationStrategy(),
}


def strategy_for(mode: ClassificationMode) -> ClassificationStrategy:
    """Return the strategy implementing ``mode``.

    Raises:
        ValueError: If the mode is not a known classification mode.
    """
    try:
        return _STRATEGIES[ClassificationMode(mode)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Classification mode not supported: {mode!r}") from exc


__all__ = [
    "PENDING_DIRNAME",
    "ClassificationStrategy",
    "DateClassificationStrategy",
    "ExtensionClassificationStrategy",
    "TypeClassificationStrategy",
    "strategy_for",
]
