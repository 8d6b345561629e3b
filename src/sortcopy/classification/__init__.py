"""Classification rules for the copy pipeline."""

from .file_types import DEFAULT_CATEGORY, category_for_extension, file_extension
from .models import ClassificationMode
from .strategies import (
    PENDING_DIRNAME,
    ClassificationStrategy,
    DateClassificationStrategy,
    ExtensionClassificationStrategy,
    TypeClassificationStrategy,
    strategy_for,
)

__all__ = [
    "ClassificationMode",
    "ClassificationStrategy",
    "DateClassificationStrategy",
    "ExtensionClassificationStrategy",
    "TypeClassificationStrategy",
    "DEFAULT_CATEGORY",
    "PENDING_DIRNAME",
    "category_for_extension",
    "file_extension",
    "strategy_for",
]
