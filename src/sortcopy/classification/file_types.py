"""Extension to file-type category lookup."""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Mapping

DEFAULT_CATEGORY = "Others"

_CATEGORIES: dict[str, tuple[str, ...]] = {
    "Images": ("jpg", "jpeg", "png", "gif", "bmp", "tiff", "tif", "svg", "webp", "ico"),
    "Videos": ("mp4", "avi", "mkv", "mov", "wmv", "flv", "webm", "mpg", "mpeg", "3gp"),
    "Music": ("mp3", "wav", "flac", "aac", "ogg", "wma", "m4a", "aiff"),
    "Documents": (
        "pdf",
        "doc",
        "docx",
        "xls",
        "xlsx",
        "ppt",
        "pptx",
        "txt",
        "odt",
        "rtf",
        "md",
    ),
    "Compressed": ("zip", "rar", "7z", "tar", "gz", "bz2", "xz"),
    "Executables": ("exe", "msi", "bat", "sh", "bin", "jar"),
    "Code": (
        "java",
        "py",
        "js",
        "html",
        "css",
        "cpp",
        "c",
        "h",
        "php",
        "rb",
        "swift",
        "kt",
        "go",
        "rs",
        "ts",
        "xml",
    ),
    "Design": ("dwg", "dxf", "ai", "eps"),
    "DiskImage": ("iso", "dmg", "vmdk", "img"),
}

EXTENSION_CATEGORIES: Mapping[str, str] = MappingProxyType(
    {extension: category for category, extensions in _CATEGORIES.items() for extension in extensions}
)


def file_extension(path: Path | str) -> str:
    """Return the text after the final dot of the file name.

    Casing is preserved; files without a dot yield an empty string.
    """
    name = Path(path).name
    index = name.rfind(".")
    return "" if index == -1 else name[index + 1 :]


def category_for_extension(extension: str) -> str:
    """Return the category for ``extension``, or ``Others`` when unknown."""
    return EXTENSION_CATEGORIES.get(extension.lower(), DEFAULT_CATEGORY)


def categories() -> dict[str, list[str]]:
    """Return every category with its extensions, in table order."""
    return {category: list(extensions) for category, extensions in _CATEGORIES.items()}


__all__ = [
    "DEFAULT_CATEGORY",
    "EXTENSION_CATEGORIES",
    "categories",
    "category_for_extension",
    "file_extension",
]
