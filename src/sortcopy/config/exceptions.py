"""Errors raised while loading sortcopy configuration."""

from __future__ import annotations


class ConfigError(Exception):
    """Raised when a configuration source is unreadable or invalid.

    Attributes:
        source: Name of the offending source (``file``, ``environment``,
            ``cli``), when known.
    """

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source
