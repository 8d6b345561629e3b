"""Message sinks receiving the human-readable progress of a copy run."""

from __future__ import annotations

import logging
import threading
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.markup import escape

LOGGER = logging.getLogger(__name__)

_SUMMARY_PREFIXES = ("Finish", "Cancelled", "Error")


@runtime_checkable
class LogSink(Protocol):
    """Receiver for one line per processing step."""

    def append_message(self, text: str) -> None:
        """Record ``text``. Must tolerate concurrent callers."""


class MemoryLogSink:
    """Collect messages in memory, in arrival order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._messages: list[str] = []

    def append_message(self, text: str) -> None:
        with self._lock:
            self._messages.append(text)

    @property
    def messages(self) -> list[str]:
        """Return a snapshot of the collected messages."""
        with self._lock:
            return list(self._messages)


class ConsoleLogSink:
    """Print messages on a rich console.

    Progress lines are hidden in quiet or summary mode. Summary lines
    (``Finish``, ``Cancelled`` and ``Error``) are shown unless quiet, and
    error lines are always shown.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        quiet: bool = False,
        summary_only: bool = False,
    ) -> None:
        self._console = console or Console()
        self._quiet = quiet
        self._summary_only = summary_only
        self._lock = threading.Lock()

    def append_message(self, text: str) -> None:
        is_error = text.startswith("Error")
        is_summary = text.startswith(_SUMMARY_PREFIXES)
        if self._quiet and not is_error:
            return
        if self._summary_only and not is_summary:
            return
        if is_error:
            style = "red"
        elif text.startswith("Cancelled"):
            style = "yellow"
        else:
            style = "green" if is_summary else None
        with self._lock:
            self._console.print(escape(text), style=style, highlight=False)


class LoggerLogSink:
    """Forward messages to a standard library logger."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or LOGGER
        self._level = level

    def append_message(self, text: str) -> None:
        level = logging.ERROR if text.startswith("Error") else self._level
        self._logger.log(level, "%s", text)


__all__ = ["LogSink", "MemoryLogSink", "ConsoleLogSink", "LoggerLogSink"]
