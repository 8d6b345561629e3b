"""Append-only record of exceptions raised while copying."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class ExceptionSink(Protocol):
    """Persistent receiver for errors met during a run."""

    def append_exception(self, kind: str, date_iso: str, time_hms: str, reason: str) -> None:
        """Record one exception."""

    def append_custom_message(self, text: str) -> None:
        """Record a free-form line."""


class ExceptionLog:
    """Write exception blocks to a text file, appending across runs.

    Each block reads::

        Exception: <kind>
        Date:  <yyyy-mm-dd>
        Time:   <HH:MM:SS>
        Reason: <message>

    followed by a blank line. Problems writing the file are logged and
    otherwise ignored so they never interrupt a copy.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        """Return the file receiving the records."""
        return self._path

    def append_exception(self, kind: str, date_iso: str, time_hms: str, reason: str) -> None:
        self._write(
            f"Exception: {kind}\n"
            f"Date:  {date_iso}\n"
            f"Time:   {time_hms}\n"
            f"Reason: {reason}\n"
            "\n"
        )

    def append_custom_message(self, text: str) -> None:
        self._write(f"{text}\n")

    def _write(self, block: str) -> None:
        with self._lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("a", encoding="utf-8") as fh:
                    fh.write(block)
            except OSError:
                LOGGER.exception("Could not write exception log %s", self._path)


class NullExceptionSink:
    """Exception sink that discards everything."""

    def append_exception(self, kind: str, date_iso: str, time_hms: str, reason: str) -> None:
        return None

    def append_custom_message(self, text: str) -> None:
        return None


def report_exception(sink: ExceptionSink, exc: BaseException, *, now: datetime | None = None) -> None:
    """Record ``exc`` on ``sink`` stamped with the current local date and time."""
    moment = now or datetime.now()
    kind = f"{type(exc).__module__}.{type(exc).__qualname__}"
    sink.append_exception(
        kind,
        moment.date().isoformat(),
        moment.strftime("%H:%M:%S"),
        str(exc),
    )


__all__ = ["ExceptionSink", "ExceptionLog", "NullExceptionSink", "report_exception"]
