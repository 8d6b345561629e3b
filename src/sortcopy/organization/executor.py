"""Per-file copy unit: classify, rename, compare, copy, restore timestamps."""

from __future__ import annotations

import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

from sortcopy.classification.strategies import strategy_for
from sortcopy.ingestion.dates import DateResolver
from sortcopy.ingestion.detectors import HashComputer
from sortcopy.logs.exception_log import ExceptionSink, NullExceptionSink, report_exception
from sortcopy.logs.sinks import LogSink

from .models import CopyOutcome, CopyStatus, RunConfig, RunContext
from .renamer import FileRenamer

LOGGER = logging.getLogger(__name__)

# Offset between 1601-01-01 (FILETIME epoch) and 1970-01-01 in 100 ns ticks.
_FILETIME_EPOCH_OFFSET = 116_444_736_000_000_000


def set_creation_time(path: Path, created: datetime) -> bool:
    """Set the creation time of ``path`` where the platform allows it.

    Returns:
        bool: True when the creation time was written, False when the
        platform offers no way to set it.

    Raises:
        OSError: If the platform call fails.
    """
    if os.name != "nt":
        return False

    import ctypes
    from ctypes import wintypes

    kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)
    kernel32.CreateFileW.argtypes = [
        wintypes.LPCWSTR,
        wintypes.DWORD,
        wintypes.DWORD,
        wintypes.LPVOID,
        wintypes.DWORD,
        wintypes.DWORD,
        wintypes.HANDLE,
    ]
    kernel32.CreateFileW.restype = wintypes.HANDLE
    kernel32.SetFileTime.argtypes = [
        wintypes.HANDLE,
        ctypes.POINTER(wintypes.FILETIME),
        ctypes.POINTER(wintypes.FILETIME),
        ctypes.POINTER(wintypes.FILETIME),
    ]
    kernel32.SetFileTime.restype = wintypes.BOOL
    kernel32.CloseHandle.argtypes = [wintypes.HANDLE]

    file_write_attributes = 0x100
    share_read_write = 0x1 | 0x2
    open_existing = 3
    flag_backup_semantics = 0x02000000

    handle = kernel32.CreateFileW(
        str(path),
        file_write_attributes,
        share_read_write,
        None,
        open_existing,
        flag_backup_semantics,
        None,
    )
    if handle is None or handle == wintypes.HANDLE(-1).value:
        raise ctypes.WinError(ctypes.get_last_error())
    try:
        ticks = int(created.timestamp() * 10_000_000) + _FILETIME_EPOCH_OFFSET
        filetime = wintypes.FILETIME(ticks & 0xFFFFFFFF, ticks >> 32)
        if not kernel32.SetFileTime(handle, ctypes.byref(filetime), None, None):
            raise ctypes.WinError(ctypes.get_last_error())
    finally:
        kernel32.CloseHandle(handle)
    return True


class CopyExecutor:
    """Process one source file from classification through copy."""

    def __init__(
        self,
        sink: LogSink,
        *,
        exception_sink: ExceptionSink | None = None,
        resolver: DateResolver | None = None,
        hasher: HashComputer | None = None,
        renamer: FileRenamer | None = None,
    ) -> None:
        self._sink = sink
        self._exception_sink = exception_sink or NullExceptionSink()
        self._resolver = resolver or DateResolver()
        self._hasher = hasher or HashComputer()
        self._renamer = renamer or FileRenamer()

    def destination_for(
        self,
        source: Path,
        config: RunConfig,
        date: Optional[datetime],
    ) -> Optional[Path]:
        """Return the destination file path, or None when unclassifiable.

        Args:
            source: Source file.
            config: Run parameters.
            date: Date resolved for the file under the run's mode.

        Returns:
            Optional[Path]: Destination file path, renamed when requested.
        """
        directory = strategy_for(config.mode).classify(
            source, config.destination, date, config.pending
        )
        if directory is None:
            return None
        destination = directory / source.name
        if config.rename and source.is_file():
            destination = self._renamer.rename(destination, date)
        return destination

    def process(self, source: Path, config: RunConfig, context: RunContext) -> CopyOutcome:
        """Run the whole per-file unit and record its outcome on ``context``.

        Errors are caught here and turned into ``FAILED`` outcomes so one
        file never stops the run.
        """
        self._sink.append_message(f"Processing: {source}")
        destination: Optional[Path] = None
        try:
            date = self._resolver.resolve(source, config.mode)
            destination = self.destination_for(source, config, date)
            if destination is None:
                self._sink.append_message(f"The file could not be classified: {source}")
                outcome = CopyOutcome(CopyStatus.SKIPPED_UNCLASSIFIABLE, source)
            else:
                outcome = self.copy(source, destination, date, config, context)
        except Exception as exc:
            LOGGER.debug("Copy failed for %s", source, exc_info=True)
            report_exception(self._exception_sink, exc)
            self._sink.append_message(f"Error copying file: {source} - {exc}")
            outcome = CopyOutcome(CopyStatus.FAILED, source, destination, reason=str(exc))

        context.record(outcome)
        return outcome

    def copy(
        self,
        source: Path,
        destination: Path,
        date: Optional[datetime],
        config: RunConfig,
        context: RunContext,
    ) -> CopyOutcome:
        """Copy ``source`` to ``destination`` unless an identical copy exists.

        Raises:
            OSError: If the directory cannot be created or the copy fails.
        """
        with context.destination_lock(destination):
            context.ledger.ensure(destination.parent)
            if destination.exists() and not config.overwrite:
                if self._same_content(source, destination):
                    self._sink.append_message(
                        f"{source.name} already exists and is identical, not overwritten."
                    )
                    return CopyOutcome(CopyStatus.SKIPPED_IDENTICAL, source, destination)

            shutil.copyfile(source, destination)
            self.apply_attributes(source, destination, date)

        self._sink.append_message(f"File copied from: {source} to {destination}")
        return CopyOutcome(CopyStatus.COPIED, source, destination)

    def apply_attributes(self, source: Path, destination: Path, date: Optional[datetime]) -> None:
        """Copy access/modification times and stamp the creation time.

        The creation time is the resolved date, or the current time when
        there is none. Failures are reported but never raised.
        """
        try:
            stat = source.stat()
            os.utime(destination, ns=(stat.st_atime_ns, stat.st_mtime_ns))
            created = date or datetime.now()
            if not set_creation_time(destination, created):
                LOGGER.debug("Creation time not settable on this platform: %s", destination)
        except OSError as exc:
            LOGGER.warning("Could not apply attributes to %s: %s", destination, exc)
            report_exception(self._exception_sink, exc)

    def _same_content(self, source: Path, destination: Path) -> bool:
        try:
            return self._hasher.same_content(source, destination)
        except OSError as exc:
            report_exception(self._exception_sink, exc)
            return False


__all__ = ["CopyExecutor", "set_creation_time"]
