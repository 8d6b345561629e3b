"""Copy orchestration: tree walking and the worker pool."""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from sortcopy.classification.models import ClassificationMode
from sortcopy.ingestion.dates import DateResolver
from sortcopy.ingestion.detectors import HashComputer
from sortcopy.ingestion.discovery import is_directory, is_regular_file, list_entries
from sortcopy.logs.exception_log import ExceptionSink, NullExceptionSink, report_exception
from sortcopy.logs.sinks import LoggerLogSink, LogSink

from .executor import CopyExecutor
from .models import CopyOutcome, RunConfig, RunContext, RunSummary

LOGGER = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_TIMEOUT = 60.0


def default_worker_count() -> int:
    """Return the logical CPU count, at least one."""
    return os.cpu_count() or 1


class BoundedWorkerPool:
    """Thread pool that limits how much work may be queued ahead.

    ``submit`` blocks once ``max_pending`` tasks are queued or running, so
    the producer never gets far ahead of the workers.
    """

    def __init__(self, workers: int, *, max_pending: int | None = None) -> None:
        self.workers = max(1, workers)
        self._executor = ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="sortcopy-worker"
        )
        self._slots = threading.BoundedSemaphore(max_pending or self.workers * 2)
        self._lock = threading.Lock()
        self._futures: set[Future[CopyOutcome]] = set()

    def submit(self, fn: Callable[..., CopyOutcome], *args: object) -> Future[CopyOutcome]:
        """Queue ``fn(*args)``, waiting for a free slot first."""
        self._slots.acquire()
        try:
            future = self._executor.submit(fn, *args)
        except BaseException:
            self._slots.release()
            raise
        with self._lock:
            self._futures.add(future)
        future.add_done_callback(self._release)
        return future

    def shutdown(self, timeout: float) -> int:
        """Wait up to ``timeout`` seconds for queued work, then cancel the rest.

        Returns:
            int: Number of tasks cancelled before they started.
        """
        with self._lock:
            outstanding = set(self._futures)
        cancelled = 0
        try:
            _, not_done = wait(outstanding, timeout=timeout)
        except BaseException:
            self._executor.shutdown(wait=False, cancel_futures=True)
            raise
        for future in not_done:
            if future.cancel():
                cancelled += 1
        still_running = len(not_done) - cancelled
        self._executor.shutdown(wait=still_running == 0, cancel_futures=True)
        return cancelled

    def _release(self, future: Future[CopyOutcome]) -> None:
        with self._lock:
            self._futures.discard(future)
        self._slots.release()


class CopyOrchestrator:
    """Walk an origin tree and copy every file into the classified destination.

    Directories are walked sequentially; each regular file is handed to the
    worker pool as an independent unit. Origin sub-directories are not
    mirrored: every file is classified against the destination root.
    """

    def __init__(
        self,
        sink: LogSink,
        *,
        exception_sink: ExceptionSink | None = None,
        workers: int | None = None,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
        resolver: DateResolver | None = None,
        hasher: HashComputer | None = None,
    ) -> None:
        self._sink = sink
        self._exception_sink = exception_sink or NullExceptionSink()
        self._workers = workers or default_worker_count()
        self._shutdown_timeout = shutdown_timeout
        self._executor = CopyExecutor(
            sink,
            exception_sink=self._exception_sink,
            resolver=resolver,
            hasher=hasher,
        )

    @property
    def workers(self) -> int:
        return self._workers

    def run(self, config: RunConfig) -> RunSummary:
        """Copy ``config.origin`` into ``config.destination``.

        Per-file errors are counted and never abort the run. Errors outside
        per-file processing (invalid roots, traversal failures) are logged
        and reported as ``success=False``. The pool is shut down either way.

        Args:
            config: Run parameters.

        Returns:
            RunSummary: Counters for the run.
        """
        started_at = datetime.now(timezone.utc)
        context = RunContext()
        pool = BoundedWorkerPool(self._workers)
        success = True
        cancelled = 0
        LOGGER.info(
            "Copy run %s -> %s (mode=%s, workers=%d)",
            config.origin,
            config.destination,
            config.mode.value,
            pool.workers,
        )
        try:
            self._validate_roots(config)
            self._walk(config.origin, config, context, pool, config.destination.resolve())
        except Exception as exc:
            success = False
            LOGGER.error("Copy run failed: %s", exc)
            LOGGER.debug("Copy run failure details", exc_info=True)
            report_exception(self._exception_sink, exc)
            self._sink.append_message(f"Error during the copy: {exc}")
        finally:
            cancelled = self._shutdown(pool)

        summary = context.summarize(success=success, cancelled=cancelled, started_at=started_at)
        if summary.success:
            self._sink.append_message(
                f"Finish: copied={summary.copied}, skipped={summary.skipped}, "
                f"errors={summary.failed}"
            )
        else:
            self._sink.append_message(
                f"Error: copy did not complete (copied={summary.copied}, "
                f"skipped={summary.skipped}, errors={summary.failed})"
            )
        return summary

    # Internal helpers -------------------------------------------------

    def _validate_roots(self, config: RunConfig) -> None:
        origin = config.origin
        if not origin.is_dir():
            raise NotADirectoryError(f"Origin is not a directory: {origin}")
        if not os.access(origin, os.R_OK | os.X_OK):
            self._sink.append_message("Error: Can't read from origin directory!")
            raise PermissionError(f"Origin is not readable: {origin}")

        destination = config.destination
        destination.mkdir(parents=True, exist_ok=True)
        if not os.access(destination, os.W_OK | os.X_OK):
            self._sink.append_message("Error: Can't write in destination directory!")
            raise PermissionError(f"Destination is not writable: {destination}")

    def _walk(
        self,
        directory: Path,
        config: RunConfig,
        context: RunContext,
        pool: BoundedWorkerPool,
        destination_root: Path,
    ) -> None:
        entries = list_entries(directory)
        if entries is None:
            return

        for entry in entries:
            path = Path(entry.path)
            if is_directory(entry):
                if path.resolve() == destination_root:
                    LOGGER.debug("Skipping destination root inside origin: %s", path)
                    continue
                self._walk(path, config, context, pool, destination_root)
            elif is_regular_file(entry):
                pool.submit(self._executor.process, path, config, context)

    def _shutdown(self, pool: BoundedWorkerPool) -> int:
        try:
            cancelled = pool.shutdown(self._shutdown_timeout)
        except BaseException as exc:
            LOGGER.error("Interrupted while waiting for copy tasks: %s", exc)
            report_exception(self._exception_sink, exc)
            self._sink.append_message(f"Error waiting for task termination: {exc}")
            raise
        if cancelled:
            LOGGER.warning(
                "Worker pool did not finish within %.0fs; cancelled %d pending file(s)",
                self._shutdown_timeout,
                cancelled,
            )
            self._sink.append_message(
                f"Cancelled {cancelled} file(s) still pending after "
                f"{self._shutdown_timeout:.0f}s shutdown wait."
            )
        return cancelled


def copy_directory(
    origin: Path | str,
    destination: Path | str,
    mode: ClassificationMode | str,
    rename: bool,
    pending: bool,
    overwrite: bool,
    *,
    sink: LogSink | None = None,
    exception_sink: ExceptionSink | None = None,
    workers: int | None = None,
    shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
) -> bool:
    """Run a copy and report only whether it completed.

    Args:
        origin: Directory tree to copy from.
        destination: Root of the classified destination tree.
        mode: Classification mode.
        rename: Rename copied files after their resolved date.
        pending: Send undated files to the pending folder.
        overwrite: Always replace existing destination files.
        sink: Receiver of progress lines; defaults to the ``sortcopy`` logger.
        exception_sink: Receiver of error records.
        workers: Worker pool size; defaults to the CPU count.
        shutdown_timeout: Seconds the pool may take to drain.

    Returns:
        bool: True when the run completed.
    """
    if sink is None:
        sink = LoggerLogSink()
    exceptions = exception_sink or NullExceptionSink()
    try:
        config = RunConfig(
            origin=Path(origin),
            destination=Path(destination),
            mode=ClassificationMode(mode),
            rename=rename,
            pending=pending,
            overwrite=overwrite,
        )
    except ValueError as exc:
        exceptions.append_custom_message(f"Error in copy action {exc}")
        sink.append_message(f"Error during the copy: {exc}")
        return False

    orchestrator = CopyOrchestrator(
        sink,
        exception_sink=exceptions,
        workers=workers,
        shutdown_timeout=shutdown_timeout,
    )
    return orchestrator.run(config).success


__all__ = [
    "DEFAULT_SHUTDOWN_TIMEOUT",
    "BoundedWorkerPool",
    "CopyOrchestrator",
    "copy_directory",
    "default_worker_count",
]
