"""Copy run data models and shared run state."""

from __future__ import annotations

import threading
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field

from sortcopy.classification.models import ClassificationMode
from sortcopy.config.models import CopyOptions


class RunConfig(BaseModel):
    """Parameters of a single copy run; fixed once the run starts.

    Attributes:
        origin: Directory tree to copy from.
        destination: Root of the classified destination tree.
        mode: Classification rule applied to every file.
        rename: Whether copied files are renamed after their resolved date.
        pending: Whether undated files go to the pending folder.
        overwrite: Whether existing destination files are always replaced.
    """

    model_config = ConfigDict(frozen=True)

    origin: Path
    destination: Path
    mode: ClassificationMode
    rename: bool = False
    pending: bool = True
    overwrite: bool = False

    @classmethod
    def from_options(cls, origin: Path, destination: Path, options: CopyOptions) -> "RunConfig":
        """Build a run configuration from configured copy defaults."""
        return cls(
            origin=origin,
            destination=destination,
            mode=options.mode,
            rename=options.rename,
            pending=options.pending,
            overwrite=options.overwrite,
        )


class CopyStatus(str, Enum):
    """What happened to one file."""

    COPIED = "copied"
    SKIPPED_IDENTICAL = "skipped_identical"
    SKIPPED_UNCLASSIFIABLE = "skipped_unclassifiable"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class CopyOutcome:
    """Result of processing one source file.

    Attributes:
        status: Outcome category.
        source: Source file.
        destination: Destination path, when one was computed.
        reason: Failure message for ``FAILED`` outcomes.
    """

    status: CopyStatus
    source: Path
    destination: Optional[Path] = None
    reason: Optional[str] = None


class RunSummary(BaseModel):
    """Aggregated counters for a finished run.

    Attributes:
        success: False when the run aborted outside per-file processing.
        copied: Files written to the destination.
        skipped_identical: Files left alone because the destination matched.
        unclassifiable: Files skipped for lack of a usable date.
        failed: Files whose copy raised an error.
        cancelled: Files never processed because the pool shut down first.
        started_at: Run start time (UTC).
        finished_at: Run end time (UTC).
    """

    success: bool = True
    copied: int = 0
    skipped_identical: int = 0
    unclassifiable: int = 0
    failed: int = 0
    cancelled: int = 0
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    @property
    def skipped(self) -> int:
        """Return files skipped for any reason."""
        return self.skipped_identical + self.unclassifiable


class DirectoryLedger:
    """Destination directories known to exist during a run.

    Consulting the ledger avoids repeating existence checks and creation
    calls; a directory missing from it is simply created (idempotently).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._known: set[Path] = set()

    def ensure(self, directory: Path) -> bool:
        """Make sure ``directory`` exists.

        Returns:
            bool: True when a file-system call was made, False when the ledger
            already knew the directory.
        """
        with self._lock:
            if directory in self._known:
                return False
        directory.mkdir(parents=True, exist_ok=True)
        with self._lock:
            self._known.add(directory)
        return True

    def __contains__(self, directory: object) -> bool:
        with self._lock:
            return directory in self._known

    def __len__(self) -> int:
        with self._lock:
            return len(self._known)


class RunContext:
    """State shared by every file processed in one run."""

    def __init__(self) -> None:
        self.ledger = DirectoryLedger()
        self._lock = threading.Lock()
        self._counts: Counter[CopyStatus] = Counter()
        self._destination_locks: dict[Path, threading.Lock] = {}
        self._destination_users: Counter[Path] = Counter()

    def record(self, outcome: CopyOutcome) -> None:
        """Count ``outcome``."""
        with self._lock:
            self._counts[outcome.status] += 1

    def count(self, status: CopyStatus) -> int:
        with self._lock:
            return self._counts[status]

    @contextmanager
    def destination_lock(self, destination: Path) -> Iterator[None]:
        """Serialize work on a single destination path."""
        with self._lock:
            lock = self._destination_locks.setdefault(destination, threading.Lock())
            self._destination_users[destination] += 1
        try:
            with lock:
                yield
        finally:
            with self._lock:
                self._destination_users[destination] -= 1
                if self._destination_users[destination] <= 0:
                    del self._destination_users[destination]
                    del self._destination_locks[destination]

    def summarize(self, *, success: bool, cancelled: int, started_at: datetime) -> RunSummary:
        """Return the run summary for the counts recorded so far."""
        with self._lock:
            counts = dict(self._counts)
        return RunSummary(
            success=success,
            copied=counts.get(CopyStatus.COPIED, 0),
            skipped_identical=counts.get(CopyStatus.SKIPPED_IDENTICAL, 0),
            unclassifiable=counts.get(CopyStatus.SKIPPED_UNCLASSIFIABLE, 0),
            failed=counts.get(CopyStatus.FAILED, 0),
            cancelled=cancelled,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )


__all__ = [
    "CopyOutcome",
    "CopyStatus",
    "DirectoryLedger",
    "RunConfig",
    "RunContext",
    "RunSummary",
]
