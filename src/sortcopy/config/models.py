"""Configuration models describing sortcopy settings."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from sortcopy.classification.models import ClassificationMode


class SortcopyBaseModel(BaseModel):
    """Shared configuration for sortcopy Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class CopyOptions(SortcopyBaseModel):
    """Defaults for a copy run.

    Attributes:
        mode: Classification rule applied to every file.
        rename: Whether copied files are renamed after their resolved date.
        pending: Whether undated files go to the pending folder instead of
            being skipped.
        overwrite: Whether existing destination files are always replaced.
    """

    mode: ClassificationMode = ClassificationMode.BY_METADATA_DATE
    rename: bool = False
    pending: bool = True
    overwrite: bool = False


class ExecutionOptions(SortcopyBaseModel):
    """Worker pool and I/O tuning.

    Attributes:
        workers: Size of the worker pool; defaults to the logical CPU count.
        shutdown_timeout_seconds: Time the pool may take to drain at the end of
            a run before outstanding work is cancelled.
        hash_chunk_bytes: Read size used when hashing files for comparison.
    """

    workers: Optional[int] = Field(default=None, ge=1)
    shutdown_timeout_seconds: float = Field(default=60.0, gt=0)
    hash_chunk_bytes: int = Field(default=1024 * 1024, ge=1024)


class LoggingSettings(SortcopyBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
        log_file: Optional path of the rotating diagnostic log.
        exception_file: Append-only file recording exceptions raised during runs.
    """

    level: str = "WARNING"
    max_size_mb: int = 100
    backup_count: int = 5
    log_file: Optional[str] = None
    exception_file: str = "~/.sortcopy/exceptions.log"


class CLIOptions(SortcopyBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class SortcopyConfig(SortcopyBaseModel):
    """Top-level configuration struct for sortcopy.

    Attributes:
        run: Copy run defaults.
        execution: Worker pool settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    run: CopyOptions = Field(default_factory=CopyOptions)
    execution: ExecutionOptions = Field(default_factory=ExecutionOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "SortcopyBaseModel",
    "CopyOptions",
    "ExecutionOptions",
    "LoggingSettings",
    "CLIOptions",
    "SortcopyConfig",
]
