"""Copy orchestration for classified destination trees."""

from .executor import CopyExecutor
from .models import (
    CopyOutcome,
    CopyStatus,
    DirectoryLedger,
    RunConfig,
    RunContext,
    RunSummary,
)
from .pipeline import BoundedWorkerPool, CopyOrchestrator, copy_directory
from .renamer import FileRenamer

__all__ = [
    "BoundedWorkerPool",
    "CopyExecutor",
    "CopyOrchestrator",
    "CopyOutcome",
    "CopyStatus",
    "DirectoryLedger",
    "FileRenamer",
    "RunConfig",
    "RunContext",
    "RunSummary",
    "copy_directory",
]
