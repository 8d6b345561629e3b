"""Log and exception sinks used by the copy pipeline."""

from .exception_log import ExceptionLog, ExceptionSink, NullExceptionSink, report_exception
from .handlers import configure_logging
from .sinks import ConsoleLogSink, LoggerLogSink, LogSink, MemoryLogSink

__all__ = [
    "ConsoleLogSink",
    "ExceptionLog",
    "ExceptionSink",
    "LogSink",
    "LoggerLogSink",
    "MemoryLogSink",
    "NullExceptionSink",
    "configure_logging",
    "report_exception",
]
