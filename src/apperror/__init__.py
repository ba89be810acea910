"""
apperror: call-site stamped diagnostics and status objects.

Key primitives
--------------
- AppLogger: leveled log lines tagged with the calling file and line
- AppStatus: info / warnings / errors plus a return value, passed up the stack
- AppError: exception carrying an AppStatus (and its subclasses)
- resolve_call_site() / frames_in_current_unit() / adorn(): stack inspection
- make_ascii(): compact stringification used by all of the above
- LoggerConfig / configure_logging(): configuration and the stdlib logging bridge
"""

from .callsite import adorn, display_name, frames_in_current_unit, resolve_call_site
from .config import LoggerConfig
from .logger import AppLogger
from .logging import configure_logging
from .sinks import BufferSink, ConsoleSink, LoggingSink, Sink
from .status import (
    AppError,
    AppStatus,
    ArgumentTypeError,
    ConfigurationError,
    MergeTypeError,
    UnresolvedErrorsError,
    UsageError,
    dedup,
)
from .stringify import make_ascii, strip_private
from .types import UNDEFINED, WILDCARD, CallSite, LogOptions, Severity, StampedEntry
from .version import __version__

__all__ = [
    "AppLogger",
    "AppStatus",
    "AppError",
    "ConfigurationError",
    "UsageError",
    "UnresolvedErrorsError",
    "ArgumentTypeError",
    "MergeTypeError",
    "dedup",
    "resolve_call_site",
    "frames_in_current_unit",
    "display_name",
    "adorn",
    "make_ascii",
    "strip_private",
    "LoggerConfig",
    "configure_logging",
    "Sink",
    "BufferSink",
    "LoggingSink",
    "ConsoleSink",
    "CallSite",
    "StampedEntry",
    "LogOptions",
    "Severity",
    "UNDEFINED",
    "WILDCARD",
    "__version__",
]
