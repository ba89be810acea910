from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Final


# Debug tag that enables every debug channel.
WILDCARD: Final[str] = "*"


class Severity(str, Enum):
    """Severity tier of an entry recorded on a status object."""
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class _Undefined:
    """Marker for "no value": distinct from ``None``, which is a real value."""

    _instance: "_Undefined | None" = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED: Final = _Undefined()


@dataclass(frozen=True)
class CallSite:
    """A source location attributed to a diagnostic."""
    file: str
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class StampedEntry:
    """
    One diagnostic recorded on a status object, stamped with its location.

    Usage example
    -------------
        entry = StampedEntry(location="loader.py:42", message="file is empty")
        str(entry)  # "loader.py:42: file is empty"
    """
    location: str
    message: str

    @property
    def text(self) -> str:
        return f"{self.location}: {self.message}"

    def with_repeat_count(self, count: int) -> "StampedEntry":
        """Return a copy whose message carries the ``(xN)`` repeat marker."""
        return replace(self, message=f"{self.message} (x{count})")

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class LogOptions:
    """
    Per-call options for logging and status functions.

    Parameters
    ----------
    extra_frames
        How many more stack frames to walk up before reporting the code location,
        for wrappers that want their caller's location reported.
    as_string
        Return the formatted line instead of writing it to the logger's sink.
    tag
        Debug channel consulted by ``AppLogger.if_debug``.
    level
        Minimum verbosity consulted by ``AppLogger.if_verbose``.

    Usage example
    -------------
        opts = LogOptions(extra_frames=1, as_string=True)
        line = logger.warn("disk almost full", options=opts)
    """
    extra_frames: int = 0
    as_string: bool = False
    tag: str = WILDCARD
    level: int = 1

    def add_frames(self, count: int) -> "LogOptions":
        """Return a copy that skips ``count`` more frames."""
        return replace(self, extra_frames=self.extra_frames + count)
