"""
Status objects: carry diagnostics and a return value up and down the call stack.

Instead of writing to a stream, a function can record info / warnings / errors
on an ``AppStatus`` and let a caller of its choosing decide what to do with
them. The exceptions raised by this package are built the same way, so a
thrown error and a logged line read alike.
"""

from __future__ import annotations

import logging
from collections.abc import MutableSequence
from typing import TYPE_CHECKING, Any, Dict, List, TypeVar

from apperror.callsite import frames_in_current_unit, resolve_call_site
from apperror.stringify import make_ascii
from apperror.types import UNDEFINED, Severity, StampedEntry

if TYPE_CHECKING:
    from apperror.logger import AppLogger

_log = logging.getLogger(__name__)

E = TypeVar("E", StampedEntry, str)

# Names that would collide with built-in fields in ``extra_fields()``.
RESERVED_FIELDS = frozenset({"value"})


def dedup(entries: MutableSequence[E]) -> MutableSequence[E]:
    """
    Collapse repeated entries, in place, appending a repeat count.

    Entries compare by their full text (location and message), first-seen order
    is kept and an entry seen N > 1 times gets an ``(xN)`` suffix.

    Usage example
    -------------
        msgs = ["x", "x", "y"]
        dedup(msgs)   # ["x (x2)", "y"]
    """
    counts: Dict[str, int] = {}
    firsts: Dict[str, E] = {}
    for entry in entries:
        key = str(entry)
        if key in counts:
            counts[key] += 1
        else:
            counts[key] = 1
            firsts[key] = entry

    collapsed: List[E] = []
    for key, count in counts.items():
        entry = firsts[key]
        if count > 1:
            entry = entry.with_repeat_count(count) if isinstance(entry, StampedEntry) else f"{entry} (x{count})"
        collapsed.append(entry)

    entries[:] = collapsed
    return entries


class AppStatus:
    """
    Accumulates leveled diagnostics plus an optional return value.

    Each entry is stamped with the location of the first stack frame outside
    this module, so it points at the code that added it.

    Parameters
    ----------
    *parts
        If given, the status starts with one error made of these parts.
    extra_frames
        Frames to skip, above the first frame outside this module, when stamping
        that initial error.

    Usage example
    -------------
        status = AppStatus()
        status.add_warning("cache is stale")
        if not status.ok():
            logger.error("load failed: ", status)
        status.add_value(rows)
    """

    def __init__(self, *parts: Any, extra_frames: int = 0) -> None:
        self.info: List[StampedEntry] = []
        self.warnings: List[StampedEntry] = []
        self.errors: List[StampedEntry] = []
        self.last_error: str = ""
        self.value: Any = UNDEFINED
        self.extra: Dict[str, Any] = {}
        if parts:
            self.add_error(*parts, extra_frames=extra_frames)

    # ------------------------------------------------------------------------------------------
    # Adding diagnostics
    # ------------------------------------------------------------------------------------------

    def _stamp(self, parts: tuple[Any, ...], extra_frames: int) -> StampedEntry:
        if not isinstance(extra_frames, int) or isinstance(extra_frames, bool) or extra_frames < 0:
            raise ArgumentTypeError(
                "extra_frames must be a non-negative integer, got ", make_ascii(extra_frames, canonical=True)
            )
        site = resolve_call_site(frames_in_current_unit() + extra_frames)
        return StampedEntry(location=str(site), message="".join(make_ascii(p) for p in parts))

    def add_info(self, msg: Any, *more: Any, extra_frames: int = 0) -> "AppStatus":
        """Record an INFO entry; returns self for chaining."""
        entry = self._stamp((msg, *more), extra_frames)
        _log.debug("stamped info entry: %s", entry)
        self.info.append(entry)
        return self

    def add_warning(self, msg: Any, *more: Any, extra_frames: int = 0) -> "AppStatus":
        """Record a WARN entry; returns self for chaining."""
        self.warnings.append(self._stamp((msg, *more), extra_frames))
        return self

    def add_warn(self, msg: Any, *more: Any, extra_frames: int = 0) -> "AppStatus":
        """Alias for ``add_warning``."""
        return self.add_warning(msg, *more, extra_frames=extra_frames)

    def add_error(self, msg: Any, *more: Any, extra_frames: int = 0) -> "AppStatus":
        """Record an ERROR entry and remember it as ``last_error``; returns self."""
        entry = self._stamp((msg, *more), extra_frames)
        self.errors.append(entry)
        self.last_error = entry.text
        return self

    def add_status(self, other: "AppStatus") -> "AppStatus":
        """
        Merge another status into this one.

        Entries are appended after ours. ``last_error`` and the value are taken
        from ``other`` when it has them, and its extra fields win on collision.
        """
        if not isinstance(other, AppStatus):
            raise MergeTypeError(
                "add_status() is for merging in another AppStatus object; object type is ",
                type(other).__name__,
            )
        self.errors.extend(other.errors)
        if other.last_error:
            self.last_error = other.last_error
        self.warnings.extend(other.warnings)
        self.info.extend(other.info)
        if other.has_value():
            self.value = other.value
        self.extra.update(other.extra)
        return self

    merge = add_status

    # ------------------------------------------------------------------------------------------
    # Value and extra fields
    # ------------------------------------------------------------------------------------------

    def add_value(self, value: Any) -> "AppStatus":
        """Set the return value carried by this status; returns self."""
        self.value = value
        return self

    def get_value(self) -> Any:
        """
        Return the carried value.

        Raises ``UnresolvedErrorsError`` while errors are present: handle or
        clear them before trusting the value.
        """
        if self.has_errors():
            raise UnresolvedErrorsError(
                "You must clear errors on status object before accessing value: ", self.error_msg()
            )
        return self.value

    def has_value(self) -> bool:
        return self.value is not UNDEFINED

    def set_extra(self, key: str, value: Any) -> "AppStatus":
        """Attach a caller-chosen field; returns self."""
        if not isinstance(key, str) or key in RESERVED_FIELDS:
            raise ArgumentTypeError("extra field name must be a string other than ", sorted(RESERVED_FIELDS),
                                    "; got ", make_ascii(key, canonical=True))
        self.extra[key] = value
        return self

    def get_extra(self, key: str, default: Any = None) -> Any:
        return self.extra.get(key, default)

    def extra_fields(self) -> Dict[str, Any]:
        """All caller-attached fields, led by ``value`` when one is set."""
        fields: Dict[str, Any] = {}
        if self.has_value():
            fields["value"] = self.value
        fields.update(self.extra)
        return fields

    def extra_attrs_to_str(self) -> str:
        fields = self.extra_fields()
        return "extra attributes: " + make_ascii(fields) if fields else ""

    # ------------------------------------------------------------------------------------------
    # Queries and clearing
    # ------------------------------------------------------------------------------------------

    def ok(self) -> bool:
        """True iff no errors are recorded."""
        return not self.has_errors()

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def has_info(self) -> bool:
        return len(self.info) > 0

    def clear_errors(self) -> "AppStatus":
        """Drop all errors, and ``last_error`` with them; returns self."""
        self.errors = []
        self.last_error = ""
        return self

    def clear_warnings(self) -> "AppStatus":
        self.warnings = []
        return self

    def clear_info(self) -> "AppStatus":
        self.info = []
        return self

    def dedup_info(self) -> "AppStatus":
        dedup(self.info)
        return self

    def dedup_warnings(self) -> "AppStatus":
        dedup(self.warnings)
        return self

    def dedup_errors(self) -> "AppStatus":
        """Collapse repeated errors; ``last_error`` picks up the repeat count of its entry."""
        repeats = sum(1 for e in self.errors if e.text == self.last_error)
        dedup(self.errors)
        if repeats > 1:
            self.last_error = f"{self.last_error} (x{repeats})"
        return self

    # ------------------------------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------------------------------

    @staticmethod
    def _tier_msg(severity: Severity, entries: List[StampedEntry]) -> str:
        if not entries:
            return ""
        return f"{severity.value}: " + "; ".join(e.text for e in entries)

    def info_msg(self) -> str:
        """All INFO entries as one string, or ``""``."""
        return self._tier_msg(Severity.INFO, self.info)

    def warn_msg(self) -> str:
        """All WARN entries as one string, or ``""``."""
        return self._tier_msg(Severity.WARN, self.warnings)

    def error_msg(self) -> str:
        """All ERROR entries as one string, or ``""``."""
        return self._tier_msg(Severity.ERROR, self.errors)

    err_msg = error_msg

    def render(self) -> str:
        """
        Errors, then warnings, then info, or ``ok`` when there is nothing to say;
        extra fields are appended last.
        """
        sections = [s for s in (self.error_msg(), self.warn_msg(), self.info_msg()) if s]
        text = "; ".join(sections) if sections else "ok"
        extras = self.extra_attrs_to_str()
        if extras:
            text += "; " + extras
        return text

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"AppStatus({self.render()!r})"

    def log_to(self, logger: "AppLogger", *prefix: Any, extra_frames: int = 0) -> None:
        """
        Write each non-empty tier to ``logger`` at the matching level.

        The logged location is the caller of ``log_to``; ``prefix`` parts, if
        any, lead each line.

        Usage example
        -------------
            status.log_to(logger, "nightly import")
        """
        if not isinstance(extra_frames, int) or isinstance(extra_frames, bool) or extra_frames < 0:
            raise ArgumentTypeError(
                "extra_frames must be a non-negative integer, got ", make_ascii(extra_frames, canonical=True)
            )
        lead = "".join(make_ascii(p) for p in prefix) + ": " if prefix else ""
        frames = extra_frames + 1
        if self.has_errors():
            logger.error(lead, self.error_msg(), extra_frames=frames)
        if self.has_warnings():
            logger.warn(lead, self.warn_msg(), extra_frames=frames)
        if self.has_info():
            logger.info(lead, self.info_msg(), extra_frames=frames)


# ##################################################################################################
# Exceptions
# ##################################################################################################

class AppError(Exception):
    """
    An exception that carries an ``AppStatus``.

    Built from message parts exactly like a status pre-seeded with an error, so
    the message is stamped with the location that raised it.

    Usage example
    -------------
        try:
            raise AppError("Unexpectedly, we still have ", 4, " wheels")
        except AppError as err:
            status.add_status(err.to_status())
    """

    def __init__(self, msg: Any, *more: Any, extra_frames: int = 0) -> None:
        self.status = AppStatus(msg, *more, extra_frames=extra_frames)
        super().__init__(self.status.render())

    def to_status(self) -> AppStatus:
        return self.status


class ConfigurationError(AppError, ValueError):
    """Raised when a logger is used before it is configured, or configured wrongly."""


class UsageError(AppError):
    """Raised when the logging / status API itself is misused."""


class UnresolvedErrorsError(UsageError):
    """Raised when reading a status value while errors are still recorded."""


class ArgumentTypeError(UsageError, TypeError):
    """Raised when an argument has the wrong type (debug tags, extra field names...)."""


class MergeTypeError(AppError, TypeError):
    """Raised when merging something that is not an ``AppStatus``."""
