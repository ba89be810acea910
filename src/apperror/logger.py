"""
``AppLogger``: leveled diagnostic lines stamped with the caller's file and line.

Lines look like ``<component>: <LABEL>: <file>:<line>: <message>`` and go to a
settable sink (``sys.stderr`` by default), or come back as a string.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import fields, replace
from typing import Any, List, Optional, Set, Tuple

from apperror.callsite import frames_in_current_unit, resolve_call_site
from apperror.config import LoggerConfig, coerce_verbose, parse_debug_tags, read_args
from apperror.sinks import BufferSink, Sink
from apperror.status import ArgumentTypeError, ConfigurationError
from apperror.stringify import make_ascii
from apperror.types import WILDCARD, LogOptions

_log = logging.getLogger(__name__)

_CONSTRUCTOR_OPTIONS = frozenset({"verbose", "debug"})
_LOG_OPTION_FIELDS = frozenset(f.name for f in fields(LogOptions))


class AppLogger:
    """
    Convenience functions for diagnostic logging.

    Parameters
    ----------
    component_name
        Prepended to every line, so you know which system generated the noise.
    options
        Optional mapping with:
        - ``verbose``: verbosity level (0 is mute, 3 very verbose). If you use
          verbosity-gated calls it must be set, here, via ``set_verbose`` or via
          the ``VERBOSE`` environment variable; otherwise they raise.
        - ``debug``: True (all channels), a tag, or a list of tags.
    sink
        Where lines are written; anything with ``write(text)``.

    Every logging call takes message parts, which are stringified and joined,
    plus ``options=LogOptions(...)`` and/or the same fields as keywords:
    ``extra_frames`` (walk further up the stack before reporting the location)
    and ``as_string`` (return the line instead of writing it).

    Usage example
    -------------
        logger = AppLogger("importer", {"verbose": 1})
        logger.error("I owe: $", 300 + 100, " dollars")
        logger.v1("only when verbose")
        line = logger.warn("for later", as_string=True)
    """

    def __init__(
        self,
        component_name: Any,
        options: Optional[Mapping[str, Any]] = None,
        *,
        sink: Optional[Sink] = None,
    ) -> None:
        if options is not None and not isinstance(options, Mapping):
            raise ConfigurationError(
                "options must be a mapping, but was ", type(options).__name__, extra_frames=frames_in_current_unit()
            )
        options = options or {}
        unknown = sorted(set(options) - _CONSTRUCTOR_OPTIONS)
        if unknown:
            raise ConfigurationError("unknown AppLogger options: ", unknown, extra_frames=frames_in_current_unit())

        self.component = make_ascii(component_name)
        self.debug_tags: Set[str] = set(
            parse_debug_tags(options.get("debug", False), extra_frames=frames_in_current_unit())
        )
        # Public and settable: callers may swap it to capture output
        self.sink: Sink = sink if sink is not None else sys.stderr

        verbose = options.get("verbose")
        self.verbose: Optional[int] = (
            coerce_verbose(verbose, extra_frames=frames_in_current_unit())
            if verbose is not None
            else LoggerConfig.from_env().verbose
        )

    @classmethod
    def from_config(cls, cfg: LoggerConfig, *, sink: Optional[Sink] = None) -> "AppLogger":
        """Build a logger from a ``LoggerConfig``."""
        return cls(cfg.component, cfg.logger_options(), sink=sink)

    def __repr__(self) -> str:
        return (
            f"AppLogger(component={self.component!r}, verbose={self.verbose!r}, "
            f"debug_tags={sorted(self.debug_tags)!r})"
        )

    # ------------------------------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------------------------------

    def set_verbose(self, level: Any) -> None:
        """
        Set the verbosity level (0 is mute, 3 is very verbose).

        Accepts what the constructor accepts (numeric strings, counted flag
        lists...); None marks verbosity as unset again.
        """
        self.verbose = (
            coerce_verbose(level, extra_frames=frames_in_current_unit()) if level is not None else None
        )

    def get_verbose(self) -> int:
        """Return the verbosity level; raises ``ConfigurationError`` if it was never set."""
        if self.verbose is None:
            raise ConfigurationError(
                "verbosity not set on logger '", self.component, "'", extra_frames=frames_in_current_unit()
            )
        return self.verbose

    def set_debug(self, tags_or_bool: Any = True) -> None:
        """
        Turn debug channels on or off.

        True enables every channel, False disables all of them, a string or a
        list of strings enables those channels. Each enabled channel is
        announced with an INFO line.
        """
        tags: List[Any]
        if tags_or_bool is True:
            tags = [WILDCARD]
        elif tags_or_bool is False:
            self.debug_tags.clear()
            tags = []
        elif isinstance(tags_or_bool, str):
            tags = [tags_or_bool]
        elif isinstance(tags_or_bool, Iterable):
            tags = list(tags_or_bool)
        else:
            raise ArgumentTypeError(
                "Invalid type of argument for set_debug(): ", type(tags_or_bool).__name__,
                extra_frames=frames_in_current_unit(),
            )

        bad = [t for t in tags if not isinstance(t, str)]
        if bad:
            raise ArgumentTypeError(
                "debug tags must be strings, but got ", type(bad[0]).__name__, "; tag: ", make_ascii(bad[0]),
                extra_frames=frames_in_current_unit(),
            )

        for tag in tags:
            self.debug_tags.add(tag)
            self.info(tag, " debugging enabled", extra_frames=frames_in_current_unit())

    def is_set_debug(self, tag: Optional[str] = None) -> bool:
        """With a tag: is that channel on (directly or via ``*``)? Without: is any channel on?"""
        if tag is not None:
            return tag in self.debug_tags or WILDCARD in self.debug_tags
        return bool(self.debug_tags)

    def set_from_args(self, args: Any) -> None:
        """
        Set verbosity and debug channels from parsed command-line arguments.

        ``args`` may be a mapping with ``verbose``/``--verbose`` and
        ``debug``/``--debug`` keys (docopt style), an object with ``get``, or an
        ``argparse.Namespace``. Repeated ``--verbose`` flags collected as a list
        count as their number; debug values are comma-separated channel names.
        """
        verbose, tags = read_args(args, extra_frames=frames_in_current_unit())
        self.verbose = verbose
        _log.debug("set_from_args: verbose=%s debug=%s", verbose, tags)
        self.set_debug(list(tags))

    # ------------------------------------------------------------------------------------------
    # Sink substitution
    # ------------------------------------------------------------------------------------------

    @contextmanager
    def redirect(self, sink: Sink) -> Iterator[Sink]:
        """
        Temporarily write to ``sink``; the previous sink is restored on exit.

        Usage example
        -------------
            with logger.redirect(open("diag.txt", "w")) as f:
                logger.info("goes to the file")
        """
        previous = self.sink
        self.sink = sink
        try:
            yield sink
        finally:
            self.sink = previous

    @contextmanager
    def capture(self) -> Iterator[BufferSink]:
        """Temporarily write into a fresh ``BufferSink``, yielded to the caller."""
        buffer = BufferSink()
        with self.redirect(buffer):
            yield buffer

    # ------------------------------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------------------------------

    def _options(self, options: Optional[LogOptions], overrides: Mapping[str, Any]) -> LogOptions:
        if options is not None and not isinstance(options, LogOptions):
            raise ArgumentTypeError(
                "options must be a LogOptions, but was ", type(options).__name__,
                extra_frames=frames_in_current_unit(),
            )
        unknown = sorted(set(overrides) - _LOG_OPTION_FIELDS)
        if unknown:
            raise ArgumentTypeError("unknown log options: ", unknown, extra_frames=frames_in_current_unit())
        opts = options if options is not None else LogOptions()
        opts = replace(opts, **overrides) if overrides else opts
        if not isinstance(opts.extra_frames, int) or isinstance(opts.extra_frames, bool) or opts.extra_frames < 0:
            raise ArgumentTypeError(
                "extra_frames must be a non-negative integer, got ", make_ascii(opts.extra_frames, canonical=True),
                extra_frames=frames_in_current_unit(),
            )
        return opts

    def _emit(self, label: str, parts: Tuple[Any, ...], opts: LogOptions) -> Optional[str]:
        # Two frames up: the public logging method, then its caller.
        site = resolve_call_site(2 + opts.extra_frames)
        formatted = f"{self.component}: {label}: {site}: " + "".join(make_ascii(p) for p in parts)
        if opts.as_string:
            return formatted
        self.sink.write(formatted + "\n")
        return None

    def _at_verbosity(self, level: int, parts: Tuple[Any, ...], opts: LogOptions) -> Optional[str]:
        if self.get_verbose() < level:
            return None
        return self._emit(f"V{level}", parts, opts.add_frames(1))

    def info(self, msg: Any, *more: Any, options: Optional[LogOptions] = None, **overrides: Any) -> Optional[str]:
        return self._emit("INFO", (msg, *more), self._options(options, overrides))

    def warn(self, msg: Any, *more: Any, options: Optional[LogOptions] = None, **overrides: Any) -> Optional[str]:
        return self._emit("WARN", (msg, *more), self._options(options, overrides))

    warning = warn

    def error(self, msg: Any, *more: Any, options: Optional[LogOptions] = None, **overrides: Any) -> Optional[str]:
        return self._emit("ERROR", (msg, *more), self._options(options, overrides))

    err = error

    def debug(self, msg: Any, *more: Any, options: Optional[LogOptions] = None, **overrides: Any) -> Optional[str]:
        """Always write a DEBUG line; use ``if_debug`` for conditional debug output."""
        return self._emit("DEBUG", (msg, *more), self._options(options, overrides))

    def v1(self, msg: Any, *more: Any, options: Optional[LogOptions] = None, **overrides: Any) -> Optional[str]:
        """Write a V1 line if verbosity is at least 1."""
        return self._at_verbosity(1, (msg, *more), self._options(options, overrides))

    def v2(self, msg: Any, *more: Any, options: Optional[LogOptions] = None, **overrides: Any) -> Optional[str]:
        """Write a V2 line if verbosity is at least 2."""
        return self._at_verbosity(2, (msg, *more), self._options(options, overrides))

    def v3(self, msg: Any, *more: Any, options: Optional[LogOptions] = None, **overrides: Any) -> Optional[str]:
        """Write a V3 line if verbosity is at least 3."""
        return self._at_verbosity(3, (msg, *more), self._options(options, overrides))

    def if_verbose(
        self, msg: Any, *more: Any, options: Optional[LogOptions] = None, **overrides: Any
    ) -> Optional[str]:
        """
        Write a ``V<level>`` line if verbosity is at least ``level`` (default 1).

        Usage example
        -------------
            logger.if_verbose("very verbose!", level=2)
        """
        opts = self._options(options, overrides)
        if not isinstance(opts.level, int) or isinstance(opts.level, bool):
            raise ArgumentTypeError(
                "level must be an integer, but is ", type(opts.level).__name__,
                extra_frames=frames_in_current_unit(),
            )
        _log.debug("if_verbose: level=%s verbose=%s", opts.level, self.verbose)
        return self._at_verbosity(opts.level, (msg, *more), opts)

    def if_debug(self, msg: Any, *more: Any, options: Optional[LogOptions] = None, **overrides: Any) -> Optional[str]:
        """
        Write a DEBUG line if the ``tag`` channel (default ``*``) or every channel is on.

        Usage example
        -------------
            logger.if_debug(5, " =? ", 2 + 3, tag="math")   # "DEBUG[math]: ... 5 =? 5"
        """
        opts = self._options(options, overrides)
        if not isinstance(opts.tag, str):
            raise ArgumentTypeError(
                "Tag must be a string, but is ", type(opts.tag).__name__, "; tag: ", make_ascii(opts.tag),
                extra_frames=frames_in_current_unit(),
            )
        if not self.is_set_debug(opts.tag):
            return None
        label = "DEBUG" if opts.tag == WILDCARD else f"DEBUG[{opts.tag}]"
        return self._emit(label, (msg, *more), opts)

    def announce_myself(self, as_string: bool = False) -> Optional[str]:
        """Write (or return) an INFO line showing how the current program was called."""
        return self.info("called as: ", " ".join(sys.argv), extra_frames=1, as_string=as_string)
