"""Logger configuration from parsed arguments, environment variables and YAML files."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from apperror.callsite import frames_in_current_unit
from apperror.status import ConfigurationError
from apperror.stringify import make_ascii
from apperror.types import WILDCARD

_TRUE_WORDS = ("1", "true", "yes", "on")
_FALSE_WORDS = ("", "0", "false", "no", "off")

_YAML_KEYS = frozenset({"component", "verbose", "debug", "console_level", "file_level", "log_file"})


def _lookup(args: Any, name: str) -> Any:
    """Find ``name`` or ``--name`` in a mapping, an object with ``get``, or a namespace."""
    for key in (name, f"--{name}"):
        if isinstance(args, Mapping):
            value = args.get(key)
        elif callable(getattr(args, "get", None)):
            value = args.get(key)
        else:
            value = getattr(args, key.lstrip("-"), None)
        if value is not None:
            return value
    return None


def coerce_verbose(value: Any, *, extra_frames: int = 0) -> int:
    """
    Turn a parsed ``--verbose`` value into a verbosity level.

    ``None`` is 0, a list of repeated flags counts as its length, booleans are
    0/1 and numeric strings are parsed. ``extra_frames`` moves the location
    stamped on a ``ConfigurationError`` further up the stack.
    """
    if value is None:
        return 0
    if isinstance(value, (list, tuple)):
        return len(value)
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        level = value
    else:
        try:
            level = int(str(value).strip())
        except ValueError as error:
            raise ConfigurationError(
                "verbose must be an integer, got ", make_ascii(value, canonical=True),
                extra_frames=frames_in_current_unit() + extra_frames,
            ) from error
    if level < 0:
        raise ConfigurationError(
            "verbose must be >= 0, got ", level, extra_frames=frames_in_current_unit() + extra_frames
        )
    return level


def parse_debug_tags(value: Any, *, extra_frames: int = 0) -> Tuple[str, ...]:
    """
    Turn a parsed ``--debug`` value into debug tags.

    Booleans and numbers switch every channel on (``*``) or off; strings and
    iterables of strings are split on commas. Non-string items of an iterable
    (``append_const`` flags) switch every channel on when truthy.

    Usage example
    -------------
        parse_debug_tags(True)                  # ("*",)
        parse_debug_tags(["math,art", "io"])    # ("math", "art", "io")
        parse_debug_tags([True])                # ("*",)
    """
    if value is None or isinstance(value, bool):
        return (WILDCARD,) if value else ()
    if isinstance(value, (int, float)):
        return (WILDCARD,) if value else ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, Iterable):
        raise ConfigurationError(
            "debug must be a bool, a number or comma-separated tag strings; got ", type(value).__name__,
            extra_frames=frames_in_current_unit() + extra_frames,
        )
    tags: List[str] = []
    for item in value:
        if isinstance(item, str):
            tags.extend(t.strip() for t in item.split(",") if t.strip())
        elif item and WILDCARD not in tags:
            tags.append(WILDCARD)
    return tuple(tags)


def read_args(args: Any, *, extra_frames: int = 0) -> Tuple[int, Tuple[str, ...]]:
    """Return ``(verbose, debug_tags)`` read from command-line style arguments."""
    return (
        coerce_verbose(_lookup(args, "verbose"), extra_frames=extra_frames),
        parse_debug_tags(_lookup(args, "debug"), extra_frames=extra_frames),
    )


def _coerce_level(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    level = logging.getLevelName(str(value).strip().upper())
    if not isinstance(level, int):
        raise ConfigurationError("unknown log level ", make_ascii(value, canonical=True),
                                 extra_frames=frames_in_current_unit())
    return level


@dataclass(frozen=True)
class LoggerConfig:
    """
    Settings for an ``AppLogger`` and for the stdlib logging bridge.

    Parameters
    ----------
    component
        Label prepended to every line written by the logger.
    verbose
        Verbosity level; None means "not configured" and verbosity-gated calls
        will raise until it is set.
    debug
        Enabled debug tags; ``"*"`` enables all.
    console_level
        Level of the rich console handler installed by ``configure_logging``.
    file_level
        Level of the optional file handler.
    log_file
        If set, ``configure_logging`` also writes plain lines there.
    env_prefix
        Prefix for environment overrides, e.g. ``"MYAPP_"`` reads ``MYAPP_VERBOSE``.

    Usage example
    -------------
        cfg = LoggerConfig.from_yaml(Path("logging.yaml"))
        cfg = LoggerConfig.from_env(default=cfg)
        logger = AppLogger.from_config(cfg)
    """

    component: str = "app"
    verbose: Optional[int] = None
    debug: Tuple[str, ...] = ()

    console_level: int = 20  # logging.INFO
    file_level: int = 10  # logging.DEBUG
    log_file: Optional[Path] = None

    env_prefix: str = field(default="", repr=False)

    def logger_options(self) -> Dict[str, Any]:
        """Options mapping accepted by ``AppLogger``."""
        options: Dict[str, Any] = {"debug": list(self.debug)}
        if self.verbose is not None:
            options["verbose"] = self.verbose
        return options

    @classmethod
    def from_env(cls, *, default: Optional["LoggerConfig"] = None) -> "LoggerConfig":
        """
        Overlay environment variables on ``default``.

        Supported variables (prefix controlled by env_prefix on `default`):
        - <PFX>VERBOSE: non-negative integer (anything else is ignored)
        - <PFX>DEBUG: "1"/"true"/"yes" for all channels, "0"/"false"/"no" for none,
          otherwise comma-separated tags
        - <PFX>LOG_FILE: path

        Usage example
        -------------
            cfg = LoggerConfig.from_env(default=LoggerConfig(env_prefix="MYAPP_"))
        """
        base = default if default is not None else cls()
        pfx = base.env_prefix

        verbose = base.verbose
        verbose_raw = os.getenv(f"{pfx}VERBOSE", "").strip()
        if verbose_raw:
            try:
                parsed = int(verbose_raw)
            except ValueError:
                parsed = -1
            if parsed >= 0:
                verbose = parsed

        debug = base.debug
        debug_raw = os.getenv(f"{pfx}DEBUG")
        if debug_raw is not None:
            word = debug_raw.strip().lower()
            if word in _TRUE_WORDS:
                debug = (WILDCARD,)
            elif word in _FALSE_WORDS:
                debug = ()
            else:
                debug = parse_debug_tags(debug_raw)

        log_file = base.log_file
        log_file_raw = os.getenv(f"{pfx}LOG_FILE", "").strip()
        if log_file_raw:
            log_file = Path(log_file_raw)

        return replace(base, verbose=verbose, debug=debug, log_file=log_file)

    @classmethod
    def from_args(cls, args: Any, *, default: Optional["LoggerConfig"] = None) -> "LoggerConfig":
        """
        Overlay ``verbose`` / ``debug`` from parsed arguments on ``default``.

        ``args`` may be a mapping (``{"--verbose": 2}``), an object with ``get``,
        or an ``argparse.Namespace``. Absent or None values keep the default.
        """
        base = default if default is not None else cls()
        verbose_raw = _lookup(args, "verbose")
        debug_raw = _lookup(args, "debug")
        return replace(
            base,
            verbose=coerce_verbose(verbose_raw) if verbose_raw is not None else base.verbose,
            debug=parse_debug_tags(debug_raw) if debug_raw is not None else base.debug,
        )

    @classmethod
    def from_yaml(cls, path: Path, *, default: Optional["LoggerConfig"] = None) -> "LoggerConfig":
        """
        Load settings from a YAML file.

        Keys may sit at the top level or under a ``logging:`` section:

            logging:
              component: importer
              verbose: 1
              debug: [math, io]
              log_file: logs/importer.log
        """
        try:
            raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as error:
            raise ConfigurationError(
                "cannot read logger config ", str(path), ": ", error, extra_frames=frames_in_current_unit()
            ) from error

        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise ConfigurationError(
                "logger config must be a YAML mapping at top level: ", str(path), extra_frames=frames_in_current_unit()
            )
        section = raw.get("logging", raw)
        if not isinstance(section, Mapping):
            raise ConfigurationError(
                "'logging' section must be a mapping: ", str(path), extra_frames=frames_in_current_unit()
            )

        unknown = sorted(set(section) - _YAML_KEYS)
        if unknown:
            raise ConfigurationError(
                "unknown logger config keys in ", str(path), ": ", unknown, extra_frames=frames_in_current_unit()
            )

        base = default if default is not None else cls()
        return replace(
            base,
            component=str(section.get("component", base.component)),
            verbose=coerce_verbose(section["verbose"]) if section.get("verbose") is not None else base.verbose,
            debug=parse_debug_tags(section["debug"]) if "debug" in section else base.debug,
            console_level=_coerce_level(section.get("console_level", base.console_level)),
            file_level=_coerce_level(section.get("file_level", base.file_level)),
            log_file=Path(section["log_file"]) if section.get("log_file") else base.log_file,
        )
