"""Compact text rendering of arbitrary values for log lines and status entries."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from typing import Any

from apperror.types import UNDEFINED

# Attributes starting with this prefix are internal state, not worth logging.
PRIVATE_PREFIX = "_"


def _has_own_str(value: Any) -> bool:
    return type(value).__str__ is not object.__str__


def strip_private(value: Any) -> Any:
    """
    Convert ``value`` into JSON-compatible data, dropping private attributes.

    Objects and dataclasses lose every attribute whose name starts with
    ``PRIVATE_PREFIX``, recursively. Mapping keys are kept as-is.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if value is UNDEFINED:
        return None
    if isinstance(value, Mapping):
        return {str(k): strip_private(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [strip_private(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return [strip_private(v) for v in sorted(value, key=repr)]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: strip_private(getattr(value, f.name))
            for f in dataclasses.fields(value)
            if not f.name.startswith(PRIVATE_PREFIX)
        }
    if hasattr(value, "__dict__") and not isinstance(value, type):
        return {
            k: strip_private(v)
            for k, v in vars(value).items()
            if not k.startswith(PRIVATE_PREFIX)
        }
    return str(value)


def make_ascii(value: Any, canonical: bool = False) -> str:
    """
    Turn anything into a compact one-line string.

    Parameters
    ----------
    value
        Object to render.
    canonical
        If True, strings are JSON-quoted (used for mapping keys and values).

    Usage example
    -------------
        make_ascii("foo")              # foo
        make_ascii(42)                 # 42
        make_ascii({"foo": 42})        # {"foo":42}
        make_ascii(["foo", 42])        # ["foo",42]
    """
    if isinstance(value, str):
        return json.dumps(value) if canonical else value
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, Mapping):
        items = ",".join(
            make_ascii(k, canonical=True) + ":" + make_ascii(v, canonical=True) for k, v in value.items()
        )
        return "{" + items + "}"
    if isinstance(value, BaseException):
        return f"{type(value).__name__}: {value}"
    if not isinstance(value, (list, tuple, set, frozenset)) and _has_own_str(value):
        return str(value)
    return json.dumps(strip_private(value), separators=(",", ":"))
