"""
Call-site resolution: which source location owns a diagnostic.

Every function here counts frames relative to *its own caller*, so a wrapper
that wants to report its own caller's location asks for one more frame.
"""

from __future__ import annotations

import inspect
import re
from pathlib import PurePath
from typing import Any

from apperror.stringify import make_ascii
from apperror.types import CallSite

# Package entry modules say nothing about where a message came from.
_ENTRY_MODULE_RE = re.compile(r"^__(init|main)__\.pyc?$")


def display_name(path: str) -> str:
    """
    Short file name used in locations.

    ``pkg/__init__.py`` and ``pkg/__main__.py`` are reported as ``pkg``.
    """
    p = PurePath(path)
    if _ENTRY_MODULE_RE.match(p.name) and p.parent.name:
        return p.parent.name
    return p.name


def resolve_call_site(skip_frames: int = 0) -> CallSite:
    """
    Return the location of the caller, ``skip_frames`` frames further up.

    When the stack is not that deep, the outermost frame is used.

    Usage example
    -------------
        def warn_here(msg):
            site = resolve_call_site(1)  # location of whoever called warn_here()
    """
    if skip_frames < 0:
        raise ValueError(f"skip_frames must be >= 0, got {skip_frames}.")

    frame = inspect.currentframe()
    try:
        if frame is None:
            return CallSite(file="<unknown>", line=0)
        target = frame.f_back or frame
        for _ in range(skip_frames):
            if target.f_back is None:
                break
            target = target.f_back
        return CallSite(file=display_name(target.f_code.co_filename), line=target.f_lineno)
    finally:
        # Break the frame reference cycle
        del frame


def frames_in_current_unit() -> int:
    """
    Count contiguous frames, starting with the caller, that live in the caller's file.

    Helpers pass this count as ``extra_frames`` so that the location reported
    is the first frame outside their own module.

    Usage example
    -------------
        # in mylib.py
        def _helper():
            return frames_in_current_unit()   # 2 when called from mylib.api()
        def api():
            return _helper()
    """
    frame = inspect.currentframe()
    try:
        caller = frame.f_back if frame is not None else None
        if caller is None:
            return 0
        unit = caller.f_code.co_filename
        count = 0
        cursor = caller
        while cursor is not None and cursor.f_code.co_filename == unit:
            count += 1
            cursor = cursor.f_back
        return count
    finally:
        del frame


def adorn(msg: Any, *more: Any, extra_frames: int = 0) -> str:
    """
    Prefix the joined message parts with the caller's ``file:line``.

    Usage example
    -------------
        adorn("Hello", " world!")   # "app.py:12: Hello world!"
    """
    site = resolve_call_site(1 + extra_frames)
    return f"{site}: " + "".join(make_ascii(part) for part in (msg, *more))
