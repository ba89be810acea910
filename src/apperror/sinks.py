"""
Destinations for formatted log lines.

An ``AppLogger`` only needs ``write(text)`` from its sink; these are the ones
shipped with the package.
"""

from __future__ import annotations

import io
import logging
import re
from typing import Any, List, Optional, Protocol

from rich.console import Console


class Sink(Protocol):
    """Anything with ``write(text)``: a stream, a buffer, a bridge..."""

    def write(self, text: str) -> Any:
        ...


# "<component>: <LABEL>: file:line: message"
_LABEL_RE = re.compile(r": (INFO|WARN|ERROR|DEBUG(?:\[[^\]]*\])?|V\d+): ")

_CONSOLE_STYLES = {"ERROR": "red", "WARN": "yellow", "INFO": "green"}


def line_label(line: str) -> Optional[str]:
    """Return the level label of a formatted line (``INFO``, ``DEBUG[math]``, ``V2``...)."""
    m = _LABEL_RE.search(line)
    return m.group(1) if m else None


def level_for_label(label: Optional[str]) -> int:
    """Map a line label onto a stdlib logging level."""
    if label == "ERROR":
        return logging.ERROR
    if label == "WARN":
        return logging.WARNING
    if label is None or label == "INFO":
        return logging.INFO
    return logging.DEBUG


class BufferSink:
    """
    In-memory sink, typically swapped in to capture a logger's output.

    Usage example
    -------------
        buff = BufferSink()
        logger.sink, restore = buff, logger.sink
        logger.info("captured")
        logger.sink = restore
        earlier = buff.read()
    """

    def __init__(self) -> None:
        self._buffer = io.StringIO()
        self._read_pos = 0
        self.closed = False

    def write(self, text: str) -> int:
        if self.closed:
            raise ValueError("write to a closed BufferSink")
        return self._buffer.write(text)

    def getvalue(self) -> str:
        """Everything written so far."""
        return self._buffer.getvalue()

    def read(self) -> str:
        """Text written since the previous ``read()``."""
        data = self._buffer.getvalue()[self._read_pos:]
        self._read_pos += len(data)
        return data

    def lines(self) -> List[str]:
        return self.getvalue().splitlines()

    def end(self) -> None:
        self.closed = True

    close = end


class LoggingSink:
    """
    Forward complete lines to a stdlib ``logging.Logger``.

    The level comes from the line's label; partial writes are held until a
    newline arrives (or ``flush()`` is called).

    Usage example
    -------------
        std_logger = configure_logging(cfg=cfg)
        app_logger = AppLogger("importer", {"verbose": 1}, sink=LoggingSink(std_logger))
    """

    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger
        self._pending = ""

    def _forward(self, line: str) -> None:
        if line:
            self.logger.log(level_for_label(line_label(line)), line)

    def write(self, text: str) -> int:
        *complete, self._pending = (self._pending + text).split("\n")
        for line in complete:
            self._forward(line)
        return len(text)

    def flush(self) -> None:
        pending, self._pending = self._pending, ""
        self._forward(pending)

    end = flush


class ConsoleSink:
    """Write lines through a rich ``Console``, colored by level."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console if console is not None else Console(stderr=True)

    def write(self, text: str) -> int:
        for line in text.splitlines():
            label = line_label(line)
            style = _CONSOLE_STYLES.get(label, "dim") if label else None
            self.console.print(line, style=style, markup=False, highlight=False, emoji=False, soft_wrap=True)
        return len(text)
