from __future__ import annotations

import logging

from rich.logging import RichHandler

from apperror.config import LoggerConfig
from apperror.types import WILDCARD


def configure_logging(*, cfg: LoggerConfig, name: str = "apperror") -> logging.Logger:
    """
    Configure a stdlib logger with a rich console handler and an optional file handler.

    The package's own internal diagnostics are emitted on ``apperror.*``
    loggers, so configuring the default name also surfaces those. Pair the
    returned logger with ``LoggingSink`` to route ``AppLogger`` lines into it.

    Returns
    -------
    logger
        The configured logger (previous handlers removed, no propagation).

    Usage example
    -------------
        std_logger = configure_logging(cfg=LoggerConfig(log_file=Path("logs/run.log")))
        std_logger.info("Hello")
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    console_handler = RichHandler(
        show_path=False,
        show_time=False,
        markup=False,
        rich_tracebacks=WILDCARD in cfg.debug,
    )
    console_handler.setLevel(cfg.console_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if cfg.log_file is not None:
        cfg.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(cfg.log_file, encoding="utf-8")
        file_handler.setLevel(cfg.file_level)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    logger.debug("Logging configured (component=%s, log_file=%s)", cfg.component, cfg.log_file)
    return logger
