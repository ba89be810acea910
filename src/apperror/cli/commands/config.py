"""`apperror config` command implementation."""

from __future__ import annotations

import argparse
import dataclasses
from pathlib import Path

from apperror.config import LoggerConfig
from apperror.logger import AppLogger
from apperror.logging import configure_logging
from apperror.sinks import ConsoleSink, LoggingSink, Sink


def resolve_config(args: argparse.Namespace) -> LoggerConfig:
    """YAML file first, then environment variables, then command-line flags."""
    cfg = LoggerConfig(component="apperror", env_prefix=args.env_prefix)
    if args.config_path:
        cfg = LoggerConfig.from_yaml(Path(args.config_path), default=cfg)
    cfg = LoggerConfig.from_env(default=cfg)
    return LoggerConfig.from_args(args, default=cfg)


def add_subparser(subparsers: argparse._SubParsersAction) -> None:
    """Register the `config` command."""
    parser = subparsers.add_parser("config", help="Show the resolved logger configuration.")
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        metavar="PATH",
        help="YAML file with logger settings (optionally under a 'logging:' section).",
    )
    parser.add_argument(
        "--env-prefix",
        default="",
        help="Prefix of the environment overrides, e.g. MYAPP_ reads MYAPP_VERBOSE.",
    )
    parser.set_defaults(command="config")


def run(args: argparse.Namespace) -> None:
    """Execute the `config` command."""
    cfg = resolve_config(args)

    sink: Sink
    if cfg.log_file is not None:
        sink = LoggingSink(configure_logging(cfg=cfg))
    else:
        sink = ConsoleSink()
    logger = AppLogger.from_config(cfg, sink=sink)

    settings = {
        f.name: getattr(cfg, f.name) for f in dataclasses.fields(cfg) if f.name != "env_prefix"
    }
    settings["debug"] = list(cfg.debug)
    settings["log_file"] = str(cfg.log_file) if cfg.log_file is not None else None
    logger.info("resolved configuration: ", settings)
    logger.if_debug("environment prefix: ", args.env_prefix or "(none)", tag="config")
    if isinstance(sink, LoggingSink):
        sink.flush()
