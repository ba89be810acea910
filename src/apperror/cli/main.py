"""apperror command-line interface entrypoint."""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
from types import ModuleType
from typing import Dict, Optional

from apperror.cli.commands import config as config_cmd
from apperror.cli.commands import demo
from apperror.version import __version__

CommandModule = ModuleType
CommandRunner = Callable[[argparse.Namespace], None]

# Map CLI subcommands to their implementation modules.
_COMMANDS: Dict[str, CommandModule] = {
    "demo": demo,
    "config": config_cmd,
}


def build_arg_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser."""
    parser = argparse.ArgumentParser(
        prog="apperror",
        description="apperror - call-site stamped diagnostics and status objects",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=None,
        help="Increase verbosity (repeatable: -vv, -vvv).",
    )
    parser.add_argument(
        "--debug",
        action="append",
        default=None,
        metavar="TAGS",
        help="Enable debug channels, comma-separated; repeatable. Use '*' for every channel.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, metavar="<command>")

    for name, module in _COMMANDS.items():
        add_subparser = getattr(module, "add_subparser", None)
        if add_subparser is None:
            raise RuntimeError(f"CLI command module '{name}' is missing add_subparser().")
        add_subparser(subparsers)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Parse args and dispatch to the selected command implementation."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    command_name = str(args.command)

    module = _COMMANDS.get(command_name)
    if module is None:
        raise RuntimeError(f"Unknown command: {command_name}")

    runner: Optional[CommandRunner] = getattr(module, "run", None)
    if runner is None:
        raise RuntimeError(f"CLI command module '{command_name}' is missing run().")
    runner(args)


# Keep console script compatibility with pyproject's entrypoint.
app = main


if __name__ == "__main__":
    main()
