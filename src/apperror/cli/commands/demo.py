"""`apperror demo` command implementation."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Dict, List, Sequence

from rich.console import Console

from apperror.demo import SCENARIOS, Scenario, normalize_output
from apperror.logger import AppLogger
from apperror.sinks import ConsoleSink
from apperror.status import AppStatus


@dataclass(frozen=True)
class ScenarioResult:
    """Output of one demo scenario next to what it expected."""

    name: str
    output: str
    expected: List[str]
    actual: List[str]

    @property
    def ok(self) -> bool:
        return self.expected == self.actual


def scenario_name(scenario: Scenario) -> str:
    return scenario.__name__[len("do_"):]


def run_scenario(scenario: Scenario) -> ScenarioResult:
    """Run one scenario against a fresh, captured ``demo`` logger."""
    logger = AppLogger("demo", {"verbose": 0})
    with logger.capture() as buffer:
        expected = scenario(logger)
    output = buffer.getvalue()
    return ScenarioResult(
        name=scenario_name(scenario),
        output=output,
        expected=normalize_output(expected or ""),
        actual=normalize_output(output),
    )


def select_scenarios(names: Sequence[str], status: AppStatus) -> List[Scenario]:
    """Scenarios named in ``names`` (all when empty); unknown names are recorded as errors on ``status``."""
    if not names:
        return list(SCENARIOS)
    index: Dict[str, Scenario] = {scenario_name(s): s for s in SCENARIOS}
    selected = []
    for name in names:
        key = name[len("do_"):] if name.startswith("do_") else name
        scenario = index.get(key)
        if scenario is None:
            status.add_error("unknown scenario: ", name)
        else:
            selected.append(scenario)
    return selected


def add_subparser(subparsers: argparse._SubParsersAction) -> None:
    """Register the `demo` command."""
    parser = subparsers.add_parser("demo", help="Run the worked examples of the logger and status API.")
    parser.add_argument("--list", action="store_true", help="List scenario names and exit.")
    parser.add_argument(
        "--only",
        action="append",
        default=[],
        metavar="NAME",
        help="Run only this scenario (repeatable).",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Compare each scenario's output with what it expects; exit 1 on mismatch.",
    )
    parser.set_defaults(command="demo")


def run(args: argparse.Namespace) -> None:
    """Execute the `demo` command."""
    logger = AppLogger("apperror", sink=ConsoleSink())
    logger.set_from_args(args)
    console = Console()

    if args.list:
        for scenario in SCENARIOS:
            console.print(scenario_name(scenario), markup=False, highlight=False, emoji=False)
        return

    status = AppStatus()
    scenarios = select_scenarios(args.only, status)
    if not status.ok():
        status.log_to(logger)
        raise SystemExit(2)

    failures = 0
    for scenario in scenarios:
        result = run_scenario(scenario)
        logger.v1("ran scenario ", result.name)
        if not args.check:
            console.rule(result.name)
            console.print(result.output.rstrip("\n"), markup=False, highlight=False, emoji=False, soft_wrap=True)
            continue

        if result.ok:
            console.print(f"PASS {result.name}", style="green", markup=False, highlight=False, emoji=False)
            continue
        failures += 1
        console.print(f"FAIL {result.name}", style="red", markup=False, highlight=False, emoji=False)
        for line in result.expected:
            console.print(f"  - {line}", markup=False, highlight=False, emoji=False, soft_wrap=True)
        for line in result.actual:
            console.print(f"  + {line}", markup=False, highlight=False, emoji=False, soft_wrap=True)

    if args.check:
        logger.v1(len(scenarios) - failures, " of ", len(scenarios), " scenario(s) passed")
    if failures:
        raise SystemExit(1)
