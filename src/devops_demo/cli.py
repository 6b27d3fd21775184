"""Command-line interface for the DevOps pipeline simulator.

Every invocation starts from a fresh controller, runs one action (or one
scripted sequence of actions) and renders the resulting state.  Nothing is
persisted between invocations.

Entry point
-----------
The ``main()`` function is registered as a console script in
``pyproject.toml``::

    [project.scripts]
    devops-demo = "devops_demo.cli:main"

Usage examples::

    devops-demo build --source "// normal code"
    devops-demo --seed 7 deploy production
    devops-demo --time-scale 0.1 monitor --duration 3
    devops-demo branch-flow --steps create,open,merge
    devops-demo --time-scale 0 release --source "// normal code"
    devops-demo info
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from importlib import metadata
from pathlib import Path

from devops_demo.domain.enums import Environment
from devops_demo.domain.events import DomainEvent, MetricsSampled
from devops_demo.domain.values import StepOutcome
from devops_demo.infrastructure.config import PipelineConfig, load_config_file
from devops_demo.infrastructure.serialization import event_to_dict
from devops_demo.presentation.console import ConsoleDashboard
from devops_demo.services.controller import PipelineController

logger = logging.getLogger(__name__)

_ENV_CHOICES = [env.value for env in Environment]
_BRANCH_STEPS = ("create", "open", "merge")

CommandFn = Callable[
    [argparse.Namespace, PipelineController, ConsoleDashboard], Awaitable[int]
]


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="devops-demo",
        description=(
            "DevOps pipeline simulator -- drive simulated builds, deployments, "
            "tests, rollbacks, monitoring and a branch / pull-request flow."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        default=False,
        help="Show version and exit.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a JSON config file with 'simulation' / 'workflow' sections.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible failures and samples.",
    )
    parser.add_argument(
        "--time-scale",
        type=float,
        default=None,
        help="Multiply every simulated delay by this factor (0 = no waiting).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the final state as JSON instead of the dashboard.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available subcommands")

    # -- build -------------------------------------------------------------
    build_parser = subparsers.add_parser(
        "build",
        help="Run a build.",
        description="Build the given source text. Any 'error' in it fails the build.",
    )
    source_group = build_parser.add_mutually_exclusive_group()
    source_group.add_argument("--source", type=str, default=None, help="Source text.")
    source_group.add_argument("--file", type=str, default=None, help="Read source from a file.")

    # -- deploy / test / rollback -------------------------------------------
    for name, help_text in (
        ("deploy", "Deploy the last good build to an environment."),
        ("test", "Run the automated tests in an environment."),
        ("rollback", "Roll an environment back to the previous version."),
    ):
        sub = subparsers.add_parser(name, help=help_text, description=help_text)
        sub.add_argument("environment", choices=_ENV_CHOICES)

    # -- monitor -----------------------------------------------------------
    monitor_parser = subparsers.add_parser(
        "monitor",
        help="Collect monitoring samples for a while.",
        description="Start monitoring, wait, stop, and print every sample collected.",
    )
    monitor_parser.add_argument(
        "--duration",
        type=float,
        default=13.0,
        help="Seconds to keep monitoring active. (default: 13)",
    )

    # -- branch-flow -------------------------------------------------------
    branch_parser = subparsers.add_parser(
        "branch-flow",
        help="Drive the branch / pull-request workflow.",
        description="Run a comma-separated sequence of create, open and merge steps.",
    )
    branch_parser.add_argument(
        "--steps",
        type=str,
        default=",".join(_BRANCH_STEPS),
        help="Comma-separated steps. (default: create,open,merge)",
    )

    # -- release -----------------------------------------------------------
    release_parser = subparsers.add_parser(
        "release",
        help="Run a full release.",
        description=(
            "Build, deploy to staging, test staging, deploy to production and "
            "test production, stopping at the first failure."
        ),
    )
    release_parser.add_argument("--source", type=str, default=None, help="Source text.")
    release_parser.add_argument(
        "--no-rollback",
        action="store_true",
        default=False,
        help="Do not roll production back when the production deploy fails.",
    )

    # -- info --------------------------------------------------------------
    subparsers.add_parser(
        "info",
        help="Show version, effective config and dependency versions.",
        description="Show version, effective config and dependency versions.",
    )

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(args: argparse.Namespace) -> PipelineConfig:
    """Read ``--config`` and apply the ``--seed`` / ``--time-scale`` overrides."""
    config = load_config_file(args.config) if args.config else PipelineConfig()
    overrides: dict[str, object] = {}
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.time_scale is not None:
        overrides["time_scale"] = args.time_scale
    if overrides:
        simulation = dataclasses.replace(config.simulation, **overrides)
        config = dataclasses.replace(config, simulation=simulation)
    config.validate()
    return config


def _trace_event(event: DomainEvent) -> None:
    logger.debug("event %s", event)


def _exit_code(outcome: StepOutcome) -> int:
    return 0 if outcome.success else 1


# =========================================================================
# Subcommand handlers
# =========================================================================

async def _cmd_build(
    args: argparse.Namespace, controller: PipelineController, dashboard: ConsoleDashboard
) -> int:
    """Handle the ``build`` subcommand."""
    source = args.source
    if args.file is not None:
        source = Path(args.file).read_text(encoding="utf-8")
    outcome = await controller.run_build(source)
    dashboard.print_outcome(outcome)
    return _exit_code(outcome)


async def _cmd_deploy(
    args: argparse.Namespace, controller: PipelineController, dashboard: ConsoleDashboard
) -> int:
    """Handle the ``deploy`` subcommand."""
    outcome = await controller.deploy(args.environment)
    dashboard.print_outcome(outcome)
    return _exit_code(outcome)


async def _cmd_test(
    args: argparse.Namespace, controller: PipelineController, dashboard: ConsoleDashboard
) -> int:
    """Handle the ``test`` subcommand."""
    outcome = await controller.run_tests(args.environment)
    dashboard.print_outcome(outcome)
    return _exit_code(outcome)


async def _cmd_rollback(
    args: argparse.Namespace, controller: PipelineController, dashboard: ConsoleDashboard
) -> int:
    """Handle the ``rollback`` subcommand."""
    outcome = await controller.rollback(args.environment)
    dashboard.print_outcome(outcome)
    return _exit_code(outcome)


async def _cmd_monitor(
    args: argparse.Namespace, controller: PipelineController, dashboard: ConsoleDashboard
) -> int:
    """Handle the ``monitor`` subcommand."""
    if args.duration < 0:
        raise ValueError(f"--duration must be >= 0, got {args.duration}")
    seen = 0

    def show_live(event: DomainEvent) -> None:
        nonlocal seen
        if isinstance(event, MetricsSampled) and event.sample is not None:
            seen += 1
            dashboard.print_sample(seen, event.sample)

    if not args.json:
        controller.event_bus.subscribe(MetricsSampled, show_live)
    controller.start_monitoring()
    try:
        await asyncio.sleep(args.duration)
    finally:
        controller.stop_monitoring()
        controller.event_bus.unsubscribe(MetricsSampled, show_live)
    if not args.json:
        samples = [
            e.sample for e in controller.events.query(MetricsSampled) if e.sample is not None
        ]
        dashboard.print_samples(samples)
    return 0


async def _cmd_branch_flow(
    args: argparse.Namespace, controller: PipelineController, dashboard: ConsoleDashboard
) -> int:
    """Handle the ``branch-flow`` subcommand."""
    steps = [s.strip() for s in args.steps.split(",") if s.strip()]
    unknown = [s for s in steps if s not in _BRANCH_STEPS]
    if unknown:
        raise ValueError(
            f"unknown step(s) {unknown}; expected any of {list(_BRANCH_STEPS)}"
        )
    actions = {
        "create": controller.create_branch,
        "open": controller.open_pull_request,
        "merge": controller.merge_pull_request,
    }
    exit_code = 0
    for step in steps:
        outcome = actions[step]()
        dashboard.print_outcome(outcome)
        if not outcome.success:
            exit_code = 1
    return exit_code


async def _cmd_release(
    args: argparse.Namespace, controller: PipelineController, dashboard: ConsoleDashboard
) -> int:
    """Handle the ``release`` subcommand."""
    from devops_demo.graph import run_release

    result = await run_release(
        controller,
        source=args.source,
        rollback_on_failure=not args.no_rollback,
    )
    for outcome in result.get("outcomes", []):
        dashboard.print_outcome(outcome)
    failed = result.get("failed_step")
    if failed:
        logger.info("Release stopped at %s", failed)
        return 1
    return 0


async def _cmd_info(
    args: argparse.Namespace, controller: PipelineController, dashboard: ConsoleDashboard
) -> int:
    """Handle the ``info`` subcommand."""
    from devops_demo import __version__

    print(f"DevOps pipeline simulator v{__version__}")
    print()
    print("Dependencies:")
    for pkg, desc in {
        "numpy": "Random source for failure injection and samples",
        "langgraph": "Release flow graph",
        "rich": "Console dashboard",
    }.items():
        try:
            print(f"  [installed] {pkg} {metadata.version(pkg)} -- {desc}")
        except metadata.PackageNotFoundError:
            print(f"  [missing]   {pkg} -- {desc}")
    print()
    print("Effective config:")
    print(json.dumps(controller.config.to_dict(), indent=2))
    return 0


_HANDLERS: dict[str, CommandFn] = {
    "build": _cmd_build,
    "deploy": _cmd_deploy,
    "test": _cmd_test,
    "rollback": _cmd_rollback,
    "monitor": _cmd_monitor,
    "branch-flow": _cmd_branch_flow,
    "release": _cmd_release,
    "info": _cmd_info,
}


async def _dispatch(
    handler: CommandFn, args: argparse.Namespace, config: PipelineConfig
) -> int:
    controller = PipelineController(config=config)
    if args.verbose:
        controller.event_bus.subscribe_all(_trace_event)
    dashboard = ConsoleDashboard()
    try:
        exit_code = await handler(args, controller, dashboard)
    finally:
        await controller.shutdown()
    logger.debug("%d event(s) recorded", len(controller.events))
    if args.command != "info":
        if args.json:
            data = controller.snapshot()
            data["events"] = [event_to_dict(e) for e in controller.events.query()]
            print(json.dumps(data, indent=2))
        else:
            dashboard.render(controller.state)
    return exit_code


# =========================================================================
# Main entry point
# =========================================================================

def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  Defaults to ``sys.argv[1:]``.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from devops_demo import __version__
        print(f"devops-demo {__version__}")
        sys.exit(0)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    handler = _HANDLERS.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    _configure_logging(args.verbose)

    try:
        config = _load_config(args)
        exit_code = asyncio.run(_dispatch(handler, args, config))
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        exit_code = 130
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)
