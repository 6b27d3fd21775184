"""Rich-based console dashboard for the pipeline state.

:class:`ConsoleDashboard` is the view: it renders a ``PipelineState`` as a
set of tables (build, environments, versions and branch, monitoring,
notifications) and prints individual step outcomes as they happen.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from devops_demo.domain.aggregates import PipelineState
from devops_demo.domain.enums import (
    MonitoringStatus,
    NotificationLevel,
    PullRequestStatus,
    RunStatus,
)
from devops_demo.domain.values import MonitoringSample, StepOutcome

_STATUS_STYLE: dict[RunStatus, str] = {
    RunStatus.IDLE: "dim",
    RunStatus.RUNNING: "yellow",
    RunStatus.SUCCESS: "green",
    RunStatus.FAILURE: "red",
}

_LEVEL_STYLE: dict[NotificationLevel, str] = {
    NotificationLevel.INFO: "cyan",
    NotificationLevel.SUCCESS: "green",
    NotificationLevel.WARNING: "yellow",
    NotificationLevel.ERROR: "red",
}

_PR_STYLE: dict[PullRequestStatus, str] = {
    PullRequestStatus.IDLE: "dim",
    PullRequestStatus.OPEN: "yellow",
    PullRequestStatus.MERGED: "magenta",
}


# ---------------------------------------------------------------------------
# Sparkline helpers
# ---------------------------------------------------------------------------

_SPARK_CHARS = " " + "▁▂▃▄▅▆▇█"


def _sparkline(values: Sequence[float], width: int = 40) -> str:
    """Return a Unicode sparkline for *values*, keeping the last *width*."""
    if not values:
        return ""
    values = list(values)[-width:]
    lo, hi = min(values), max(values)
    span = hi - lo if hi != lo else 1.0
    n_chars = len(_SPARK_CHARS) - 1
    return "".join(
        _SPARK_CHARS[max(0, min(n_chars, int(((v - lo) / span) * n_chars)))]
        for v in values
    )


def _status(status: RunStatus) -> str:
    style = _STATUS_STYLE[status]
    return f"[{style}]{status.value}[/{style}]"


# ---------------------------------------------------------------------------
# ConsoleDashboard
# ---------------------------------------------------------------------------

class ConsoleDashboard:
    """Terminal view of the simulator.

    Parameters
    ----------
    console:
        Rich console to print to.  Defaults to one writing to *file*.
    file:
        Output stream used when *console* is omitted.  Defaults to
        ``sys.stdout``.
    """

    def __init__(self, console: Console | None = None, file: Any = None) -> None:
        self._console = console or Console(file=file or sys.stdout)

    @property
    def console(self) -> Console:
        return self._console

    # -- public API --------------------------------------------------------

    def render(self, state: PipelineState, show_log: bool = True) -> None:
        """Print the whole dashboard for *state*."""
        self._console.print()
        self._console.print(self._build_table(state))
        if show_log and state.build.log:
            self._console.print(Panel(Text(state.build.log.rstrip()), title="Build log"))
        self._console.print(self._environment_table(state))
        self._console.print(self._workflow_table(state))
        self._console.print(self._monitoring_table(state))
        if state.notifications:
            self.print_notifications(state)
        self._console.print()

    def print_outcome(self, outcome: StepOutcome) -> None:
        """Print a one-line summary of a handler outcome."""
        if outcome.rejected:
            mark, style = "!", "yellow"
        elif outcome.success:
            mark, style = "✓", "green"
        else:
            mark, style = "✗", "red"
        where = escape(f" [{outcome.environment.value}]") if outcome.environment else ""
        self._console.print(
            f"[{style}]{mark} {outcome.action}{where}[/{style}] {escape(outcome.message)}",
            highlight=False,
        )

    def print_notifications(self, state: PipelineState, limit: int = 10) -> None:
        table = Table(title="Notifications", show_header=True, header_style="bold cyan")
        table.add_column("Level", justify="center")
        table.add_column("Message")
        for note in state.notifications[-limit:]:
            style = _LEVEL_STYLE[note.level]
            table.add_row(f"[{style}]{note.level.value}[/{style}]", escape(note.message))
        self._console.print(table)

    def print_sample(self, index: int, sample: MonitoringSample) -> None:
        """Print one sample as a single line, as it arrives."""
        self._console.print(
            f"[cyan]sample {index}[/cyan] cpu {sample.cpu_usage:.1f}% "
            f"mem {sample.memory_usage:.1f}% "
            f"resp {sample.response_time_ms:.0f}ms "
            f"errors {sample.errors_per_minute}/min",
            highlight=False,
        )

    def print_samples(self, samples: Sequence[MonitoringSample]) -> None:
        """Print every collected sample plus a response-time sparkline."""
        if not samples:
            self._console.print("[dim]no monitoring samples collected[/dim]")
            return
        table = Table(title="Monitoring Samples", show_header=True, header_style="bold cyan")
        table.add_column("#", justify="right")
        table.add_column("CPU %", justify="right")
        table.add_column("Memory %", justify="right")
        table.add_column("Response ms", justify="right")
        table.add_column("Errors/min", justify="right")
        for i, s in enumerate(samples, start=1):
            table.add_row(
                str(i),
                f"{s.cpu_usage:.1f}",
                f"{s.memory_usage:.1f}",
                f"{s.response_time_ms:.0f}",
                str(s.errors_per_minute),
            )
        self._console.print(table)
        self._console.print(
            f"  response time {_sparkline([s.response_time_ms for s in samples])}",
            highlight=False,
        )

    # ======================================================================
    # Table builders
    # ======================================================================

    def _build_table(self, state: PipelineState) -> Table:
        table = Table(title="Build", show_header=True, header_style="bold cyan")
        table.add_column("Status", justify="center")
        table.add_column("Build id")
        table.add_column("Last good build")
        table.add_row(
            _status(state.build.status),
            state.build.build_id or "-",
            state.last_good_build_id or "-",
        )
        return table

    def _environment_table(self, state: PipelineState) -> Table:
        table = Table(title="Environments", show_header=True, header_style="bold cyan")
        table.add_column("Environment", style="bold")
        table.add_column("Deploy", justify="center")
        table.add_column("Tests", justify="center")
        table.add_column("Rollback", justify="center")
        table.add_column("Last message")
        for env_state in state.environments.values():
            table.add_row(
                env_state.name.value,
                _status(env_state.deploy_status),
                _status(env_state.test_status),
                _status(env_state.rollback_status),
                escape(env_state.last_message) or "-",
            )
        return table

    def _workflow_table(self, state: PipelineState) -> Table:
        table = Table(title="Versions & Branch", show_header=True, header_style="bold cyan")
        table.add_column("Current version")
        table.add_column("Previous version")
        table.add_column("Active branch")
        table.add_column("Pull request", justify="center")
        pr = state.branch.pull_request_status
        style = _PR_STYLE[pr]
        table.add_row(
            state.versions.current,
            state.versions.previous,
            state.branch.active_branch,
            f"[{style}]{pr.value}[/{style}]",
        )
        return table

    def _monitoring_table(self, state: PipelineState) -> Table:
        active = state.monitoring_status is MonitoringStatus.ACTIVE
        title = "Monitoring (active)" if active else "Monitoring (stopped)"
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("CPU %", justify="right")
        table.add_column("Memory %", justify="right")
        table.add_column("Response ms", justify="right")
        table.add_column("Errors/min", justify="right")
        sample = state.latest_sample
        if sample is None:
            table.add_row("-", "-", "-", "-")
        else:
            table.add_row(
                f"{sample.cpu_usage:.1f}",
                f"{sample.memory_usage:.1f}",
                f"{sample.response_time_ms:.0f}",
                str(sample.errors_per_minute),
            )
        return table
