"""Immutable value objects for the DevOps pipeline simulator.

Value objects are frozen dataclasses: stub results, monitoring samples,
handler outcomes, notifications, and the two pieces of state that only
change through pure transition functions (``VersionState`` and
``BranchState``).
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

from .enums import Environment, NotificationLevel, PullRequestStatus


# ---------------------------------------------------------------------------
# Stub results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BuildArtifact:
    """Result of a successful build."""

    build_id: str
    log: str


@dataclass(frozen=True)
class DeploymentReceipt:
    """Result of a successful deployment."""

    build_id: str
    environment: Environment
    message: str


@dataclass(frozen=True)
class TestReport:
    """Result of a passing test run."""

    __test__ = False  # not a pytest test class

    environment: Environment
    results: str


@dataclass(frozen=True)
class RollbackReceipt:
    """Result of a successful rollback."""

    environment: Environment
    version: str
    message: str


@dataclass(frozen=True)
class MonitoringSample:
    """One synthetic metrics reading.

    Attributes
    ----------
    cpu_usage:
        CPU usage in percent, drawn from [0, 80).
    memory_usage:
        Memory usage in percent, drawn from [0, 90).
    response_time_ms:
        Response time in milliseconds, drawn from [50, 250).
    errors_per_minute:
        Integer error count in [0, 4].
    """

    cpu_usage: float
    memory_usage: float
    response_time_ms: float
    errors_per_minute: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cpu_usage": self.cpu_usage,
            "memory_usage": self.memory_usage,
            "response_time_ms": self.response_time_ms,
            "errors_per_minute": self.errors_per_minute,
            "timestamp": self.timestamp,
        }


# ---------------------------------------------------------------------------
# Handler outcomes and notifications
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StepOutcome:
    """What a controller handler reports back to the view.

    ``rejected`` is set when the action was refused before any stub was
    called (already running, or a disallowed workflow transition); the
    state is unchanged in that case.
    """

    action: str
    success: bool
    message: str
    environment: Environment | None = None
    rejected: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "success": self.success,
            "message": self.message,
            "environment": self.environment.value if self.environment else None,
            "rejected": self.rejected,
        }


@dataclass(frozen=True)
class Notification:
    """A user-visible message raised by a handler."""

    level: NotificationLevel
    message: str
    timestamp: float = field(default_factory=time.time)


# ---------------------------------------------------------------------------
# Versions and branches
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VersionState:
    """Current and previously deployed version strings.

    ``previous`` trails ``current`` in the simulated history; no semantic
    versioning is enforced.
    """

    current: str = "1.0.0"
    previous: str = "0.9.0"


@dataclass(frozen=True)
class BranchState:
    """The checked-out branch and the state of its pull request."""

    active_branch: str = "main"
    pull_request_status: PullRequestStatus = PullRequestStatus.IDLE
