"""Domain events for the DevOps pipeline simulator.

Every event is a frozen dataclass inheriting from ``DomainEvent``.  The
controller emits an event for each state change; listeners (the event store,
the CLI's verbose trace, tests) react to them.

All events carry a ``timestamp`` and a ``source_id`` identifying the
emitting component.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from .enums import Environment
from .values import MonitoringSample

# ---------------------------------------------------------------------------
# Base event
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    timestamp: float = field(default_factory=time.time)
    source_id: str = ""


# ---------------------------------------------------------------------------
# Pipeline step events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BuildStarted(DomainEvent):
    """A build was triggered."""

    source_length: int = 0


@dataclass(frozen=True)
class BuildFinished(DomainEvent):
    """A build completed, successfully or not."""

    build_id: str = ""
    success: bool = False
    message: str = ""


@dataclass(frozen=True)
class DeploymentFinished(DomainEvent):
    """A deployment to an environment completed."""

    environment: Environment | None = None
    build_id: str = ""
    success: bool = False
    message: str = ""


@dataclass(frozen=True)
class TestsFinished(DomainEvent):
    """A test run in an environment completed."""

    __test__ = False  # not a pytest test class

    environment: Environment | None = None
    success: bool = False
    output: str = ""


@dataclass(frozen=True)
class RollbackFinished(DomainEvent):
    """A rollback of an environment completed."""

    environment: Environment | None = None
    version: str = ""
    success: bool = False
    message: str = ""


@dataclass(frozen=True)
class ActionRejected(DomainEvent):
    """An action was refused before touching any state."""

    action: str = ""
    reason: str = ""


# ---------------------------------------------------------------------------
# Version / branch events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VersionChanged(DomainEvent):
    """The current / previous version pair changed."""

    old_current: str = ""
    current: str = ""
    previous: str = ""
    reason: str = ""  # "rollback" | "merge"


@dataclass(frozen=True)
class BranchCreated(DomainEvent):
    branch: str = ""


@dataclass(frozen=True)
class PullRequestOpened(DomainEvent):
    branch: str = ""
    target: str = ""


@dataclass(frozen=True)
class PullRequestMerged(DomainEvent):
    branch: str = ""
    version: str = ""


# ---------------------------------------------------------------------------
# Monitoring events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MonitoringStarted(DomainEvent):
    interval: float = 0.0


@dataclass(frozen=True)
class MonitoringStopped(DomainEvent):
    samples_collected: int = 0


@dataclass(frozen=True)
class MetricsSampled(DomainEvent):
    sample: MonitoringSample | None = None


@dataclass(frozen=True)
class MonitoringFetchFailed(DomainEvent):
    error: str = ""
