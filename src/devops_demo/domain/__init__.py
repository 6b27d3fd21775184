"""Domain layer for the DevOps pipeline simulator.

Re-exports all public domain types so that consumers can write::

    from devops_demo.domain import PipelineState, Environment, RunStatus
"""

# -- Enumerations -------------------------------------------------------------
from .enums import (
    Environment,
    MonitoringStatus,
    NotificationLevel,
    PullRequestStatus,
    RunStatus,
)

# -- Value Objects ------------------------------------------------------------
from .values import (
    BranchState,
    BuildArtifact,
    DeploymentReceipt,
    MonitoringSample,
    Notification,
    RollbackReceipt,
    StepOutcome,
    TestReport,
    VersionState,
)

# -- Entities -----------------------------------------------------------------
from .entities import EnvironmentState, PipelineRun

# -- Aggregates ---------------------------------------------------------------
from .aggregates import PipelineState

# -- Domain Events ------------------------------------------------------------
from .events import (
    ActionRejected,
    BranchCreated,
    BuildFinished,
    BuildStarted,
    DeploymentFinished,
    DomainEvent,
    MetricsSampled,
    MonitoringFetchFailed,
    MonitoringStarted,
    MonitoringStopped,
    PullRequestMerged,
    PullRequestOpened,
    RollbackFinished,
    TestsFinished,
    VersionChanged,
)

# -- Exceptions ---------------------------------------------------------------
from .exceptions import (
    BuildError,
    DeployError,
    MonitoringFetchError,
    PipelineSimError,
    RollbackError,
    TestError,
    TransitionError,
)

__all__ = [
    # Enums
    "Environment",
    "MonitoringStatus",
    "NotificationLevel",
    "PullRequestStatus",
    "RunStatus",
    # Values
    "BranchState",
    "BuildArtifact",
    "DeploymentReceipt",
    "MonitoringSample",
    "Notification",
    "RollbackReceipt",
    "StepOutcome",
    "TestReport",
    "VersionState",
    # Entities
    "EnvironmentState",
    "PipelineRun",
    # Aggregates
    "PipelineState",
    # Events
    "ActionRejected",
    "BranchCreated",
    "BuildFinished",
    "BuildStarted",
    "DeploymentFinished",
    "DomainEvent",
    "MetricsSampled",
    "MonitoringFetchFailed",
    "MonitoringStarted",
    "MonitoringStopped",
    "PullRequestMerged",
    "PullRequestOpened",
    "RollbackFinished",
    "TestsFinished",
    "VersionChanged",
    # Exceptions
    "BuildError",
    "DeployError",
    "MonitoringFetchError",
    "PipelineSimError",
    "RollbackError",
    "TestError",
    "TransitionError",
]
