"""Domain enumerations for the DevOps pipeline simulator.

These enums capture the fixed vocabularies used across the domain layer:
step statuses, target environments, pull-request states, monitoring states
and notification levels.
"""

from enum import Enum


class RunStatus(Enum):
    """Status of a single pipeline target (build, deploy, test, rollback)."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    FAILURE = "failure"


class Environment(Enum):
    """Named deployment target with independent status tracking."""

    STAGING = "staging"
    PRODUCTION = "production"


class PullRequestStatus(Enum):
    """Lifecycle of the simulated pull request."""

    IDLE = "idle"
    OPEN = "open"
    MERGED = "merged"


class MonitoringStatus(Enum):
    """States of the monitoring poller."""

    STOPPED = "stopped"
    ACTIVE = "active"


class NotificationLevel(Enum):
    """Severity of a user-visible notification."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"  # rejected action, state unchanged
    ERROR = "error"
