"""Aggregate root for the DevOps pipeline simulator.

``PipelineState`` is the single state object the controller owns.  It holds
the latest build, one ``EnvironmentState`` per environment, the version and
branch values, the monitoring status and latest sample, and the list of
user-visible notifications.  Nothing here is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .entities import EnvironmentState, PipelineRun
from .enums import Environment, MonitoringStatus, NotificationLevel
from .values import BranchState, MonitoringSample, Notification, VersionState


DEFAULT_MAX_NOTIFICATIONS = 50


def _default_environments() -> dict[Environment, EnvironmentState]:
    return {env: EnvironmentState(name=env) for env in Environment}


@dataclass
class PipelineState:
    """Everything the view renders.

    ``versions`` and ``branch`` are immutable values; transitions replace
    them wholesale.
    """

    build: PipelineRun = field(default_factory=PipelineRun)
    last_good_build_id: str = ""
    environments: dict[Environment, EnvironmentState] = field(
        default_factory=_default_environments
    )
    versions: VersionState = field(default_factory=VersionState)
    branch: BranchState = field(default_factory=BranchState)
    monitoring_status: MonitoringStatus = MonitoringStatus.STOPPED
    latest_sample: MonitoringSample | None = None
    notifications: list[Notification] = field(default_factory=list)
    max_notifications: int = DEFAULT_MAX_NOTIFICATIONS

    # -- accessors ------------------------------------------------------------

    def environment(self, env: Environment | str) -> EnvironmentState:
        """Return the state for *env* (accepts the enum or its value).

        Raises ``ValueError`` for an unknown environment name.
        """
        return self.environments[Environment(env)]

    @property
    def monitoring_active(self) -> bool:
        return self.monitoring_status is MonitoringStatus.ACTIVE

    # -- notifications ----------------------------------------------------------

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        """Append a notification, dropping the oldest beyond
        ``max_notifications`` (``0`` = unlimited)."""
        note = Notification(level=level, message=message)
        self.notifications.append(note)
        if self.max_notifications > 0 and len(self.notifications) > self.max_notifications:
            del self.notifications[:-self.max_notifications]
        return note

    @property
    def last_notification(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None

    # -- export -----------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict snapshot for JSON output."""
        return {
            "build": {
                "status": self.build.status.value,
                "log": self.build.log,
                "build_id": self.build.build_id,
                "last_good_build_id": self.last_good_build_id,
            },
            "environments": {
                env.value: state.to_dict() for env, state in self.environments.items()
            },
            "versions": {
                "current": self.versions.current,
                "previous": self.versions.previous,
            },
            "branch": {
                "active_branch": self.branch.active_branch,
                "pull_request_status": self.branch.pull_request_status.value,
            },
            "monitoring": {
                "status": self.monitoring_status.value,
                "sample": self.latest_sample.to_dict() if self.latest_sample else None,
            },
            "notifications": [
                {"level": n.level.value, "message": n.message} for n in self.notifications
            ],
        }
