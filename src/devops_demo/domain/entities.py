"""Domain entities for the DevOps pipeline simulator.

Entities have a mutable lifecycle driven by the controller's handlers.
``PipelineRun`` tracks the latest build; ``EnvironmentState`` tracks the
deploy, test and rollback status of one environment.
"""

from __future__ import annotations

from dataclasses import dataclass

from .enums import Environment, RunStatus

# ---------------------------------------------------------------------------
# PipelineRun
# ---------------------------------------------------------------------------

@dataclass
class PipelineRun:
    """The latest build.

    Created when a build is triggered and overwritten by the next one.
    ``build_id`` is only set once a build has succeeded.
    """

    status: RunStatus = RunStatus.IDLE
    log: str = ""
    build_id: str = ""
    source: str = ""

    @property
    def is_running(self) -> bool:
        return self.status is RunStatus.RUNNING

    def start(self, source: str) -> None:
        """Reset the run for a new build of *source*."""
        self.status = RunStatus.RUNNING
        self.log = ""
        self.build_id = ""
        self.source = source

    def succeed(self, build_id: str, log: str) -> None:
        self.status = RunStatus.SUCCESS
        self.build_id = build_id
        self.log = log

    def fail(self, log: str) -> None:
        self.status = RunStatus.FAILURE
        self.log = log


# ---------------------------------------------------------------------------
# EnvironmentState
# ---------------------------------------------------------------------------

@dataclass
class EnvironmentState:
    """Per-environment status flags.

    Each flag is mutated only by its own handler; environments never share
    state and are never deleted.
    """

    name: Environment
    deploy_status: RunStatus = RunStatus.IDLE
    test_status: RunStatus = RunStatus.IDLE
    test_output: str = ""
    rollback_status: RunStatus = RunStatus.IDLE
    last_message: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name.value,
            "deploy_status": self.deploy_status.value,
            "test_status": self.test_status.value,
            "test_output": self.test_output,
            "rollback_status": self.rollback_status.value,
            "last_message": self.last_message,
        }
