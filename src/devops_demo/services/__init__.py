"""Service layer for the DevOps pipeline simulator.

* ``SimulatedBackend`` -- the five stub operations.
* ``MonitoringPoller`` -- cancellable periodic metrics task.
* ``workflow`` -- pure branch / pull-request / version transitions.
* ``PipelineController`` -- owns the state, one handler per user action.
"""

from devops_demo.services.backend import BUILD_LOG, TEST_REPORT, SimulatedBackend
from devops_demo.services.controller import PipelineController
from devops_demo.services.monitoring import MonitoringPoller
from devops_demo.services.randomness import (
    NumpyRandomSource,
    RandomSource,
    make_random_source,
)
from devops_demo.services.workflow import (
    apply_rollback,
    create_branch,
    merge_pull_request,
    open_pull_request,
)

__all__ = [
    "BUILD_LOG",
    "TEST_REPORT",
    "SimulatedBackend",
    "PipelineController",
    "MonitoringPoller",
    "NumpyRandomSource",
    "RandomSource",
    "make_random_source",
    "apply_rollback",
    "create_branch",
    "merge_pull_request",
    "open_pull_request",
]
