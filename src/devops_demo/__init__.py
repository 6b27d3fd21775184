"""DevOps pipeline simulator.

Simulated CI/CD pipeline -- build, deploy, test, rollback, monitoring and a
git branch / pull-request flow -- driven by async stub operations with
fixed delays and randomized failures.  Nothing touches a real build system,
deployment target or metrics source.
"""

__version__ = "0.1.0"

from devops_demo.infrastructure.config import PipelineConfig
from devops_demo.services.controller import PipelineController

__all__ = [
    "PipelineConfig",
    "PipelineController",
]
