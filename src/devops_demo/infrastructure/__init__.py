"""Infrastructure layer for the DevOps pipeline simulator.

Re-exports the public API surface for convenience::

    from devops_demo.infrastructure import (
        EventBus, EventStore, event_to_dict,
        PipelineConfig, SimulationConfig, WorkflowConfig,
    )
"""

from devops_demo.infrastructure.config import (
    DEFAULT_SOURCE,
    PipelineConfig,
    SimulationConfig,
    WorkflowConfig,
    load_config_file,
    load_config_from_json,
)
from devops_demo.infrastructure.event_bus import EventBus, EventStore
from devops_demo.infrastructure.serialization import event_to_dict

__all__ = [
    # Event bus
    "EventBus",
    "EventStore",
    "event_to_dict",
    # Configuration
    "DEFAULT_SOURCE",
    "PipelineConfig",
    "SimulationConfig",
    "WorkflowConfig",
    "load_config_file",
    "load_config_from_json",
]
