"""Shared fixtures for the DevOps pipeline simulator test suite."""

from __future__ import annotations

import pytest

from devops_demo.infrastructure.config import PipelineConfig, SimulationConfig
from devops_demo.infrastructure.event_bus import EventBus, EventStore
from devops_demo.services.backend import SimulatedBackend
from devops_demo.services.controller import PipelineController
from devops_demo.services.randomness import NumpyRandomSource
from devops_demo.testing import ScriptedRandomSource

SEED = 1234

# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fast_simulation() -> SimulationConfig:
    """Zero time scale: every stub answers on the next loop iteration."""
    return SimulationConfig(time_scale=0.0, seed=SEED)


@pytest.fixture
def fast_config(fast_simulation: SimulationConfig) -> PipelineConfig:
    return PipelineConfig(simulation=fast_simulation)


# ---------------------------------------------------------------------------
# Backend fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def seeded_backend(fast_simulation: SimulationConfig) -> SimulatedBackend:
    """A zero-delay backend with a seeded NumPy random source."""
    return SimulatedBackend(fast_simulation, random_source=NumpyRandomSource(SEED))


@pytest.fixture
def passing_backend(fast_simulation: SimulationConfig) -> SimulatedBackend:
    """A zero-delay backend whose random draws never trigger a failure."""
    return SimulatedBackend(fast_simulation, random_source=ScriptedRandomSource([0.99]))


@pytest.fixture
def failing_backend(fast_simulation: SimulationConfig) -> SimulatedBackend:
    """A zero-delay backend whose random draws always trigger a failure."""
    return SimulatedBackend(fast_simulation, random_source=ScriptedRandomSource([0.0]))


# ---------------------------------------------------------------------------
# Controller fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def event_bus() -> EventBus:
    """A fresh event bus."""
    return EventBus()


@pytest.fixture
def event_store(event_bus: EventBus) -> EventStore:
    """An event store recording everything published on ``event_bus``."""
    store = EventStore()
    event_bus.subscribe_all(store.append)
    return store


@pytest.fixture
def controller(
    fast_config: PipelineConfig,
    passing_backend: SimulatedBackend,
    event_bus: EventBus,
) -> PipelineController:
    """A controller whose stubs always succeed (unless content-triggered)."""
    return PipelineController(fast_config, backend=passing_backend, event_bus=event_bus)


@pytest.fixture
def failing_controller(
    fast_config: PipelineConfig,
    failing_backend: SimulatedBackend,
    event_bus: EventBus,
) -> PipelineController:
    """A controller whose probabilistic stubs always fail."""
    return PipelineController(fast_config, backend=failing_backend, event_bus=event_bus)
