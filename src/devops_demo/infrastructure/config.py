"""Configuration dataclasses for the DevOps pipeline simulator.

Each config is a plain ``dataclass`` with a ``validate()`` method that raises
``ValueError`` on invalid values.  Configs are **frozen** so a controller and
its backend can share one instance without risking silent mutation.

The defaults reproduce the demo's timings, failure rates and version strings.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

DEFAULT_SOURCE = (
    "// Your application code here...\n"
    '// Add an "error" comment to simulate a build failure'
)


def _check_rate(name: str, value: float) -> None:
    if not (0.0 <= value <= 1.0):
        raise ValueError(f"{name} must be in [0, 1], got {value}")


# ===================================================================== #
#  Simulation Configuration                                              #
# ===================================================================== #

@dataclass(frozen=True)
class SimulationConfig:
    """Timings and failure rates of the stub backend.

    Attributes
    ----------
    build_delay, deploy_delay, test_delay, rollback_delay, monitor_delay:
        Seconds each stub sleeps before answering.
    poll_interval:
        Seconds between two monitoring samples while monitoring is active.
    time_scale:
        Multiplier applied to every delay and to the poll interval.
        ``0`` makes every stub answer on the next loop iteration.
    deploy_failure_rate:
        Probability that a production deployment fails.
    test_failure_rate:
        Probability that a staging test run fails.
    rollback_failure_rate:
        Probability that a production rollback fails.
    seed:
        Seed for the random source.  ``None`` means non-deterministic.
    """

    build_delay: float = 2.0
    deploy_delay: float = 3.0
    test_delay: float = 1.5
    rollback_delay: float = 2.5
    monitor_delay: float = 1.0
    poll_interval: float = 5.0
    time_scale: float = 1.0
    deploy_failure_rate: float = 0.2
    test_failure_rate: float = 0.1
    rollback_failure_rate: float = 0.1
    seed: int | None = None

    def validate(self) -> None:
        """Raise ``ValueError`` if any field is out of valid range."""
        for name in ("build_delay", "deploy_delay", "test_delay",
                     "rollback_delay", "monitor_delay"):
            value = getattr(self, name)
            if value < 0.0:
                raise ValueError(f"{name} must be >= 0, got {value}")
        if self.poll_interval <= 0.0:
            raise ValueError(f"poll_interval must be > 0, got {self.poll_interval}")
        if self.time_scale < 0.0:
            raise ValueError(f"time_scale must be >= 0, got {self.time_scale}")
        _check_rate("deploy_failure_rate", self.deploy_failure_rate)
        _check_rate("test_failure_rate", self.test_failure_rate)
        _check_rate("rollback_failure_rate", self.rollback_failure_rate)
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must be >= 0, got {self.seed}")

    def scaled(self, seconds: float) -> float:
        """Apply ``time_scale`` to a delay."""
        return seconds * self.time_scale

    @property
    def effective_poll_interval(self) -> float:
        # A zero time scale would spin the poller; keep a floor.
        return max(self.scaled(self.poll_interval), 0.001)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SimulationConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Workflow Configuration                                                #
# ===================================================================== #

@dataclass(frozen=True)
class WorkflowConfig:
    """Branch names, version strings and demo defaults.

    Attributes
    ----------
    main_branch:
        Branch the feature branch is created from and merged into.
    feature_branch:
        Name given to the branch created by ``create_branch``.
    initial_version, initial_previous_version:
        Version pair at start-up.
    rollback_fallback_version:
        Value ``previous`` takes after a successful rollback.  A fixed
        placeholder, not derived from any history.
    merged_version:
        Value ``current`` takes after a pull request is merged.
    default_build_id:
        Build id used for deployments before any build has succeeded.
    default_source:
        Source text built when none is given.
    """

    main_branch: str = "main"
    feature_branch: str = "feature/new-feature"
    initial_version: str = "1.0.0"
    initial_previous_version: str = "0.9.0"
    rollback_fallback_version: str = "0.8.0"
    merged_version: str = "1.1.0"
    default_build_id: str = "1234"
    default_source: str = DEFAULT_SOURCE

    def validate(self) -> None:
        for f in fields(self):
            if f.name == "default_source":
                continue
            if not getattr(self, f.name):
                raise ValueError(f"{f.name} must not be empty")
        if self.feature_branch == self.main_branch:
            raise ValueError(
                f"feature_branch must differ from main_branch ('{self.main_branch}')"
            )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkflowConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Combined configuration                                                #
# ===================================================================== #

@dataclass(frozen=True)
class PipelineConfig:
    """The full simulator configuration.

    ``extra`` keeps unknown top-level sections untouched.
    """

    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.extra is None:
            object.__setattr__(self, "extra", {})

    def validate(self) -> None:
        self.simulation.validate()
        self.workflow.validate()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "simulation": self.simulation.to_dict(),
            "workflow": self.workflow.to_dict(),
        }
        data.update(self.extra)
        return data


_CONFIG_MAP: dict[str, type] = {
    "simulation": SimulationConfig,
    "workflow": WorkflowConfig,
}


def load_config_from_json(json_str: str) -> PipelineConfig:
    """Parse a JSON string into a ``PipelineConfig``.

    The JSON is expected to be an object whose top-level keys are config
    section names (``simulation``, ``workflow``).  Unknown sections are
    preserved as raw values in ``extra``.
    """
    raw = json.loads(json_str)
    if not isinstance(raw, dict):
        raise ValueError("Top-level JSON must be an object")
    sections: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    for section, data in raw.items():
        cls = _CONFIG_MAP.get(section)
        if cls is None:
            extra[section] = data
        elif isinstance(data, dict):
            sections[section] = cls.from_dict(data)
        else:
            raise ValueError(f"Section '{section}' must be an object")
    return PipelineConfig(extra=extra, **sections)


def load_config_file(path: str | Path) -> PipelineConfig:
    """Read and parse a JSON config file."""
    return load_config_from_json(Path(path).read_text(encoding="utf-8"))
