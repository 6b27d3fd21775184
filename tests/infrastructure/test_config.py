"""Tests for the simulator configuration dataclasses and JSON loading."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import pytest

from devops_demo.infrastructure.config import (
    DEFAULT_SOURCE,
    PipelineConfig,
    SimulationConfig,
    WorkflowConfig,
    load_config_file,
    load_config_from_json,
)


class TestSimulationConfig:

    def test_defaults(self) -> None:
        cfg = SimulationConfig()
        assert cfg.build_delay == 2.0
        assert cfg.deploy_delay == 3.0
        assert cfg.test_delay == 1.5
        assert cfg.rollback_delay == 2.5
        assert cfg.monitor_delay == 1.0
        assert cfg.poll_interval == 5.0
        assert cfg.deploy_failure_rate == 0.2
        assert cfg.test_failure_rate == 0.1
        assert cfg.rollback_failure_rate == 0.1
        cfg.validate()

    def test_frozen(self) -> None:
        cfg = SimulationConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.build_delay = 0.0  # type: ignore[misc]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"build_delay": -1.0},
            {"poll_interval": 0.0},
            {"time_scale": -0.5},
            {"deploy_failure_rate": 1.5},
            {"test_failure_rate": -0.1},
            {"rollback_failure_rate": 2.0},
            {"seed": -3},
        ],
    )
    def test_validate_rejects(self, overrides: dict) -> None:
        with pytest.raises(ValueError):
            SimulationConfig(**overrides).validate()

    def test_scaled(self) -> None:
        cfg = SimulationConfig(time_scale=0.1)
        assert cfg.scaled(3.0) == pytest.approx(0.3)

    def test_poll_interval_has_floor(self) -> None:
        assert SimulationConfig(time_scale=0.0).effective_poll_interval == 0.001
        assert SimulationConfig(time_scale=0.5).effective_poll_interval == 2.5

    def test_from_dict_ignores_unknown_keys(self) -> None:
        cfg = SimulationConfig.from_dict({"deploy_delay": 0.5, "bogus": 1})
        assert cfg.deploy_delay == 0.5

    def test_to_dict_round_trip(self) -> None:
        cfg = SimulationConfig(seed=42, time_scale=0.25)
        assert SimulationConfig.from_dict(cfg.to_dict()) == cfg


class TestWorkflowConfig:

    def test_defaults(self) -> None:
        cfg = WorkflowConfig()
        assert cfg.main_branch == "main"
        assert cfg.feature_branch == "feature/new-feature"
        assert cfg.rollback_fallback_version == "0.8.0"
        assert cfg.merged_version == "1.1.0"
        assert cfg.default_build_id == "1234"
        assert cfg.default_source == DEFAULT_SOURCE

    def test_feature_must_differ_from_main(self) -> None:
        with pytest.raises(ValueError, match="feature_branch"):
            WorkflowConfig(feature_branch="main").validate()

    def test_empty_field_rejected(self) -> None:
        with pytest.raises(ValueError, match="merged_version"):
            WorkflowConfig(merged_version="").validate()

    def test_empty_default_source_allowed(self) -> None:
        WorkflowConfig(default_source="").validate()


class TestLoadConfig:

    def test_sections_and_extra(self) -> None:
        raw = json.dumps({
            "simulation": {"time_scale": 0.0, "seed": 9},
            "workflow": {"merged_version": "2.0.0"},
            "ui": {"theme": "dark"},
        })
        cfg = load_config_from_json(raw)
        assert cfg.simulation.seed == 9
        assert cfg.workflow.merged_version == "2.0.0"
        assert cfg.extra == {"ui": {"theme": "dark"}}
        assert cfg.to_dict()["ui"] == {"theme": "dark"}

    def test_missing_sections_use_defaults(self) -> None:
        cfg = load_config_from_json("{}")
        assert cfg == PipelineConfig()

    def test_top_level_must_be_object(self) -> None:
        with pytest.raises(ValueError, match="Top-level"):
            load_config_from_json("[1, 2]")

    def test_known_section_must_be_object(self) -> None:
        with pytest.raises(ValueError, match="simulation"):
            load_config_from_json('{"simulation": 3}')

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(ValueError):
            load_config_from_json('{"simulation": {"deploy_failure_rate": 4}}')

    def test_load_file(self, tmp_path: Path) -> None:
        path = tmp_path / "pipeline.json"
        path.write_text('{"simulation": {"poll_interval": 1.0}}', encoding="utf-8")
        assert load_config_file(path).simulation.poll_interval == 1.0
