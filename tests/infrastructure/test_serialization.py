"""Tests for domain event serialization."""

from __future__ import annotations

import json

from devops_demo.domain.enums import Environment
from devops_demo.domain.events import DeploymentFinished, MetricsSampled, VersionChanged
from devops_demo.domain.values import MonitoringSample
from devops_demo.infrastructure.serialization import event_to_dict


class TestEventToDict:

    def test_enum_fields_become_values(self) -> None:
        data = event_to_dict(DeploymentFinished(
            source_id="ctl",
            environment=Environment.PRODUCTION,
            build_id="1234",
            success=False,
            message="Deployment to production failed: overload",
        ))
        assert data["type"] == "DeploymentFinished"
        assert data["environment"] == "production"
        assert data["source_id"] == "ctl"
        assert data["success"] is False

    def test_nested_sample(self) -> None:
        sample = MonitoringSample(
            cpu_usage=1.0, memory_usage=2.0, response_time_ms=70.0, errors_per_minute=1
        )
        data = event_to_dict(MetricsSampled(sample=sample))
        assert data["sample"]["response_time_ms"] == 70.0

    def test_json_serialisable(self) -> None:
        event = VersionChanged(old_current="1.0.0", current="0.9.0", previous="0.8.0")
        assert json.loads(json.dumps(event_to_dict(event)))["current"] == "0.9.0"
