"""Tests for SimulatedBackend: content-triggered builds, failure rates,
messages, delays and metric ranges."""

from __future__ import annotations

import numpy as np
import pytest

from devops_demo.domain.enums import Environment
from devops_demo.domain.exceptions import (
    BuildError,
    DeployError,
    PipelineSimError,
    RollbackError,
    TestError,
)
from devops_demo.infrastructure.config import SimulationConfig
from devops_demo.services.backend import BUILD_LOG, TEST_REPORT, SimulatedBackend
from devops_demo.services.randomness import NumpyRandomSource
from devops_demo.testing import ScriptedRandomSource

TRIALS = 4000


class TestBuild:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "source",
        ["has an error here", "error", "// error", "some errors here", "terror"],
    )
    async def test_source_containing_error_fails(
        self, seeded_backend: SimulatedBackend, source: str
    ) -> None:
        with pytest.raises(BuildError) as excinfo:
            await seeded_backend.build(source)
        assert str(excinfo.value) == "Build failed due to code error."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("source", ["", "// normal code", "ERROR", "Error", "err or"])
    async def test_other_sources_succeed(
        self, seeded_backend: SimulatedBackend, source: str
    ) -> None:
        artifact = await seeded_backend.build(source)
        assert artifact.log == BUILD_LOG
        assert artifact.build_id

    @pytest.mark.asyncio
    async def test_normal_code_log(self, seeded_backend: SimulatedBackend) -> None:
        artifact = await seeded_backend.build("// normal code")
        assert "Build successful!" in artifact.log
        assert artifact.log.splitlines()[0] == "Building application..."

    @pytest.mark.asyncio
    async def test_build_ids_come_from_factory(self, fast_simulation: SimulationConfig) -> None:
        ids = iter(["b1", "b2"])
        backend = SimulatedBackend(fast_simulation, id_factory=lambda: next(ids))
        assert (await backend.build("x")).build_id == "b1"
        assert (await backend.build("y")).build_id == "b2"

    @pytest.mark.asyncio
    async def test_build_does_not_draw_randomness(
        self, fast_simulation: SimulationConfig
    ) -> None:
        rng = ScriptedRandomSource([0.5])
        backend = SimulatedBackend(fast_simulation, random_source=rng)
        await backend.build("// ok")
        assert rng.calls == 0


class TestDeploy:

    @pytest.mark.asyncio
    async def test_staging_never_fails(self, failing_backend: SimulatedBackend) -> None:
        receipt = await failing_backend.deploy("1234", "staging")
        assert receipt.environment is Environment.STAGING
        assert receipt.message == "Successfully deployed build 1234 to staging environment."

    @pytest.mark.asyncio
    async def test_production_failure_message(self, failing_backend: SimulatedBackend) -> None:
        with pytest.raises(DeployError) as excinfo:
            await failing_backend.deploy("1234", Environment.PRODUCTION)
        err = excinfo.value
        assert "Critical system overload" in err.message
        assert err.environment == "production"
        assert err.build_id == "1234"

    @pytest.mark.asyncio
    async def test_threshold_is_strict(self, fast_simulation: SimulationConfig) -> None:
        # Draw exactly at the rate is a success: failure means draw < rate.
        backend = SimulatedBackend(fast_simulation, random_source=ScriptedRandomSource([0.2]))
        receipt = await backend.deploy("b", "production")
        assert receipt.environment is Environment.PRODUCTION

    @pytest.mark.asyncio
    async def test_production_failure_rate(self, fast_simulation: SimulationConfig) -> None:
        backend = SimulatedBackend(fast_simulation, random_source=NumpyRandomSource(7))
        failures = []
        for _ in range(TRIALS):
            try:
                await backend.deploy("b", "production")
                failures.append(0)
            except DeployError:
                failures.append(1)
        assert np.mean(failures) == pytest.approx(0.2, abs=0.03)

    @pytest.mark.asyncio
    async def test_unknown_environment_rejected(self, seeded_backend: SimulatedBackend) -> None:
        with pytest.raises(ValueError):
            await seeded_backend.deploy("b", "qa")


class TestTestRuns:

    @pytest.mark.asyncio
    async def test_production_never_fails(self, failing_backend: SimulatedBackend) -> None:
        report = await failing_backend.test("production")
        assert report.results == TEST_REPORT
        assert report.results.rstrip().endswith("All tests passed.")

    @pytest.mark.asyncio
    async def test_staging_failure_message(self, failing_backend: SimulatedBackend) -> None:
        with pytest.raises(TestError) as excinfo:
            await failing_backend.test("staging")
        assert str(excinfo.value) == "Automated tests failed in staging."
        assert isinstance(excinfo.value, PipelineSimError)

    @pytest.mark.asyncio
    async def test_staging_failure_rate(self, fast_simulation: SimulationConfig) -> None:
        backend = SimulatedBackend(fast_simulation, random_source=NumpyRandomSource(11))
        failures = 0
        for _ in range(TRIALS):
            try:
                await backend.test("staging")
            except TestError:
                failures += 1
        assert failures / TRIALS == pytest.approx(0.1, abs=0.025)


class TestRollback:

    @pytest.mark.asyncio
    async def test_staging_never_fails(self, failing_backend: SimulatedBackend) -> None:
        receipt = await failing_backend.rollback("staging", "0.9.0")
        assert receipt.version == "0.9.0"
        assert receipt.message == (
            "Successfully rolled back staging environment to version 0.9.0."
        )

    @pytest.mark.asyncio
    async def test_production_failure(self, failing_backend: SimulatedBackend) -> None:
        with pytest.raises(RollbackError) as excinfo:
            await failing_backend.rollback("production", "0.9.0")
        assert excinfo.value.target_version == "0.9.0"
        assert "Could not restore database state" in excinfo.value.message

    @pytest.mark.asyncio
    async def test_production_failure_rate(self, fast_simulation: SimulationConfig) -> None:
        backend = SimulatedBackend(fast_simulation, random_source=NumpyRandomSource(13))
        failures = 0
        for _ in range(TRIALS):
            try:
                await backend.rollback("production", "0.9.0")
            except RollbackError:
                failures += 1
        assert failures / TRIALS == pytest.approx(0.1, abs=0.025)


class TestSampleMetrics:

    @pytest.mark.asyncio
    async def test_ranges(self, seeded_backend: SimulatedBackend) -> None:
        for _ in range(500):
            s = await seeded_backend.sample_metrics()
            assert 0.0 <= s.cpu_usage < 80.0
            assert 0.0 <= s.memory_usage < 90.0
            assert 50.0 <= s.response_time_ms < 250.0
            assert s.errors_per_minute in {0, 1, 2, 3, 4}

    @pytest.mark.asyncio
    async def test_scaled_draws(self, fast_simulation: SimulationConfig) -> None:
        backend = SimulatedBackend(
            fast_simulation, random_source=ScriptedRandomSource([0.5, 0.5, 0.5, 0.99])
        )
        s = await backend.sample_metrics()
        assert s.cpu_usage == pytest.approx(40.0)
        assert s.memory_usage == pytest.approx(45.0)
        assert s.response_time_ms == pytest.approx(150.0)
        assert s.errors_per_minute == 4


class TestDelays:

    @pytest.mark.asyncio
    async def test_each_stub_waits_its_scaled_delay(self) -> None:
        waited: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            waited.append(seconds)

        backend = SimulatedBackend(
            SimulationConfig(time_scale=0.5),
            random_source=ScriptedRandomSource([0.99]),
            sleep=fake_sleep,
        )
        await backend.build("ok")
        await backend.deploy("b", "staging")
        await backend.test("production")
        await backend.rollback("staging", "0.9.0")
        await backend.sample_metrics()
        assert waited == [1.0, 1.5, 0.75, 1.25, 0.5]

    def test_invalid_config_rejected(self) -> None:
        with pytest.raises(ValueError):
            SimulatedBackend(SimulationConfig(deploy_failure_rate=1.5))
