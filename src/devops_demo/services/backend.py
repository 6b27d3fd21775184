"""Stub backend standing in for the build system, deploy target, test runner
and metrics source.

Every operation sleeps for its configured delay and then either returns a
canned result or raises the matching domain error.  Failures are
content-triggered (build) or drawn from the injected ``RandomSource``
(deploy, test, rollback).  The monitoring sample never fails.

The delays go through an injectable ``sleep`` coroutine function, so tests
can run the stubs with a zero time scale or a fake clock.
"""

from __future__ import annotations

import asyncio
import logging
import math
import textwrap
import uuid
from collections.abc import Awaitable, Callable

from devops_demo.domain.enums import Environment
from devops_demo.domain.exceptions import (
    BuildError,
    DeployError,
    RollbackError,
    TestError,
)
from devops_demo.domain.values import (
    BuildArtifact,
    DeploymentReceipt,
    MonitoringSample,
    RollbackReceipt,
    TestReport,
)
from devops_demo.infrastructure.config import SimulationConfig
from devops_demo.services.randomness import RandomSource, make_random_source

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]

BUILD_FAILURE_TRIGGER = "error"

BUILD_LOG = textwrap.dedent("""\
    Building application...
    Compiling code...
    Running tests...
    Tests passed.
    Packaging application...
    Build successful!
""")

TEST_REPORT = textwrap.dedent("""\
    Running integration tests...
    [PASSED] Test: User authentication
    [PASSED] Test: Data validation
    [PASSED] Test: API response time
    [PASSED] Test: Database connection
    All tests passed.
""")

# Upper bounds of the uniform metric draws.
CPU_MAX = 80.0
MEMORY_MAX = 90.0
RESPONSE_TIME_MIN_MS = 50.0
RESPONSE_TIME_SPAN_MS = 200.0
ERRORS_PER_MINUTE_BUCKETS = 5


def _new_build_id() -> str:
    return uuid.uuid4().hex[:8]


class SimulatedBackend:
    """The five stub operations the controller consumes.

    Parameters
    ----------
    config:
        Delays and failure rates.  Defaults to ``SimulationConfig()``.
    random_source:
        Source of uniform draws.  Defaults to a NumPy source seeded with
        ``config.seed``.
    sleep:
        Coroutine function used for the simulated latency.
    id_factory:
        Callable producing build ids.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        random_source: RandomSource | None = None,
        sleep: SleepFn | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._config = config or SimulationConfig()
        self._config.validate()
        self._random = random_source or make_random_source(self._config.seed)
        self._sleep = sleep or asyncio.sleep
        self._id_factory = id_factory or _new_build_id

    @property
    def config(self) -> SimulationConfig:
        return self._config

    async def _wait(self, seconds: float) -> None:
        await self._sleep(self._config.scaled(seconds))

    def _fails(self, rate: float) -> bool:
        return self._random.random() < rate

    # -- operations -----------------------------------------------------------

    async def build(self, source: str) -> BuildArtifact:
        """Compile *source*.

        Raises ``BuildError`` if *source* contains ``"error"``
        (case-sensitive).
        """
        logger.debug("build: %d chars", len(source))
        await self._wait(self._config.build_delay)
        if BUILD_FAILURE_TRIGGER in source:
            raise BuildError(details={"trigger": BUILD_FAILURE_TRIGGER})
        return BuildArtifact(build_id=self._id_factory(), log=BUILD_LOG)

    async def deploy(self, build_id: str, environment: Environment | str) -> DeploymentReceipt:
        """Deploy *build_id* to *environment*.

        Production deployments fail with probability
        ``config.deploy_failure_rate``; staging never fails.
        """
        env = Environment(environment)
        logger.debug("deploy: build=%s env=%s", build_id, env.value)
        await self._wait(self._config.deploy_delay)
        if env is Environment.PRODUCTION and self._fails(self._config.deploy_failure_rate):
            raise DeployError(
                f"Deployment to {env.value} failed. Reason: Critical system overload.",
                environment=env.value,
                build_id=build_id,
            )
        return DeploymentReceipt(
            build_id=build_id,
            environment=env,
            message=f"Successfully deployed build {build_id} to {env.value} environment.",
        )

    async def test(self, environment: Environment | str) -> TestReport:
        """Run the integration tests in *environment*.

        Staging runs fail with probability ``config.test_failure_rate``.
        """
        env = Environment(environment)
        logger.debug("test: env=%s", env.value)
        await self._wait(self._config.test_delay)
        if env is Environment.STAGING and self._fails(self._config.test_failure_rate):
            raise TestError(
                f"Automated tests failed in {env.value}.", environment=env.value
            )
        return TestReport(environment=env, results=TEST_REPORT)

    async def rollback(
        self, environment: Environment | str, previous_version: str
    ) -> RollbackReceipt:
        """Restore *previous_version* in *environment*.

        Production rollbacks fail with probability
        ``config.rollback_failure_rate``.
        """
        env = Environment(environment)
        logger.debug("rollback: env=%s target=%s", env.value, previous_version)
        await self._wait(self._config.rollback_delay)
        if env is Environment.PRODUCTION and self._fails(self._config.rollback_failure_rate):
            raise RollbackError(
                "Rollback failed: Could not restore database state.",
                environment=env.value,
                target_version=previous_version,
            )
        return RollbackReceipt(
            environment=env,
            version=previous_version,
            message=(
                f"Successfully rolled back {env.value} environment "
                f"to version {previous_version}."
            ),
        )

    async def sample_metrics(self) -> MonitoringSample:
        """Return a fresh uniformly drawn metrics sample."""
        await self._wait(self._config.monitor_delay)
        draw = self._random.random
        return MonitoringSample(
            cpu_usage=draw() * CPU_MAX,
            memory_usage=draw() * MEMORY_MAX,
            response_time_ms=draw() * RESPONSE_TIME_SPAN_MS + RESPONSE_TIME_MIN_MS,
            errors_per_minute=int(math.floor(draw() * ERRORS_PER_MINUTE_BUCKETS)),
        )
