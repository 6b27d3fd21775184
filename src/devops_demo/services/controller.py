"""The pipeline controller: one handler per user action.

``PipelineController`` owns the ``PipelineState`` and is the only thing that
mutates it.  Every async handler follows the same shape:

1. refuse the action if its target is already ``running`` (state untouched),
2. flip the target to ``running`` *before* the first ``await``,
3. await the stub operation,
4. commit ``success`` or ``failure`` exactly once and raise a notification.

Stub failures, expected or not, are caught here and never propagate to the
caller; retries are left to the user.  Each state change is also published
on the controller's ``EventBus`` and recorded in its bounded ``events`` log.
"""

from __future__ import annotations

import logging
from typing import Any

from devops_demo.domain.aggregates import PipelineState
from devops_demo.domain.enums import (
    Environment,
    MonitoringStatus,
    NotificationLevel,
    RunStatus,
)
from devops_demo.domain.events import (
    ActionRejected,
    BranchCreated,
    BuildFinished,
    BuildStarted,
    DeploymentFinished,
    DomainEvent,
    MetricsSampled,
    MonitoringFetchFailed,
    MonitoringStarted,
    MonitoringStopped,
    PullRequestMerged,
    PullRequestOpened,
    RollbackFinished,
    TestsFinished,
    VersionChanged,
)
from devops_demo.domain.exceptions import (
    BuildError,
    DeployError,
    MonitoringFetchError,
    RollbackError,
    TestError,
    TransitionError,
)
from devops_demo.domain.values import (
    BranchState,
    MonitoringSample,
    StepOutcome,
    VersionState,
)
from devops_demo.infrastructure.config import PipelineConfig
from devops_demo.infrastructure.event_bus import EventBus, EventStore
from devops_demo.services import workflow
from devops_demo.services.backend import SimulatedBackend
from devops_demo.services.monitoring import MonitoringPoller

logger = logging.getLogger(__name__)

EVENT_LOG_SIZE = 1000


class PipelineController:
    """Owns the pipeline state and dispatches user actions to the stubs.

    Parameters
    ----------
    config:
        Full simulator config.  Defaults to ``PipelineConfig()``.
    backend:
        Stub backend.  Defaults to a ``SimulatedBackend`` built from
        ``config.simulation``.
    event_bus:
        Bus the controller publishes on.  A private bus is created if
        omitted.
    source_id:
        ``source_id`` stamped on every published event.
    event_log_size:
        Number of most recent events kept in ``events`` (``0`` = unlimited).
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        backend: SimulatedBackend | None = None,
        event_bus: EventBus | None = None,
        source_id: str = "pipeline-controller",
        event_log_size: int = EVENT_LOG_SIZE,
    ) -> None:
        self._config = config or PipelineConfig()
        self._config.validate()
        self._backend = backend or SimulatedBackend(self._config.simulation)
        self._bus = event_bus or EventBus()
        self._source_id = source_id
        self._events = EventStore(max_size=event_log_size)
        self._bus.subscribe_all(self._events.append)

        wf = self._config.workflow
        self.state = PipelineState(
            versions=VersionState(
                current=wf.initial_version,
                previous=wf.initial_previous_version,
            ),
            branch=BranchState(active_branch=wf.main_branch),
        )
        self.source = wf.default_source

        self._poller = MonitoringPoller(
            fetch=self._backend.sample_metrics,
            on_sample=self._on_sample,
            on_error=self._on_sample_error,
            interval=self._backend.config.effective_poll_interval,
        )

    # -- properties -----------------------------------------------------------

    @property
    def config(self) -> PipelineConfig:
        return self._config

    @property
    def backend(self) -> SimulatedBackend:
        return self._backend

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    @property
    def poller(self) -> MonitoringPoller:
        return self._poller

    @property
    def events(self) -> EventStore:
        """Every event this controller has published, oldest first."""
        return self._events

    def snapshot(self) -> dict[str, Any]:
        """Plain-dict copy of the current state."""
        return self.state.to_dict()

    # -- helpers --------------------------------------------------------------

    def _publish(self, event: DomainEvent) -> None:
        self._bus.publish(event)

    def _reject(
        self, action: str, reason: str, environment: Environment | None = None
    ) -> StepOutcome:
        logger.info("Rejected %s: %s", action, reason)
        self.state.notify(NotificationLevel.WARNING, reason)
        self._publish(ActionRejected(source_id=self._source_id, action=action, reason=reason))
        return StepOutcome(
            action=action,
            success=False,
            message=reason,
            environment=environment,
            rejected=True,
        )

    def _complete(
        self,
        action: str,
        success: bool,
        message: str,
        environment: Environment | None = None,
    ) -> StepOutcome:
        if success:
            logger.info("%s succeeded: %s", action, message)
            self.state.notify(NotificationLevel.SUCCESS, message)
        else:
            logger.warning("%s failed: %s", action, message)
            self.state.notify(NotificationLevel.ERROR, message)
        return StepOutcome(
            action=action, success=success, message=message, environment=environment
        )

    # -- build ----------------------------------------------------------------

    async def run_build(self, source: str | None = None) -> StepOutcome:
        """Build *source* (or the current source text if omitted)."""
        run = self.state.build
        if run.is_running:
            return self._reject("build", "Build already running.")
        if source is not None:
            self.source = source

        run.start(self.source)
        self._publish(BuildStarted(source_id=self._source_id, source_length=len(self.source)))

        try:
            artifact = await self._backend.build(self.source)
        except BuildError as exc:
            run.fail(exc.message or "Build failed.")
        except Exception:
            logger.exception("Unexpected error during build")
            run.fail("An unexpected error occurred during build.")
        else:
            run.succeed(artifact.build_id, artifact.log or "Build successful.")
            self.state.last_good_build_id = artifact.build_id

        success = run.status is RunStatus.SUCCESS
        message = f"Build {run.build_id} succeeded." if success else run.log
        self._publish(BuildFinished(
            source_id=self._source_id,
            build_id=run.build_id,
            success=success,
            message=message,
        ))
        return self._complete("build", success, message)

    # -- deploy ---------------------------------------------------------------

    async def deploy(self, environment: Environment | str) -> StepOutcome:
        """Deploy the last good build (or the fallback id) to *environment*."""
        env = Environment(environment)
        env_state = self.state.environment(env)
        if env_state.deploy_status is RunStatus.RUNNING:
            return self._reject("deploy", f"Deployment to {env.value} already running.", env)

        env_state.deploy_status = RunStatus.RUNNING
        build_id = self.state.last_good_build_id or self._config.workflow.default_build_id

        try:
            receipt = await self._backend.deploy(build_id, env)
        except DeployError as exc:
            env_state.deploy_status = RunStatus.FAILURE
            message = f"Deployment to {env.value} failed: {exc.message}"
        except Exception as exc:
            logger.exception("Unexpected error deploying to %s", env.value)
            env_state.deploy_status = RunStatus.FAILURE
            message = f"Error deploying to {env.value}: {exc}"
        else:
            env_state.deploy_status = RunStatus.SUCCESS
            message = receipt.message or f"Deployed to {env.value}."

        success = env_state.deploy_status is RunStatus.SUCCESS
        env_state.last_message = message
        self._publish(DeploymentFinished(
            source_id=self._source_id,
            environment=env,
            build_id=build_id,
            success=success,
            message=message,
        ))
        return self._complete("deploy", success, message, env)

    # -- test -----------------------------------------------------------------

    async def run_tests(self, environment: Environment | str) -> StepOutcome:
        """Run the automated tests in *environment*."""
        env = Environment(environment)
        env_state = self.state.environment(env)
        if env_state.test_status is RunStatus.RUNNING:
            return self._reject("test", f"Tests in {env.value} already running.", env)

        env_state.test_status = RunStatus.RUNNING
        env_state.test_output = ""

        try:
            report = await self._backend.test(env)
        except TestError as exc:
            env_state.test_status = RunStatus.FAILURE
            env_state.test_output = exc.message or "Tests failed."
        except Exception as exc:
            logger.exception("Unexpected error running tests in %s", env.value)
            env_state.test_status = RunStatus.FAILURE
            env_state.test_output = f"Error running tests: {exc}"
        else:
            env_state.test_status = RunStatus.SUCCESS
            env_state.test_output = report.results or "Tests passed."

        success = env_state.test_status is RunStatus.SUCCESS
        message = (
            f"All tests passed in {env.value}." if success else env_state.test_output
        )
        env_state.last_message = message
        self._publish(TestsFinished(
            source_id=self._source_id,
            environment=env,
            success=success,
            output=env_state.test_output,
        ))
        return self._complete("test", success, message, env)

    # -- rollback -------------------------------------------------------------

    async def rollback(self, environment: Environment | str) -> StepOutcome:
        """Roll *environment* back to the previous version.

        On success the version pair cascades: ``current`` takes the old
        ``previous`` and ``previous`` takes the configured fallback.
        """
        env = Environment(environment)
        env_state = self.state.environment(env)
        if env_state.rollback_status is RunStatus.RUNNING:
            return self._reject("rollback", f"Rollback of {env.value} already running.", env)

        env_state.rollback_status = RunStatus.RUNNING
        target = self.state.versions.previous

        try:
            receipt = await self._backend.rollback(env, target)
        except RollbackError as exc:
            env_state.rollback_status = RunStatus.FAILURE
            message = f"Rollback of {env.value} failed: {exc.message}"
        except Exception as exc:
            logger.exception("Unexpected error rolling back %s", env.value)
            env_state.rollback_status = RunStatus.FAILURE
            message = f"Error rolling back {env.value}: {exc}"
        else:
            env_state.rollback_status = RunStatus.SUCCESS
            message = receipt.message
            old = self.state.versions
            self.state.versions = workflow.apply_rollback(
                old, self._config.workflow, target=target
            )
            self._publish(VersionChanged(
                source_id=self._source_id,
                old_current=old.current,
                current=self.state.versions.current,
                previous=self.state.versions.previous,
                reason="rollback",
            ))

        success = env_state.rollback_status is RunStatus.SUCCESS
        env_state.last_message = message
        self._publish(RollbackFinished(
            source_id=self._source_id,
            environment=env,
            version=target,
            success=success,
            message=message,
        ))
        return self._complete("rollback", success, message, env)

    # -- monitoring -----------------------------------------------------------

    def start_monitoring(self) -> bool:
        """Start the poller.  Returns ``False`` if it was already active."""
        started = self._poller.start()
        self.state.monitoring_status = self._poller.status
        if started:
            self._publish(MonitoringStarted(
                source_id=self._source_id, interval=self._poller.interval
            ))
        return started

    def stop_monitoring(self) -> bool:
        """Stop the poller.  Returns ``False`` if it was not active."""
        stopped = self._poller.stop()
        self.state.monitoring_status = MonitoringStatus.STOPPED
        if stopped:
            self._publish(MonitoringStopped(
                source_id=self._source_id,
                samples_collected=self._poller.sample_count,
            ))
        return stopped

    def toggle_monitoring(self) -> MonitoringStatus:
        """Flip monitoring on or off; return the new status."""
        if self._poller.is_active:
            self.stop_monitoring()
        else:
            self.start_monitoring()
        return self.state.monitoring_status

    def _on_sample(self, sample: MonitoringSample) -> None:
        self.state.latest_sample = sample
        self._publish(MetricsSampled(source_id=self._source_id, sample=sample))

    def _on_sample_error(self, error: MonitoringFetchError) -> None:
        # The last known sample stays displayed.
        self._publish(MonitoringFetchFailed(source_id=self._source_id, error=error.message))

    async def shutdown(self) -> None:
        """Stop monitoring and wait for the poller task to finish."""
        if self._poller.is_active:
            self.stop_monitoring()
        await self._poller.aclose()

    # -- branch / pull request ------------------------------------------------

    def create_branch(self) -> StepOutcome:
        try:
            branch = workflow.create_branch(self.state.branch, self._config.workflow)
        except TransitionError as exc:
            return self._reject("create_branch", exc.message)
        self.state.branch = branch
        self._publish(BranchCreated(source_id=self._source_id, branch=branch.active_branch))
        return self._complete(
            "create_branch", True, f"Created new branch: {branch.active_branch}"
        )

    def open_pull_request(self) -> StepOutcome:
        try:
            branch = workflow.open_pull_request(self.state.branch, self._config.workflow)
        except TransitionError as exc:
            return self._reject("open_pull_request", exc.message)
        self.state.branch = branch
        target = self._config.workflow.main_branch
        self._publish(PullRequestOpened(
            source_id=self._source_id, branch=branch.active_branch, target=target
        ))
        return self._complete(
            "open_pull_request",
            True,
            f"Opened pull request for {branch.active_branch} -> {target}",
        )

    def merge_pull_request(self) -> StepOutcome:
        merged_branch = self.state.branch.active_branch
        try:
            branch, versions = workflow.merge_pull_request(
                self.state.branch, self.state.versions, self._config.workflow
            )
        except TransitionError as exc:
            return self._reject("merge_pull_request", exc.message)

        old = self.state.versions
        self.state.branch = branch
        self.state.versions = versions
        self._publish(PullRequestMerged(
            source_id=self._source_id, branch=merged_branch, version=versions.current
        ))
        self._publish(VersionChanged(
            source_id=self._source_id,
            old_current=old.current,
            current=versions.current,
            previous=versions.previous,
            reason="merge",
        ))
        return self._complete(
            "merge_pull_request", True, "Merged pull request. New version deployed!"
        )
