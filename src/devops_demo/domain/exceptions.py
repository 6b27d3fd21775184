"""Domain exceptions for the DevOps pipeline simulator.

All simulator exceptions inherit from ``PipelineSimError`` so callers can
catch the full family with a single ``except`` clause when needed.  The stub
backend raises the step-specific subclasses; the controller catches them at
the handler boundary and turns them into a ``failure`` status.
"""

from __future__ import annotations

from typing import Any


class PipelineSimError(Exception):
    """Base exception for all simulator errors."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}


class BuildError(PipelineSimError):
    """Raised when the source text triggers a build failure.

    Deterministic: the build fails whenever the source contains the
    case-sensitive substring ``"error"``.
    """

    def __init__(
        self,
        message: str = "Build failed due to code error.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)


class DeployError(PipelineSimError):
    """Raised when a deployment to an environment fails."""

    def __init__(
        self,
        message: str = "Deployment failed",
        environment: str = "",
        build_id: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.environment = environment
        self.build_id = build_id


class TestError(PipelineSimError):
    """Raised when the automated test run in an environment fails."""

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        message: str = "Tests failed",
        environment: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.environment = environment


class RollbackError(PipelineSimError):
    """Raised when a rollback to the previous version fails."""

    def __init__(
        self,
        message: str = "Rollback failed",
        environment: str = "",
        target_version: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.environment = environment
        self.target_version = target_version


class MonitoringFetchError(PipelineSimError):
    """Raised (or wrapped) when a metrics sample cannot be fetched.

    The stub never raises one; the poller wraps any unexpected fetch failure
    in this type before reporting it.
    """

    def __init__(
        self,
        message: str = "Error fetching monitoring data",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)


class TransitionError(PipelineSimError):
    """Raised when a branch / pull-request transition is not allowed.

    The state the transition was attempted from is left unchanged.
    """

    def __init__(
        self,
        message: str = "Transition not allowed",
        action: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.action = action
