"""LangGraph node factories for the release flow.

Each factory closes over a ``PipelineController`` and returns an async node
that runs one handler and returns a partial state update.  The nodes
delegate to the controller rather than calling the stubs themselves, so a
release leaves the controller state exactly as the same clicks would.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from devops_demo.domain.enums import Environment
from devops_demo.domain.values import StepOutcome
from devops_demo.services.controller import PipelineController

logger = logging.getLogger(__name__)

NodeFn = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


def _update(node_name: str, outcome: StepOutcome) -> dict[str, Any]:
    update: dict[str, Any] = {"outcomes": [outcome]}
    if not outcome.success:
        update["failed_step"] = node_name
    logger.debug("release node %s -> success=%s", node_name, outcome.success)
    return update


def make_build_node(controller: PipelineController) -> NodeFn:
    """Create the ``build`` node."""

    async def build_node(state: dict[str, Any]) -> dict[str, Any]:
        source = state.get("source") or None
        outcome = await controller.run_build(source)
        return _update("build", outcome)

    return build_node


def make_deploy_node(controller: PipelineController, environment: Environment) -> NodeFn:
    """Create a ``deploy_<env>`` node."""
    name = f"deploy_{environment.value}"

    async def deploy_node(state: dict[str, Any]) -> dict[str, Any]:
        return _update(name, await controller.deploy(environment))

    return deploy_node


def make_test_node(controller: PipelineController, environment: Environment) -> NodeFn:
    """Create a ``test_<env>`` node."""
    name = f"test_{environment.value}"

    async def test_node(state: dict[str, Any]) -> dict[str, Any]:
        return _update(name, await controller.run_tests(environment))

    return test_node


def make_rollback_node(controller: PipelineController, environment: Environment) -> NodeFn:
    """Create a ``rollback_<env>`` node."""
    name = f"rollback_{environment.value}"

    async def rollback_node(state: dict[str, Any]) -> dict[str, Any]:
        return _update(name, await controller.rollback(environment))

    return rollback_node
