"""LangGraph release flow for the DevOps pipeline simulator.

Usage::

    from devops_demo.graph import run_release

    result = await run_release(controller, source="// normal code")
    for outcome in result["outcomes"]:
        print(outcome.action, outcome.success)
"""

from devops_demo.graph.edges import (
    after_production_deploy,
    last_step_succeeded,
    should_continue,
)
from devops_demo.graph.graph import build_release_graph, run_release
from devops_demo.graph.state import ReleaseState

__all__ = [
    "ReleaseState",
    "build_release_graph",
    "run_release",
    "after_production_deploy",
    "last_step_succeeded",
    "should_continue",
]
