"""Conditional edge functions for the release graph.

These functions route between nodes based on the outcome of the step that
just ran.
"""

from __future__ import annotations

from typing import Any, Literal


def last_step_succeeded(state: dict[str, Any]) -> bool:
    outcomes = state.get("outcomes") or []
    return bool(outcomes) and outcomes[-1].success


def should_continue(state: dict[str, Any]) -> Literal["continue", "__end__"]:
    """Stop the release at the first failed step."""
    if last_step_succeeded(state):
        return "continue"
    return "__end__"


def after_production_deploy(
    state: dict[str, Any],
) -> Literal["test_production", "rollback_production", "__end__"]:
    """Test production on success; optionally roll it back on failure."""
    if last_step_succeeded(state):
        return "test_production"
    if state.get("rollback_on_failure", True):
        return "rollback_production"
    return "__end__"
