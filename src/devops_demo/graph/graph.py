"""Build the release StateGraph.

``build_release_graph()`` wires the release steps into a compiled LangGraph::

    build -> deploy_staging -> test_staging -> deploy_production
          -> test_production                  (production deploy ok)
          -> rollback_production              (production deploy failed)

Any other failed step ends the release.  Nothing is retried.
"""

from typing import Any

from langgraph.graph import END, START, StateGraph

from devops_demo.domain.enums import Environment
from devops_demo.graph.edges import after_production_deploy, should_continue
from devops_demo.graph.nodes import (
    make_build_node,
    make_deploy_node,
    make_rollback_node,
    make_test_node,
)
from devops_demo.graph.state import ReleaseState
from devops_demo.services.controller import PipelineController


def build_release_graph(
    controller: PipelineController,
    checkpointer: Any | None = None,
) -> Any:
    """Build and compile the release graph for *controller*.

    Parameters
    ----------
    controller:
        The controller every node delegates to.
    checkpointer:
        Optional LangGraph checkpointer.

    Returns
    -------
    CompiledStateGraph
        A compiled graph ready for ``.ainvoke()`` or ``.astream()``.
    """
    staging, production = Environment.STAGING, Environment.PRODUCTION
    graph = StateGraph(ReleaseState)

    graph.add_node("build", make_build_node(controller))
    graph.add_node("deploy_staging", make_deploy_node(controller, staging))
    graph.add_node("test_staging", make_test_node(controller, staging))
    graph.add_node("deploy_production", make_deploy_node(controller, production))
    graph.add_node("test_production", make_test_node(controller, production))
    graph.add_node("rollback_production", make_rollback_node(controller, production))

    graph.add_edge(START, "build")
    graph.add_conditional_edges(
        "build", should_continue, {"continue": "deploy_staging", "__end__": END}
    )
    graph.add_conditional_edges(
        "deploy_staging", should_continue, {"continue": "test_staging", "__end__": END}
    )
    graph.add_conditional_edges(
        "test_staging", should_continue, {"continue": "deploy_production", "__end__": END}
    )
    graph.add_conditional_edges(
        "deploy_production",
        after_production_deploy,
        {
            "test_production": "test_production",
            "rollback_production": "rollback_production",
            "__end__": END,
        },
    )
    graph.add_edge("test_production", END)
    graph.add_edge("rollback_production", END)

    compile_kwargs: dict[str, Any] = {}
    if checkpointer is not None:
        compile_kwargs["checkpointer"] = checkpointer
    return graph.compile(**compile_kwargs)


async def run_release(
    controller: PipelineController,
    source: str | None = None,
    rollback_on_failure: bool = True,
) -> dict[str, Any]:
    """Run one release through *controller* and return the final state."""
    app = build_release_graph(controller)
    initial: dict[str, Any] = {
        "source": source or "",
        "rollback_on_failure": rollback_on_failure,
        "outcomes": [],
        "failed_step": "",
    }
    return await app.ainvoke(initial)
