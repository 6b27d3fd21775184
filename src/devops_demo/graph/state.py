"""LangGraph state definition for the release flow.

``ReleaseState`` is the ``TypedDict`` that flows through the release
``StateGraph``.  ``outcomes`` is append-only (``Annotated[list,
operator.add]``) so each node adds its ``StepOutcome`` without overwriting
earlier ones.

Note: no ``from __future__ import annotations`` here; LangGraph resolves
the type hints at runtime.
"""

import operator
from typing import Annotated, TypedDict

from devops_demo.domain.values import StepOutcome


class ReleaseState(TypedDict, total=False):
    """State carried between release steps.

    Keys
    ----
    source:
        Source text to build.  Empty or missing means the controller's
        current source.
    rollback_on_failure:
        Roll production back when the production deploy fails.
    outcomes:
        Every step's ``StepOutcome`` in execution order.
    failed_step:
        Name of the node whose step failed, if any.
    """

    source: str
    rollback_on_failure: bool
    outcomes: Annotated[list[StepOutcome], operator.add]
    failed_step: str
