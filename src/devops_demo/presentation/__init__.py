"""Presentation layer for the DevOps pipeline simulator.

Provides the Rich console dashboard that renders the pipeline state::

    from devops_demo.presentation import ConsoleDashboard

    ConsoleDashboard().render(controller.state)
"""

from devops_demo.presentation.console import ConsoleDashboard

__all__ = ["ConsoleDashboard"]
