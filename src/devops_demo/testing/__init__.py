"""Public testing utilities for the DevOps pipeline simulator.

Provides a scripted random source for writing deterministic tests and
examples without depending on a seed.
"""

from devops_demo.testing.scripted_random import ScriptedRandomSource

__all__ = ["ScriptedRandomSource"]
