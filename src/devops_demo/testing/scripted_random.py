"""Deterministic random source for tests and examples.

``ScriptedRandomSource`` replays a fixed sequence of draws so a test can
force a specific stub to fail or succeed without relying on a seed.
"""

from __future__ import annotations

from collections.abc import Iterable


class ScriptedRandomSource:
    """A ``RandomSource`` that returns pre-configured values.

    Usage::

        rng = ScriptedRandomSource([0.05, 0.9])
        # First draw 0.05 (below a 0.2 failure rate -> failure),
        # second draw 0.9 (success).  After exhausting the list it
        # cycles back to the start.
    """

    def __init__(self, values: Iterable[float]) -> None:
        self._values = [float(v) for v in values]
        if not self._values:
            raise ValueError("ScriptedRandomSource needs at least one value")
        for v in self._values:
            if not (0.0 <= v < 1.0):
                raise ValueError(f"scripted values must be in [0, 1), got {v}")
        self.calls = 0

    def random(self) -> float:
        value = self._values[self.calls % len(self._values)]
        self.calls += 1
        return value
