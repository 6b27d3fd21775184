"""Injectable random sources for failure injection and metric sampling.

The backend only needs uniform draws from ``[0, 1)``, so the protocol is a
single ``random()`` method.  The default source wraps a NumPy
``Generator``; pass a seed to make a run reproducible.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class RandomSource(Protocol):
    """Anything that yields uniform floats in ``[0, 1)``."""

    def random(self) -> float: ...


class NumpyRandomSource:
    """``RandomSource`` backed by ``numpy.random.default_rng``.

    Parameters
    ----------
    seed:
        Seed for the generator.  ``None`` draws fresh OS entropy, which is
        what normal (non-test) runs use.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._seed = seed
        self._rng = np.random.default_rng(seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    def random(self) -> float:
        return float(self._rng.random())

    def __repr__(self) -> str:
        return f"NumpyRandomSource(seed={self._seed!r})"


def make_random_source(seed: int | None = None) -> RandomSource:
    """Return the default random source for *seed*."""
    return NumpyRandomSource(seed)
