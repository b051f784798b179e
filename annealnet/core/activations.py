"""Aggregation and activation functions for neuron units."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def weighted_sum(inputs: Sequence[float], weights: Sequence[float]) -> float:
    """Dot product over the overlapping prefix of ``inputs`` and ``weights``.

    Mismatched lengths are tolerated: only the first
    ``min(len(inputs), len(weights))`` terms contribute.
    """

    n = min(len(inputs), len(weights))
    if n == 0:
        return 0.0
    x = np.asarray(inputs[:n], dtype=np.float64)
    w = np.asarray(weights[:n], dtype=np.float64)
    return float(np.dot(x, w))


def relu(x: float) -> float:
    """Return the rectifier ``max(x, 0)``."""

    return float(np.maximum(x, 0.0))


def tanh(x: float) -> float:
    """Return the saturating activation ``tanh(x)``."""

    return float(np.tanh(x))


def identity(x: float) -> float:
    return float(x)
