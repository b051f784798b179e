"""Core typing contracts for AnnealNet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Sequence

import numpy as np

Array = np.ndarray

# One ``(neurons, fan_in)`` matrix per layer, indexed ``[layer][neuron][input]``.
Weights = List[Array]

Aggregation = Callable[[Sequence[float], Sequence[float]], float]
Activation = Callable[[float], float]


@dataclass(frozen=True)
class ExampleBatch:
    """Labeled examples consumed by the random-search trainer."""

    inputs: Array
    targets: Array

    def __len__(self) -> int:
        return int(self.inputs.shape[0])


@dataclass(frozen=True)
class NetworkDescription:
    """Topology of a constructed network."""

    number_of_inputs: int
    number_of_outputs: int
    layer_sizes: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`annealnet.training.pipelines.run_pipeline`."""

    steps: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    final_fitness: float = float("nan")
    duration_ms: float = 0.0
