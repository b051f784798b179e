"""Layered feed-forward network with annealed random-search training."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .errors import InvalidInputError, NotInitializedError, OutOfRangeError
from .neuron import NeuronUnit
from .search import (
    UniformSource,
    clone_weights,
    emit_step,
    select_best,
    spawn_population,
    step_multiplier,
)
from .types import Array, NetworkDescription, Weights


class NeuralNetwork:
    """Feed-forward network built layer by layer from shared neuron units.

    Weights live only here, one ``(neurons, fan_in)`` matrix per layer, so
    ``weights[i][j][k]`` is the weight neuron ``j`` of layer ``i`` applies to
    input ``k`` of the previous layer (or of the external input for layer 0).
    """

    def __init__(self, number_of_inputs: int = 1, number_of_outputs: int = 1) -> None:
        self.number_of_inputs = int(number_of_inputs)
        self.number_of_outputs = int(number_of_outputs)
        self.layers: List[List[NeuronUnit]] = []
        self._weights: Weights | None = None

    # ------------------------------------------------------------------
    # Construction

    def create_layer(self) -> int:
        self.layers.append([])
        return len(self.layers) - 1

    def add_neurons(self, layer_index: int, unit: NeuronUnit, count: int) -> None:
        if not 0 <= layer_index < len(self.layers):
            raise OutOfRangeError(
                f"Layer {layer_index} does not exist (network has {len(self.layers)})"
            )
        self.layers[layer_index].extend([unit] * max(0, int(count)))

    def initialize_weights(self, initial_value: float = 0.0) -> None:
        weights: Weights = []
        fan_in = self.number_of_inputs
        for layer in self.layers:
            weights.append(np.full((len(layer), fan_in), float(initial_value), dtype=np.float64))
            fan_in = len(layer)
        self._weights = weights

    @property
    def layer_sizes(self) -> List[int]:
        return [len(layer) for layer in self.layers]

    def describe(self) -> NetworkDescription:
        return NetworkDescription(
            number_of_inputs=self.number_of_inputs,
            number_of_outputs=self.number_of_outputs,
            layer_sizes=self.layer_sizes,
        )

    def parameter_count(self) -> int:
        fan_ins = [self.number_of_inputs] + self.layer_sizes[:-1]
        return int(sum(n * f for n, f in zip(self.layer_sizes, fan_ins)))

    # ------------------------------------------------------------------
    # Weights

    @property
    def weights(self) -> Weights:
        return self._require_weights()

    def clone_weights(self) -> Weights:
        return clone_weights(self._require_weights())

    def set_weights(self, weights: Sequence[Sequence[Sequence[float]]]) -> None:
        """Install ``weights`` wholesale after checking its shape."""

        try:
            candidate = [np.array(layer, dtype=np.float64) for layer in weights]
        except ValueError as exc:
            raise InvalidInputError(f"Weights are not rectangular per layer: {exc}") from exc
        if len(candidate) != len(self.layers):
            raise InvalidInputError(
                f"Expected weights for {len(self.layers)} layers, got {len(candidate)}"
            )
        fan_in = self.number_of_inputs
        for idx, (layer, matrix) in enumerate(zip(self.layers, candidate)):
            expected = (len(layer), fan_in)
            if matrix.size == 0 and 0 in expected:
                # ``[]`` and ``[[]]`` both describe an empty layer
                matrix = candidate[idx] = np.zeros(expected, dtype=np.float64)
            if matrix.shape != expected:
                raise InvalidInputError(
                    f"Layer {idx} weights have shape {matrix.shape}, expected {expected}"
                )
            fan_in = len(layer)
        self._weights = candidate

    # ------------------------------------------------------------------
    # Evaluation

    def can_evaluate(self, inputs: Sequence[float]) -> bool:
        if len(inputs) != self.number_of_inputs or not self.layers:
            return False
        return len(self.layers[-1]) == self.number_of_outputs

    def evaluate(self, inputs: Sequence[float]) -> Array:
        if not self.can_evaluate(inputs):
            raise InvalidInputError(
                f"Cannot evaluate {len(inputs)} inputs on a network expecting "
                f"{self.number_of_inputs} inputs and {self.number_of_outputs} outputs "
                f"(layer sizes {self.layer_sizes})"
            )
        return self._forward(inputs, self._require_weights())

    def evaluate_batch(self, inputs: Sequence[Sequence[float]]) -> Array:
        rows = [self.evaluate(x) for x in inputs]
        if not rows:
            return np.zeros((0, self.number_of_outputs), dtype=np.float64)
        return np.stack(rows)

    def fitness(self, inputs: Sequence[Sequence[float]], targets: Sequence[Sequence[float]]) -> float:
        """Summed absolute error of the active weights over a batch."""

        self._check_batch(inputs, targets)
        return self._fitness(self._require_weights(), inputs, targets)

    def _forward(self, inputs: Sequence[float], weights: Weights) -> Array:
        previous = np.asarray(inputs, dtype=np.float64)
        for layer, matrix in zip(self.layers, weights):
            outputs = np.empty(len(layer), dtype=np.float64)
            for j, unit in enumerate(layer):
                outputs[j] = unit.evaluate(previous, matrix[j])
            previous = outputs
        return previous

    def _fitness(
        self,
        weights: Weights,
        inputs: Sequence[Sequence[float]],
        targets: Sequence[Sequence[float]],
    ) -> float:
        total = 0.0
        for x, y in zip(inputs, targets):
            produced = self._forward(x, weights)
            # Only the overlapping output positions are compared
            expected = np.asarray(y, dtype=np.float64).reshape(-1)[: len(produced)]
            total += float(np.sum(np.abs(produced[: len(expected)] - expected)))
        return total

    # ------------------------------------------------------------------
    # Training

    def train(
        self,
        iterations: int,
        population_size: int,
        inputs: Sequence[Sequence[float]],
        targets: Sequence[Sequence[float]],
        *,
        rng: UniformSource | None = None,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        """Improve the weights by annealed mutate-and-select search.

        Each iteration ``t`` perturbs ``population_size`` copies of the
        current weights by uniform noise of half-width ``2 / (t + 1)`` and
        keeps the copy with the smallest summed absolute error. The schedule
        restarts at ``t = 0`` on every call.

        Callbacks get ``fitness`` and ``multiplier`` per iteration, plus
        ``replaced`` (a candidate was installed) and ``improved`` (the
        installed candidate scores below the weights it replaced).
        """

        self._check_batch(inputs, targets)
        current = self._require_weights()
        rng = rng if rng is not None else np.random.default_rng()
        callbacks = list(callbacks or [])
        active_score = self._fitness(current, inputs, targets)

        for t in range(int(iterations)):
            multiplier = step_multiplier(t)
            population = spawn_population(current, population_size, multiplier, rng)
            scores = [self._fitness(candidate, inputs, targets) for candidate in population]
            current, best_score, replaced = select_best(current, population, scores)
            self._weights = current
            improved = replaced and best_score < active_score
            if replaced:
                active_score = best_score
            emit_step(
                callbacks,
                t,
                {
                    "fitness": best_score,
                    "multiplier": multiplier,
                    "replaced": 1.0 if replaced else 0.0,
                    "improved": 1.0 if improved else 0.0,
                },
            )

    # ------------------------------------------------------------------
    # Internal helpers

    def _check_batch(
        self, inputs: Sequence[Sequence[float]], targets: Sequence[Sequence[float]]
    ) -> None:
        first = inputs[0] if len(inputs) else []
        if not self.can_evaluate(first):
            raise InvalidInputError(
                f"First example has {len(first)} inputs; network expects "
                f"{self.number_of_inputs} inputs and {self.number_of_outputs} outputs "
                f"(layer sizes {self.layer_sizes})"
            )
        first_target = targets[0] if len(targets) else []
        if len(first_target) != self.number_of_outputs:
            raise InvalidInputError(
                f"First target has {len(first_target)} values; network produces "
                f"{self.number_of_outputs} outputs"
            )

    def _require_weights(self) -> Weights:
        if self._weights is None:
            raise NotInitializedError("Call initialize_weights() before using the network")
        if len(self._weights) != len(self.layers):
            raise NotInitializedError(
                f"Weights cover {len(self._weights)} layers but the network has "
                f"{len(self.layers)}; call initialize_weights() again"
            )
        fan_in = self.number_of_inputs
        for idx, (layer, matrix) in enumerate(zip(self.layers, self._weights)):
            if matrix.shape != (len(layer), fan_in):
                raise NotInitializedError(
                    f"Layer {idx} weights have shape {matrix.shape} but the layer needs "
                    f"{(len(layer), fan_in)}; call initialize_weights() again"
                )
            fan_in = len(layer)
        return self._weights


__all__ = ["NeuralNetwork"]
