"""Building blocks of the annealed random search."""

from __future__ import annotations

from typing import Mapping, Protocol, Sequence, Tuple

import numpy as np

from .types import Array, Weights


class UniformSource(Protocol):
    """Anything exposing ``numpy.random.Generator.uniform``."""

    def uniform(self, low: float, high: float, size=None) -> Array:
        ...


def step_multiplier(iteration: int) -> float:
    """Perturbation half-width for a 0-indexed iteration."""

    return 2.0 / (iteration + 1)


def clone_weights(weights: Weights) -> Weights:
    return [np.array(layer, dtype=np.float64, copy=True) for layer in weights]


def perturb_weights(weights: Weights, multiplier: float, rng: UniformSource) -> None:
    """Add independent ``U(-multiplier, multiplier)`` noise to every weight in place."""

    for idx, layer in enumerate(weights):
        noise = rng.uniform(-multiplier, multiplier, size=layer.shape)
        weights[idx] = layer + noise


def spawn_population(
    seed_weights: Weights, population_size: int, multiplier: float, rng: UniformSource
) -> list[Weights]:
    population: list[Weights] = []
    for _ in range(max(0, population_size)):
        candidate = clone_weights(seed_weights)
        perturb_weights(candidate, multiplier, rng)
        population.append(candidate)
    return population


def select_best(
    current: Weights, candidates: Sequence[Weights], scores: Sequence[float]
) -> Tuple[Weights, float, bool]:
    """Return the candidate with the strictly smallest score.

    Ties keep the earliest candidate and NaN scores never win. When nothing
    wins ``current`` is returned unchanged and the flag is False.
    """

    best, best_score, replaced = current, float("inf"), False
    for candidate, score in zip(candidates, scores):
        if score < best_score:
            best, best_score, replaced = candidate, float(score), True
    return best, best_score, replaced


def emit_step(callbacks: Sequence[object], step: int, metrics: Mapping[str, float]) -> None:
    for callback in callbacks:
        if hasattr(callback, "on_step"):
            callback.on_step(step, metrics)  # type: ignore[attr-defined]
        elif callable(callback):
            callback(step, metrics)


__all__ = [
    "UniformSource",
    "clone_weights",
    "emit_step",
    "perturb_weights",
    "select_best",
    "spawn_population",
    "step_multiplier",
]
