"""Stateless neuron units shared across network positions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Sequence, Tuple

from .activations import identity, relu, tanh, weighted_sum
from .types import Activation, Aggregation


@dataclass(frozen=True)
class NeuronUnit:
    """Pair of pure functions computing one scalar output.

    A unit holds no weights and no per-position state, so a single instance
    is placed by reference at every position that uses the same pattern.
    """

    aggregation: Aggregation
    activation: Activation

    def evaluate(self, inputs: Sequence[float], weights: Sequence[float]) -> float:
        return self.activation(self.aggregation(inputs, weights))


AGGREGATIONS: Dict[str, Aggregation] = {
    "weighted_sum": weighted_sum,
}

ACTIVATIONS: Dict[str, Activation] = {
    "relu": relu,
    "tanh": tanh,
    "identity": identity,
}

SUM_RELU = NeuronUnit(weighted_sum, relu)
SUM_TANH = NeuronUnit(weighted_sum, tanh)

_UNITS: Dict[str, NeuronUnit] = {
    "sum_relu": SUM_RELU,
    "sum_tanh": SUM_TANH,
}
_CACHE: Dict[Tuple[str, str], NeuronUnit] = {
    ("weighted_sum", "relu"): SUM_RELU,
    ("weighted_sum", "tanh"): SUM_TANH,
}


def _lookup(table: Dict[str, object], name: str, kind: str):
    if name not in table:
        available = ", ".join(sorted(table))
        raise KeyError(f"Unknown {kind} {name!r}. Available: {available}")
    return table[name]


def make_unit(aggregation: str = "weighted_sum", activation: str = "relu") -> NeuronUnit:
    """Return the shared unit for an ``(aggregation, activation)`` pair."""

    key = (aggregation, activation)
    if key not in _CACHE:
        _CACHE[key] = NeuronUnit(
            _lookup(AGGREGATIONS, aggregation, "aggregation"),
            _lookup(ACTIVATIONS, activation, "activation"),
        )
    return _CACHE[key]


def get_unit(name: str) -> NeuronUnit:
    return _lookup(_UNITS, name, "neuron unit")


def unit_names() -> Iterable[str]:
    return sorted(_UNITS)


__all__ = [
    "ACTIVATIONS",
    "AGGREGATIONS",
    "NeuronUnit",
    "SUM_RELU",
    "SUM_TANH",
    "get_unit",
    "make_unit",
    "unit_names",
]
