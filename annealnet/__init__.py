"""AnnealNet public API."""

from .core import activations, neuron, search, types  # noqa: F401
from .core.errors import (
    AnnealNetError,
    InvalidInputError,
    NotInitializedError,
    OutOfRangeError,
)
from .core.network import NeuralNetwork
from .core.neuron import SUM_RELU, SUM_TANH, NeuronUnit, get_unit, make_unit
from .training.pipelines import build_network, load_preset, presets, run_pipeline

__all__ = [
    "AnnealNetError",
    "InvalidInputError",
    "NeuralNetwork",
    "NeuronUnit",
    "NotInitializedError",
    "OutOfRangeError",
    "SUM_RELU",
    "SUM_TANH",
    "activations",
    "build_network",
    "get_unit",
    "load_preset",
    "make_unit",
    "neuron",
    "presets",
    "run_pipeline",
    "search",
    "types",
]
