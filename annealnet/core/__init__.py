"""Core network engine for AnnealNet."""

from . import activations, errors, neuron, search, types
from .network import NeuralNetwork

__all__ = ["NeuralNetwork", "activations", "errors", "neuron", "search", "types"]
