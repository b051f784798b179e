"""Exceptions raised at the network boundary."""

from __future__ import annotations


class AnnealNetError(Exception):
    """Base class for AnnealNet errors."""


class OutOfRangeError(AnnealNetError, IndexError):
    """A structural operation referenced a layer that does not exist."""


class InvalidInputError(AnnealNetError, ValueError):
    """Input length or output topology does not match the network."""


class NotInitializedError(AnnealNetError, RuntimeError):
    """The network was used before ``initialize_weights`` was called."""


__all__ = [
    "AnnealNetError",
    "InvalidInputError",
    "NotInitializedError",
    "OutOfRangeError",
]
