"""Example batches for AnnealNet runs."""

from .registry import (
    BatchSpec,
    available_batches,
    from_config,
    get_batch,
    make_batch,
    register_batch,
)

__all__ = [
    "BatchSpec",
    "available_batches",
    "from_config",
    "get_batch",
    "make_batch",
    "register_batch",
]
