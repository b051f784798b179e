"""Registry of labeled example batches."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, MutableMapping, Sequence

import numpy as np

from ..core.types import ExampleBatch


@dataclass(frozen=True)
class BatchSpec:
    """A named example batch together with its provenance.

    Attributes
    ----------
    name:
        Registry identifier, or ``"inline"`` for batches given in a config.
    batch:
        The examples themselves.
    provenance:
        Free-form metadata recorded in run manifests.
    """

    name: str
    batch: ExampleBatch
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def d_in(self) -> int:
        return int(self.batch.inputs.shape[1])

    @property
    def d_out(self) -> int:
        return int(self.batch.targets.shape[1])


BatchFactory = Callable[..., BatchSpec]

_REGISTRY: MutableMapping[str, BatchFactory] = {}


def register_batch(
    name: str | None = None,
    factory: BatchFactory | None = None,
) -> Callable[[BatchFactory], BatchFactory] | BatchFactory:
    """Register a batch factory, either as a decorator or directly."""

    def _decorator(func: BatchFactory) -> BatchFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_batch requires a name when used without a decorator")
    return _decorator


def make_batch(
    inputs: Sequence[Sequence[float]], targets: Sequence[Sequence[float]]
) -> ExampleBatch:
    x = np.asarray(inputs, dtype=np.float64)
    y = np.asarray(targets, dtype=np.float64)
    if x.ndim != 2 or y.ndim != 2:
        raise ValueError("inputs and targets must both be 2-D (examples x features)")
    if x.shape[0] != y.shape[0]:
        raise ValueError(
            f"inputs has {x.shape[0]} examples but targets has {y.shape[0]}"
        )
    return ExampleBatch(inputs=x, targets=y)


def get_batch(name: str, **options: Any) -> BatchSpec:
    if name not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown example batch {name!r}. Available: {available}")
    return _REGISTRY[name](**options)


def from_config(data_cfg: Mapping[str, Any]) -> BatchSpec:
    """Resolve a ``data`` config section to a :class:`BatchSpec`."""

    if "inputs" in data_cfg or "targets" in data_cfg:
        batch = make_batch(data_cfg.get("inputs", []), data_cfg.get("targets", []))
        return BatchSpec(name="inline", batch=batch, provenance={"type": "inline", "examples": len(batch)})
    if "name" not in data_cfg:
        raise KeyError("data config needs either `name` or `inputs`/`targets`")
    return get_batch(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))


def available_batches() -> Iterable[str]:
    return sorted(_REGISTRY)


def _truth_table(name: str, inputs, targets) -> BatchFactory:
    def _factory(**_: object) -> BatchSpec:
        batch = make_batch(inputs, targets)
        return BatchSpec(
            name=name,
            batch=batch,
            provenance={"type": "truth_table", "name": name, "examples": len(batch)},
        )

    return _factory


# ``x0 and not x1``; the [0, 1] row appears twice.
register_batch(
    "and-not",
    _truth_table("and-not", [[1, 0], [0, 1], [0, 1], [1, 1]], [[1], [0], [0], [0]]),
)
register_batch(
    "xor",
    _truth_table("xor", [[0, 0], [0, 1], [1, 0], [1, 1]], [[0], [1], [1], [0]]),
)
register_batch(
    "or",
    _truth_table("or", [[0, 0], [0, 1], [1, 0], [1, 1]], [[0], [1], [1], [1]]),
)
register_batch(
    "and",
    _truth_table("and", [[0, 0], [0, 1], [1, 0], [1, 1]], [[0], [0], [0], [1]]),
)


__all__ = [
    "BatchSpec",
    "available_batches",
    "from_config",
    "get_batch",
    "make_batch",
    "register_batch",
]
