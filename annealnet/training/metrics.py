"""Evaluation metrics computed on a trained network's predictions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List

import numpy as np

from ..core.types import Array


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def default_metrics() -> List[str]:
    return ["sum_abs", "mae", "rmse", "rounded_accuracy"]


def compute_metric(name: str, predictions: Array, targets: Array) -> MetricResult:
    key = name.lower()
    preds = np.asarray(predictions, dtype=np.float64)
    targs = np.asarray(targets, dtype=np.float64)
    if key == "sum_abs":
        value = float(np.sum(np.abs(preds - targs)))
    elif key == "mae":
        value = float(np.mean(np.abs(preds - targs))) if preds.size else 0.0
    elif key == "rmse":
        value = float(np.sqrt(np.mean((preds - targs) ** 2))) if preds.size else 0.0
    elif key == "rounded_accuracy":
        # An example counts as correct when every rounded output matches.
        if preds.shape[0] == 0:
            value = 0.0
        else:
            hits = np.all(np.round(preds) == np.round(targs), axis=1)
            value = float(np.mean(hits))
    else:
        raise ValueError(f"Unknown metric: {name}")
    return MetricResult(key, value)


def compute_metrics(names: Iterable[str], predictions: Array, targets: Array) -> Dict[str, float]:
    results: Dict[str, float] = {}
    for name in names:
        metric = compute_metric(name, predictions, targets)
        results[metric.name] = metric.value
    return results


__all__ = ["MetricResult", "compute_metric", "compute_metrics", "default_metrics"]
