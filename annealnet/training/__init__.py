"""Training pipelines and evaluation metrics."""

from .metrics import compute_metrics, default_metrics
from .pipelines import build_network, load_preset, presets, run_pipeline

__all__ = [
    "build_network",
    "compute_metrics",
    "default_metrics",
    "load_preset",
    "presets",
    "run_pipeline",
]
