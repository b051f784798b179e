"""Search summaries built from the per-iteration JSONL metrics."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Mapping, Sequence

import numpy as np


def compute_auc(points: Sequence[float]) -> float:
    """Trapezoid area under ``points`` with unit spacing between iterations."""

    y = np.asarray(points, dtype=np.float64)
    if y.size < 2:
        return 0.0
    return float(np.sum((y[1:] + y[:-1]) * 0.5))


def load_records(path: str | Path) -> List[Mapping[str, object]]:
    path = Path(path)
    if not path.exists():
        return []
    with path.open() as handle:
        return [json.loads(line) for line in handle if line.strip()]


def _flag_count(records: Sequence[Mapping[str, object]], name: str) -> int:
    return int(sum(1 for record in records if float(record.get(name, 0.0) or 0.0) > 0.0))


def summarise_search(records: Sequence[Mapping[str, object]], tail: int = 32) -> Mapping[str, object]:
    """Condense a search trace into best/final fitness and selection counts.

    Iterations that installed nothing report infinite fitness; they count
    towards ``records`` but not towards the fitness statistics.
    """

    steps = np.asarray([int(r.get("step", i)) for i, r in enumerate(records)], dtype=np.int64)
    fitness = np.asarray([float(r.get("fitness", np.nan)) for r in records], dtype=np.float64)
    finite = np.isfinite(fitness)
    window = min(int(tail), len(records))

    summary: dict[str, object] = {
        "version": 2,
        "records": len(records),
        "tail_window": window,
        "replacements": _flag_count(records, "replaced"),
        "improving_iterations": _flag_count(records, "improved"),
        "best_fitness": None,
        "best_step": None,
        "first_fitness": None,
        "final_fitness": None,
        "fitness_drop": None,
        "tail_fitness_auc": 0.0,
    }
    if finite.any():
        trace = fitness[finite]
        best = int(np.flatnonzero(finite)[int(np.argmin(trace))])
        summary.update(
            best_fitness=float(fitness[best]),
            best_step=int(steps[best]),
            first_fitness=float(trace[0]),
            final_fitness=float(trace[-1]),
            fitness_drop=float(trace[0] - trace[-1]),
        )
        if window:
            tail_values = fitness[-window:]
            summary["tail_fitness_auc"] = compute_auc(tail_values[np.isfinite(tail_values)])

    multipliers = [float(r["multiplier"]) for r in records if "multiplier" in r]
    summary["multiplier_range"] = [max(multipliers), min(multipliers)] if multipliers else []
    return summary


def write_summary(
    metrics_jsonl: str | Path, out_summary_json: str | Path, *, tail: int = 32
) -> str:
    """Write the search summary of ``metrics_jsonl`` as sorted JSON."""

    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = summarise_search(load_records(metrics_jsonl), tail)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["compute_auc", "load_records", "summarise_search", "write_summary"]
