"""Pipeline assembly: config -> network -> annealed search -> reports."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np

from ..config import load_config_file
from ..core.network import NeuralNetwork
from ..core.neuron import NeuronUnit, get_unit, make_unit
from ..core.types import RunResult
from ..data import registry
from ..reporting.artifacts import write_json, write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .metrics import compute_metrics, default_metrics

_PRESETS: Dict[str, Mapping[str, object]] = {
    "and-not": {
        "data": {"name": "and-not"},
        "model": {
            "d_in": 2,
            "d_out": 1,
            "layers": [
                {"unit": "sum_relu", "count": 2},
                {"unit": "sum_relu", "count": 1},
            ],
            "initial_weight": 0.0,
        },
        "train": {
            "iterations": 300,
            "population": 16,
            "seed": 7,
            "run_dir": "runs/and-not",
            "enable_plots": False,
        },
    },
    "and-not-single-shot": {
        "data": {"name": "and-not"},
        "model": {
            "d_in": 2,
            "d_out": 1,
            "layers": [
                {"unit": "sum_relu", "count": 2},
                {"unit": "sum_relu", "count": 1},
            ],
            "initial_weight": 0.0,
        },
        "train": {
            "iterations": 1,
            "population": 4000,
            "seed": 7,
            "run_dir": "runs/and-not-single-shot",
            "enable_plots": False,
        },
    },
    "xor-tanh": {
        "data": {"name": "xor"},
        "model": {
            "d_in": 2,
            "d_out": 1,
            "layers": [
                {"unit": "sum_tanh", "count": 3},
                {"aggregation": "weighted_sum", "activation": "identity", "count": 1},
            ],
            "initial_weight": 0.0,
        },
        "train": {
            "iterations": 400,
            "population": 24,
            "seed": 11,
            "run_dir": "runs/xor-tanh",
            "enable_plots": False,
        },
    },
    "or-relu": {
        "data": {"name": "or"},
        "model": {
            "d_in": 2,
            "d_out": 1,
            "layers": [{"unit": "sum_relu", "count": 1}],
            "initial_weight": 0.0,
        },
        "train": {
            "iterations": 100,
            "population": 8,
            "seed": 3,
            "run_dir": "runs/or-relu",
            "enable_plots": False,
        },
    },
    "and-not-population-sweep": {
        "sweep": {"seeds": [0, 1], "populations": [4, 16]},
        "data": {"name": "and-not"},
        "model": {
            "d_in": 2,
            "d_out": 1,
            "layers": [
                {"unit": "sum_relu", "count": 2},
                {"unit": "sum_relu", "count": 1},
            ],
        },
        "train": {"iterations": 100, "run_dir": "runs/sweep", "enable_plots": False},
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = load_config_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def run_pipeline(config: Mapping[str, object]) -> RunResult | List[RunResult]:
    if "sweep" in config:
        return _run_sweep(config)
    return _train_single(config)


def resolve_unit(layer_cfg: Mapping[str, object]) -> NeuronUnit:
    if "unit" in layer_cfg:
        return get_unit(str(layer_cfg["unit"]))
    return make_unit(
        str(layer_cfg.get("aggregation", "weighted_sum")),
        str(layer_cfg.get("activation", "relu")),
    )


def build_network(model_cfg: Mapping[str, object]) -> NeuralNetwork:
    """Construct and initialise a network from a ``model`` config section."""

    layers = list(model_cfg.get("layers", []))
    if not layers:
        raise ValueError("model config must define at least one layer")
    network = NeuralNetwork(int(model_cfg.get("d_in", 1)), int(model_cfg.get("d_out", 1)))
    for layer_cfg in layers:
        index = network.create_layer()
        network.add_neurons(index, resolve_unit(layer_cfg), int(layer_cfg.get("count", 1)))
    network.initialize_weights(float(model_cfg.get("initial_weight", 0.0)))
    return network


def _run_sweep(config: Mapping[str, object]) -> List[RunResult]:
    sweep_cfg = config["sweep"]
    base_dir = Path(str(config.get("train", {}).get("run_dir", "runs/sweep")))
    results: List[RunResult] = []
    for population in sweep_cfg.get("populations", [config.get("train", {}).get("population", 8)]):
        for seed in sweep_cfg.get("seeds", [0]):
            cfg = deepcopy(dict(config))
            cfg.pop("sweep", None)
            train_cfg = cfg.setdefault("train", {})
            train_cfg.update({"population": int(population), "seed": int(seed)})
            train_cfg["run_dir"] = str(base_dir / f"pop{int(population)}-seed{int(seed)}")
            results.append(_train_single(cfg))
    return results


def _train_single(config: Mapping[str, object]) -> RunResult:
    batch_spec = registry.from_config(dict(config["data"]))
    model_cfg = dict(config["model"])
    train_cfg = dict(config.get("train", {}))

    d_in = int(model_cfg.setdefault("d_in", batch_spec.d_in))
    d_out = int(model_cfg.setdefault("d_out", batch_spec.d_out))
    if batch_spec.d_in != d_in:
        raise ValueError(f"Configured d_in={d_in} but batch has {batch_spec.d_in} inputs")
    if batch_spec.d_out != d_out:
        raise ValueError(f"Configured d_out={d_out} but batch has {batch_spec.d_out} targets")

    network = build_network(model_cfg)
    iterations = int(train_cfg.get("iterations", 100))
    population = int(train_cfg.get("population", 8))
    seed = int(train_cfg.get("seed", 0))

    run_dir = _resolve_run_dir(train_cfg, batch_spec.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        batch=batch_spec.name,
        examples=len(batch_spec.batch),
        layer_sizes=network.layer_sizes,
        iterations=iterations,
        population=population,
        seed=seed,
        param_count=network.parameter_count(),
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="train", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split="train")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))

    inputs = batch_spec.batch.inputs
    targets = batch_spec.batch.targets
    started = time.perf_counter()
    network.train(
        iterations,
        population,
        inputs,
        targets,
        rng=np.random.default_rng(seed),
        callbacks=[jsonl, csv_sink, plots],
    )
    duration_ms = (time.perf_counter() - started) * 1000.0
    plots.close()

    predictions = network.evaluate_batch(inputs)
    eval_metrics = compute_metrics(default_metrics(), predictions, targets)
    write_json(
        run_dir / "predictions.json",
        {
            "examples": _describe_predictions(inputs, targets, predictions),
            "metrics": eval_metrics,
        },
    )

    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        batch_provenance=batch_spec.provenance,
        network={
            "layer_sizes": network.layer_sizes,
            "parameters": network.parameter_count(),
        },
    )
    summary_path = write_summary(
        jsonl.path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 32))
    )
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    print(f"Trained in {duration_ms:.1f}ms, fitness {eval_metrics['sum_abs']:.4f}")

    return RunResult(
        steps=iterations,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=str(summary_path),
        final_fitness=eval_metrics["sum_abs"],
        duration_ms=duration_ms,
    )


def _describe_predictions(inputs, targets, predictions) -> List[Mapping[str, object]]:
    rows = []
    for x, y, p in zip(inputs, targets, predictions):
        rows.append(
            {
                "inputs": [float(v) for v in x],
                "targets": [float(v) for v in y],
                "outputs": [float(v) for v in p],
                "rounded": [int(round(float(v))) for v in p],
            }
        )
    return rows


def _resolve_run_dir(train_cfg: Mapping[str, object], batch: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / batch


def _print_startup_summary(
    *,
    batch: str,
    examples: int,
    layer_sizes: Sequence[int],
    iterations: int,
    population: int,
    seed: int,
    param_count: int,
) -> None:
    print("=== AnnealNet run ===")
    print(f"Examples      : {batch} ({examples})")
    print(f"Layer sizes   : {list(layer_sizes)}")
    print(f"Iterations    : {iterations}")
    print(f"Population    : {population}")
    print(f"Seed          : {seed}")
    print(f"Parameters    : {param_count}")
    print("=====================")


__all__ = ["build_network", "load_preset", "presets", "resolve_unit", "run_pipeline"]
