import json
from pathlib import Path

import pytest

from annealnet.training import pipelines


def _config(run_dir, iterations=20):
    return {
        "data": {"name": "or"},
        "model": {
            "d_in": 2,
            "d_out": 1,
            "layers": [{"unit": "sum_relu", "count": 1}],
            "initial_weight": 0.0,
        },
        "train": {
            "iterations": iterations,
            "population": 6,
            "seed": 11,
            "run_dir": str(run_dir),
            "enable_plots": False,
        },
    }


def test_pipeline_produces_artifacts(tmp_path):
    config = _config(tmp_path / "run")
    result = pipelines.run_pipeline(config)

    run_dir = tmp_path / "run"
    assert result.steps == 20
    assert Path(result.metrics_path).exists()
    assert (run_dir / "metrics.csv").exists()
    assert (run_dir / "config.json").exists()

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["train"]["seed"] == 11
    assert manifest["data"]["name"] == "or"
    assert manifest["network"]["layer_sizes"] == [1]

    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines() if line]
    assert len(records) == 20
    first = records[0]
    assert first["split"] == "train" and first["step"] == 0
    assert {"sha", "seed", "fitness", "multiplier", "replaced", "improved"} <= set(first)
    assert result.final_fitness == pytest.approx(records[-1]["fitness"])

    predictions = json.loads((run_dir / "predictions.json").read_text())
    assert len(predictions["examples"]) == 4
    assert set(predictions["metrics"]) == {"sum_abs", "mae", "rmse", "rounded_accuracy"}

    summary = json.loads(Path(result.summary_path).read_text())
    assert summary["records"] == 20
    assert summary["final_fitness"] == pytest.approx(result.final_fitness)
    assert summary["best_fitness"] <= summary["final_fitness"]
    assert summary["replacements"] == sum(r["replaced"] for r in records)
    assert summary["improving_iterations"] == sum(r["improved"] for r in records)
    assert summary["best_step"] == min(range(20), key=lambda i: records[i]["fitness"])


def test_pipeline_is_deterministic_per_seed(tmp_path):
    first = pipelines.run_pipeline(_config(tmp_path / "a"))
    second = pipelines.run_pipeline(_config(tmp_path / "b"))
    assert Path(first.metrics_path).read_bytes() == Path(second.metrics_path).read_bytes()
    assert Path(first.summary_path).read_bytes() == Path(second.summary_path).read_bytes()


def test_inline_batch_infers_dimensions(tmp_path):
    config = {
        "data": {"inputs": [[1.0], [2.0], [3.0]], "targets": [[2.0], [4.0], [6.0]]},
        "model": {"layers": [{"activation": "identity", "count": 1}]},
        "train": {"iterations": 30, "population": 8, "seed": 0, "run_dir": str(tmp_path)},
    }
    result = pipelines.run_pipeline(config)
    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["data"]["type"] == "inline"
    assert manifest["network"]["parameters"] == 1


def test_pipeline_rejects_mismatched_dimensions(tmp_path):
    config = _config(tmp_path)
    config["model"]["d_in"] = 3
    with pytest.raises(ValueError, match="d_in"):
        pipelines.run_pipeline(config)

    config = _config(tmp_path)
    config["data"] = {"name": "parity"}
    with pytest.raises(KeyError, match="and-not"):
        pipelines.run_pipeline(config)


def test_population_sweep_runs_each_combination(tmp_path):
    config = pipelines.load_preset("and-not-population-sweep")
    config["train"]["iterations"] = 5
    config["train"]["run_dir"] = str(tmp_path / "sweep")
    results = pipelines.run_pipeline(config)
    assert len(results) == 4
    dirs = sorted(p.name for p in (tmp_path / "sweep").iterdir())
    assert dirs == ["pop16-seed0", "pop16-seed1", "pop4-seed0", "pop4-seed1"]


def test_presets_include_builtin_and_file_presets():
    names = set(pipelines.presets())
    assert {"and-not", "and-not-single-shot", "xor-tanh", "or-relu", "and-tanh"} <= names
    preset = pipelines.load_preset("and-not")
    preset["train"]["iterations"] = 1
    assert pipelines.load_preset("and-not")["train"]["iterations"] == 300
    with pytest.raises(KeyError):
        pipelines.load_preset("missing")


def test_plots_are_written_when_enabled(tmp_path):
    pytest.importorskip("matplotlib")
    config = _config(tmp_path / "plots", iterations=5)
    config["train"]["enable_plots"] = True
    pipelines.run_pipeline(config)
    assert (tmp_path / "plots" / "fitness.png").exists()
