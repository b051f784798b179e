import csv
import json

import pytest

from annealnet.reporting.metrics import CsvSink, HistoryCapture, JsonlSink
from annealnet.reporting.plots import PlotAdapter
from annealnet.reporting.summary import compute_auc, summarise_search, write_summary
from annealnet.training.metrics import compute_metrics, default_metrics


def test_sinks_write_one_record_per_step(tmp_path):
    jsonl = JsonlSink(tmp_path / "m.jsonl", seed=3, sha="abc")
    csv_sink = CsvSink(tmp_path / "m.csv")
    for step, fitness in enumerate([2.0, 1.5, 0.5]):
        metrics = {"fitness": fitness, "multiplier": 2.0 / (step + 1), "note": "skip"}
        jsonl.on_step(step, metrics)
        csv_sink(step, metrics)

    records = [json.loads(line) for line in (tmp_path / "m.jsonl").read_text().splitlines()]
    assert [r["step"] for r in records] == [0, 1, 2]
    assert records[0] == {"step": 0, "split": "train", "seed": 3, "sha": "abc", "fitness": 2.0, "multiplier": 2.0}

    with (tmp_path / "m.csv").open() as handle:
        rows = list(csv.DictReader(handle))
    assert len(rows) == 3 and rows[-1]["fitness"] == "0.5"


def test_summary_is_deterministic(tmp_path):
    sink = JsonlSink(tmp_path / "metrics.jsonl", seed=1, sha="abc")
    for step in range(10):
        sink.on_step(step, {"fitness": 10.0 - step, "multiplier": 2.0 / (step + 1)})
    first = write_summary(sink.path, tmp_path / "a.json", tail=4)
    second = write_summary(sink.path, tmp_path / "b.json", tail=4)
    assert (tmp_path / "a.json").read_bytes() == (tmp_path / "b.json").read_bytes()

    summary = json.loads((tmp_path / "a.json").read_text())
    assert first.endswith("a.json") and second.endswith("b.json")
    assert summary["records"] == 10 and summary["tail_window"] == 4
    assert summary["first_fitness"] == 10.0 and summary["final_fitness"] == 1.0
    assert summary["best_fitness"] == 1.0 and summary["best_step"] == 9
    assert summary["fitness_drop"] == 9.0
    assert summary["tail_fitness_auc"] == pytest.approx(compute_auc([4.0, 3.0, 2.0, 1.0]))
    assert summary["multiplier_range"] == pytest.approx([2.0, 0.2])


def test_search_summary_tracks_best_iteration_and_selection_counts():
    records = [
        {"step": 0, "fitness": 3.0, "multiplier": 2.0, "replaced": 1.0, "improved": 1.0},
        {"step": 1, "fitness": 0.5, "multiplier": 1.0, "replaced": 1.0, "improved": 1.0},
        {"step": 2, "fitness": 0.9, "multiplier": 2 / 3, "replaced": 1.0, "improved": 0.0},
        {"step": 3, "fitness": float("inf"), "multiplier": 0.5, "replaced": 0.0, "improved": 0.0},
        {"step": 4, "fitness": 0.5, "multiplier": 0.4, "replaced": 1.0, "improved": 0.0},
    ]
    summary = summarise_search(records, tail=3)
    # the first of two equal minima is reported, the non-finite step is ignored
    assert summary["best_step"] == 1 and summary["best_fitness"] == 0.5
    assert summary["final_fitness"] == 0.5 and summary["fitness_drop"] == 2.5
    assert summary["replacements"] == 4 and summary["improving_iterations"] == 2
    assert summary["tail_fitness_auc"] == pytest.approx(compute_auc([0.9, 0.5]))


def test_search_summary_without_finite_fitness():
    summary = summarise_search([{"step": 0, "fitness": float("inf"), "replaced": 0.0}])
    assert summary["records"] == 1 and summary["replacements"] == 0
    assert summary["best_step"] is None and summary["final_fitness"] is None
    assert summarise_search([])["multiplier_range"] == []


def test_compute_auc_uses_unit_spacing():
    assert compute_auc([]) == 0.0
    assert compute_auc([5.0]) == 0.0
    assert compute_auc([4.0, 3.0, 2.0, 1.0]) == pytest.approx(7.5)


def test_plot_adapter_draws_search_trace(tmp_path):
    pytest.importorskip("matplotlib")
    disabled = PlotAdapter(tmp_path / "off")
    disabled.on_step(0, {"fitness": 1.0, "multiplier": 2.0})
    assert disabled.close() is None

    plots = PlotAdapter(tmp_path / "on", enable_plots=True)
    plots.on_step(0, {"fitness": float("inf"), "multiplier": 2.0})
    plots(1, {"fitness": 2.0, "multiplier": 1.0, "improved": 1.0})
    plots(2, {"fitness": 2.5, "multiplier": 2 / 3, "improved": 0.0})
    path = plots.close()
    assert path == tmp_path / "on" / "fitness.png" and path.exists()


def test_history_capture_series():
    capture = HistoryCapture()
    capture.on_step(0, {"fitness": 3.0})
    capture.on_step(1, {"fitness": 2.0, "improved": 1.0})
    assert capture.series("fitness") == [3.0, 2.0]
    assert capture.series("improved") == [1.0]
    assert capture.last == {"fitness": 2.0, "improved": 1.0}


def test_evaluation_metrics_round_predictions():
    predictions = [[0.9], [0.2], [0.4], [0.6]]
    targets = [[1], [0], [0], [0]]
    metrics = compute_metrics(default_metrics(), predictions, targets)
    assert metrics["sum_abs"] == pytest.approx(0.1 + 0.2 + 0.4 + 0.6)
    assert metrics["mae"] == pytest.approx(1.3 / 4)
    assert metrics["rounded_accuracy"] == pytest.approx(0.75)
    with pytest.raises(ValueError):
        compute_metrics(["r2"], predictions, targets)
