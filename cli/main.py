"""Command line entry point for AnnealNet runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from annealnet.config import config_hash, load_config_file, merge
from annealnet.training import pipelines


def _format_result(result, run_id: str | None = None) -> str:
    payload = {
        "steps": result.steps,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "final_fitness": result.final_fitness,
        "duration_ms": round(result.duration_ms, 3),
    }
    if getattr(result, "summary_path", ""):
        payload["summary"] = result.summary_path
    if run_id is not None:
        payload["run_id"] = run_id
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="and-not",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--seed", type=int, help="Seed for the search generator")
    parser.add_argument("--iterations", type=int, help="Number of search iterations")
    parser.add_argument("--population", type=int, help="Candidates per iteration")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write a fitness curve plot"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))
    from_file = False
    if args.config:
        override = load_config_file(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
            from_file = True
        else:
            config = merge(config, override)

    train_cfg = config.setdefault("train", {})
    if args.seed is not None:
        train_cfg["seed"] = int(args.seed)
    if args.iterations is not None:
        train_cfg["iterations"] = int(args.iterations)
    if args.population is not None:
        train_cfg["population"] = int(args.population)
    if args.enable_plots:
        train_cfg["enable_plots"] = True

    run_id: str | None = None
    if from_file and "sweep" not in config:
        run_id = config_hash(config)
        train_cfg["run_dir"] = str(Path(".artifacts") / run_id)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)

    if isinstance(result, list):
        for item in result:
            print(_format_result(item, run_id=run_id))
    else:
        print(_format_result(result, run_id=run_id))


if __name__ == "__main__":
    main()
