"""Headless-safe plot of the search trace."""

from __future__ import annotations

import math
from pathlib import Path
from typing import List


class PlotAdapter:
    """Record fitness and step width per iteration, draw ``fitness.png`` on close.

    Fitness goes on the left axis with improving iterations marked. The
    perturbation multiplier goes on a log-scaled right axis.
    """

    filename = "fitness.png"

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.run_dir = Path(run_dir)
        self.enable_plots = enable_plots
        self._steps: List[int] = []
        self._fitness: List[float] = []
        self._multiplier: List[float] = []
        self._improved: List[int] = []

    def on_step(self, step: int, metrics):
        if not self.enable_plots:
            return
        fitness = float(metrics.get("fitness", math.nan))
        if not math.isfinite(fitness):
            return
        if float(metrics.get("improved", 0.0)) > 0.0:
            self._improved.append(len(self._steps))
        self._steps.append(int(step))
        self._fitness.append(fitness)
        self._multiplier.append(float(metrics.get("multiplier", math.nan)))

    __call__ = on_step

    def close(self) -> Path | None:
        if not self.enable_plots or not self._steps:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt

        fig, fitness_ax = plt.subplots(figsize=(7, 4))
        fitness_ax.plot(self._steps, self._fitness, color="tab:blue", label="fitness")
        if self._improved:
            fitness_ax.scatter(
                [self._steps[i] for i in self._improved],
                [self._fitness[i] for i in self._improved],
                s=10,
                color="tab:green",
                label="improved",
                zorder=3,
            )
        best = min(range(len(self._fitness)), key=self._fitness.__getitem__)
        fitness_ax.annotate(
            f"best {self._fitness[best]:.4g} @ {self._steps[best]}",
            (self._steps[best], self._fitness[best]),
            textcoords="offset points",
            xytext=(0, 8),
            ha="center",
            fontsize=8,
        )
        fitness_ax.set_xlabel("Iteration")
        fitness_ax.set_ylabel("Summed absolute error")

        multiplier_ax = fitness_ax.twinx()
        multiplier_ax.plot(
            self._steps, self._multiplier, color="tab:orange", linestyle="--", label="multiplier"
        )
        multiplier_ax.set_yscale("log")
        multiplier_ax.set_ylabel("Perturbation half-width")

        handles, labels = fitness_ax.get_legend_handles_labels()
        extra_handles, extra_labels = multiplier_ax.get_legend_handles_labels()
        fitness_ax.legend(handles + extra_handles, labels + extra_labels, loc="upper right")
        fig.tight_layout()

        self.run_dir.mkdir(parents=True, exist_ok=True)
        plot_path = self.run_dir / self.filename
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path
