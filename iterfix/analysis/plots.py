"""Visualization utilities for benchmark outputs.

Overview
--------
Plotting helpers that generate PNG charts from the aggregated results
produced by the benchmark pipeline. Every function writes into ``out_dir``
and returns the path of the file it created.

Chart map
---------
- 01_success_rate_vs_N.png — Success rate vs N
    - What: Reliability of the repair loop under the step cap.
    - X: N (board size). Y: Success rate in [0, 1].
- 02_steps_vs_N.png — Repair steps (success only) vs N
    - What: Hardware-independent effort; mean with ±1 sigma bars and a
      quadratic trend line.
- 03_time_vs_N_log_scale.png — Avg time (success only, log scale) vs N
    - What: Practical runtime growth; each step costs O(N^2).
- 04_perturbations_vs_N.png — Cycle escapes per successful run vs N
    - What: How often the visited-state check fires as N grows.
- 05_steps_distribution.png — Boxplot of steps per run, grouped by N
    - What: Spread and outliers of the logical cost (successful runs).
"""
from __future__ import annotations

import os
from typing import List, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import seaborn as sns  # noqa: E402

from . import settings  # noqa: E402
from .reporting import raw_runs_frame  # noqa: E402
from .stats import ExperimentResults  # noqa: E402


def _present(results: ExperimentResults, N_values: List[int]) -> List[int]:
    return [N for N in N_values if N in results and results[N].get("total_runs", 0) > 0]


def _summary_value(results: ExperimentResults, N: int, key: str, field: str = "mean") -> float:
    summary = results[N].get(key) or {}
    value = summary.get(field)  # type: ignore[union-attr]
    return float(value) if value is not None else 0.0


def _save(out_dir: str, name: str) -> str:
    fname = os.path.join(out_dir, f"{name}{settings.filename_suffix()}.png")
    plt.savefig(fname, bbox_inches="tight", dpi=150)
    plt.close()
    return fname


def plot_success_rate(results: ExperimentResults, N_values: List[int], out_dir: str) -> str:
    """Plot the success rate per board size."""
    sizes = _present(results, N_values)
    rates = [float(results[N].get("success_rate", 0.0)) for N in sizes]

    plt.figure(figsize=(10, 6))
    plt.plot(sizes, rates, marker="o", linewidth=2, markersize=8, label="Iterative repair")
    for n, rate in zip(sizes, rates):
        plt.annotate(f"{rate:.2f}", (n, rate), textcoords="offset points", xytext=(0, 5), ha="center", fontsize=9)
    plt.xlabel("N (board size)", fontsize=12)
    plt.ylabel("Success rate", fontsize=12)
    plt.title("Success Rate vs Problem Size\n(Runs solved within the step cap)", fontsize=14)
    plt.ylim(-0.05, 1.05)
    plt.grid(True, alpha=0.7)
    plt.xticks(sizes)
    plt.legend(fontsize=11)

    fname = _save(out_dir, "01_success_rate_vs_N")
    print(f"Saved success-rate chart: {fname}")
    return fname


def plot_steps_vs_N(results: ExperimentResults, N_values: List[int], out_dir: str) -> str:
    """Plot mean repair steps of successful runs with a quadratic trend."""
    sizes = _present(results, N_values)
    means = np.array([_summary_value(results, N, "success_steps") for N in sizes])
    stds = np.array([_summary_value(results, N, "success_steps", "std") for N in sizes])

    plt.figure(figsize=(10, 6))
    plt.errorbar(sizes, means, yerr=stds, marker="s", linewidth=2, capsize=4, label="Mean steps ± 1 sigma")
    if len(sizes) >= 3:
        coeffs = np.polyfit(sizes, means, 2)
        trend = np.poly1d(coeffs)
        x_trend = np.linspace(min(sizes), max(sizes), 100)
        plt.plot(x_trend, trend(x_trend), "r--", alpha=0.8, label="Quadratic trend")
    plt.xlabel("N (board size)", fontsize=12)
    plt.ylabel("Repair steps", fontsize=12)
    plt.title("Logical Cost vs Problem Size\n(Successful runs only)", fontsize=14)
    plt.grid(True, alpha=0.7)
    plt.xticks(sizes)
    plt.legend(fontsize=11)

    fname = _save(out_dir, "02_steps_vs_N")
    print(f"Saved steps chart: {fname}")
    return fname


def plot_time_vs_N(results: ExperimentResults, N_values: List[int], out_dir: str) -> str:
    """Plot mean wall-clock time of successful runs on a log scale."""
    sizes = _present(results, N_values)
    times = [max(_summary_value(results, N, "success_time"), 1e-6) for N in sizes]

    plt.figure(figsize=(10, 6))
    plt.semilogy(sizes, times, marker="^", linewidth=2, markersize=8, label="Iterative repair")
    plt.xlabel("N (board size)", fontsize=12)
    plt.ylabel("Average time [s] (log scale)", fontsize=12)
    plt.title("Execution Time vs Problem Size\n(Successful runs only)", fontsize=14)
    plt.grid(True, alpha=0.7)
    plt.xticks(sizes)
    plt.legend(fontsize=11)

    fname = _save(out_dir, "03_time_vs_N_log_scale")
    print(f"Saved execution-time chart (log scale): {fname}")
    return fname


def plot_perturbations_vs_N(results: ExperimentResults, N_values: List[int], out_dir: str) -> str:
    """Plot how many cycle escapes a successful run needs on average."""
    sizes = _present(results, N_values)
    means = [_summary_value(results, N, "success_perturbations") for N in sizes]

    plt.figure(figsize=(10, 6))
    plt.bar([str(N) for N in sizes], means, color="tab:orange", alpha=0.8)
    plt.xlabel("N (board size)", fontsize=12)
    plt.ylabel("Cycle escapes per run", fontsize=12)
    plt.title("Perturbations vs Problem Size\n(Revisited configurations that forced a random move)", fontsize=14)
    plt.grid(True, axis="y", alpha=0.3)

    fname = _save(out_dir, "04_perturbations_vs_N")
    print(f"Saved perturbation chart: {fname}")
    return fname


def plot_steps_distribution(results: ExperimentResults, N_values: List[int], out_dir: str) -> Optional[str]:
    """Boxplot of steps per successful run, one box per N (None if no data)."""
    frame = raw_runs_frame(results, N_values)
    frame = frame[frame["success"].astype(bool)]
    if frame.empty:
        print("Steps distribution skipped: no successful runs.")
        return None

    plt.figure(figsize=(12, 6))
    sns.boxplot(data=frame, x="n", y="steps", color="tab:blue")
    plt.xlabel("N (board size)", fontsize=12)
    plt.ylabel("Repair steps", fontsize=12)
    plt.title("Steps Distribution per N\n(Successful runs only)", fontsize=14)
    plt.grid(True, alpha=0.3)

    fname = _save(out_dir, "05_steps_distribution")
    print(f"Saved steps boxplot: {fname}")
    return fname


def plot_and_save(results: ExperimentResults, N_values: List[int], out_dir: str) -> List[str]:
    """Generate every chart and return the list of written files."""
    os.makedirs(out_dir, exist_ok=True)
    if not _present(results, N_values):
        print("Plotting skipped: no results.")
        return []
    sns.set_theme(style="whitegrid")
    files = [
        plot_success_rate(results, N_values, out_dir),
        plot_steps_vs_N(results, N_values, out_dir),
        plot_time_vs_N(results, N_values, out_dir),
        plot_perturbations_vs_N(results, N_values, out_dir),
    ]
    boxplot = plot_steps_distribution(results, N_values, out_dir)
    if boxplot:
        files.append(boxplot)
    return files
