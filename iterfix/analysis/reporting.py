"""CSV export utilities for benchmark outputs (aggregates and raw runs).

These helpers materialize concise per-N CSV summaries as well as full per-run
raw data for downstream analysis or spreadsheet inspection.
"""
from __future__ import annotations

import csv
import os
from typing import Any, Dict, List, Optional

import pandas as pd

from . import settings
from .stats import ExperimentResults, StatsSummary


def _stat(summary: Optional[StatsSummary], key: str) -> Any:
    if not summary:
        return ""
    value = summary.get(key)
    return "" if value is None else value


def save_results_to_csv(results: ExperimentResults, N_values: List[int], out_dir: str) -> str:
    """Write compact per-N aggregate metrics to CSV and return the file path.

    Column names follow lowercase snake_case. Sizes missing from ``results``
    (e.g. skipped after an experiment timeout) are omitted.
    """
    os.makedirs(out_dir, exist_ok=True)
    filename = os.path.join(out_dir, f"results_iterfix{settings.filename_suffix()}.csv")

    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "n",
            "total_runs",
            "successes",
            "failures",
            "timeouts",
            "success_rate",
            "failure_rate",
            "timeout_rate",
            "max_steps",
            "success_steps_mean",
            "success_steps_median",
            "success_steps_std",
            "success_steps_max",
            "success_time_mean",
            "success_time_median",
            "success_perturbations_mean",
            "failure_best_cost_mean",
            "timeout_best_cost_mean",
        ])
        for N in N_values:
            entry = results.get(N)
            if entry is None:
                continue
            writer.writerow([
                N,
                entry.get("total_runs", 0),
                entry.get("successes", 0),
                entry.get("failures", 0),
                entry.get("timeouts", 0),
                entry.get("success_rate", 0.0),
                entry.get("failure_rate", 0.0),
                entry.get("timeout_rate", 0.0),
                entry.get("max_steps", ""),
                _stat(entry.get("success_steps"), "mean"),
                _stat(entry.get("success_steps"), "median"),
                _stat(entry.get("success_steps"), "std"),
                _stat(entry.get("success_steps"), "max"),
                _stat(entry.get("success_time"), "mean"),
                _stat(entry.get("success_time"), "median"),
                _stat(entry.get("success_perturbations"), "mean"),
                _stat(entry.get("failure_best_cost"), "mean"),
                _stat(entry.get("timeout_best_cost"), "mean"),
            ])

    print(f"Saved aggregate results: {filename}")
    return filename


def raw_runs_frame(results: ExperimentResults, N_values: List[int]) -> pd.DataFrame:
    """Flatten every raw run into one DataFrame row tagged with its N."""
    rows: List[Dict[str, Any]] = []
    for N in N_values:
        entry = results.get(N)
        if entry is None:
            continue
        for run_index, run in enumerate(entry.get("raw_runs", [])):
            rows.append({"n": N, "run": run_index, **run})
    columns = ["n", "run", "success", "steps", "time", "best_cost", "perturbations", "timeout", "seed"]
    return pd.DataFrame(rows, columns=columns)


def save_raw_data_to_csv(results: ExperimentResults, N_values: List[int], out_dir: str) -> str:
    """Write one CSV row per individual run and return the file path."""
    os.makedirs(out_dir, exist_ok=True)
    filename = os.path.join(out_dir, f"raw_runs_iterfix{settings.filename_suffix()}.csv")
    frame = raw_runs_frame(results, N_values)
    frame.to_csv(filename, index=False)
    print(f"Saved raw run data ({len(frame)} rows): {filename}")
    return filename
