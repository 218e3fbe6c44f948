"""Typed result shapes and statistics helpers for the benchmark pipeline.

Defines ``TypedDict`` structures for batch outputs and provides utilities to
compute robust aggregate statistics across per-run records.
"""
from __future__ import annotations

import statistics
from typing import Any, Dict, List, Optional, TypedDict

METRICS: List[str] = ["time", "steps", "best_cost", "perturbations"]


class StatsSummary(TypedDict, total=False):
    count: int
    mean: Optional[float]
    median: Optional[float]
    std: Optional[float]
    min: Optional[float]
    max: Optional[float]
    q25: Optional[float]
    q75: Optional[float]
    range: Optional[float]


class RunRecord(TypedDict):
    success: bool
    steps: int
    time: float
    best_cost: int
    perturbations: int
    timeout: bool
    seed: Optional[int]


class ResultEntry(TypedDict, total=False):
    success_rate: float
    timeout_rate: float
    failure_rate: float
    total_runs: int
    successes: int
    failures: int
    timeouts: int
    success_steps: StatsSummary
    success_time: StatsSummary
    success_perturbations: StatsSummary
    failure_steps: StatsSummary
    failure_time: StatsSummary
    failure_best_cost: StatsSummary
    timeout_steps: StatsSummary
    timeout_time: StatsSummary
    timeout_best_cost: StatsSummary
    all_steps: StatsSummary
    all_time: StatsSummary
    all_best_cost: StatsSummary
    all_perturbations: StatsSummary
    max_steps: int
    raw_runs: List[RunRecord]


ExperimentResults = Dict[int, ResultEntry]


class ProgressPrinter:
    """Minimal, stdout-only progress reporter for long-running loops.

    Parameters
    ----------
    total : int
        Total number of steps/items expected. Values <= 0 are coerced to 1 to
        avoid division by zero when reporting percentages.
    label : str
        Short label printed in front of the progress counters.
    """

    def __init__(self, total: int, label: str):
        self.total = max(1, total)
        self.label = label

    def update(self, index: int, detail: str = "") -> None:
        """Print a single-line progress update to stdout."""
        percent = (index / self.total) * 100
        suffix = f" - {detail}" if detail else ""
        print(f"[{self.label}] {index}/{self.total} ({percent:.0f}%)" + suffix)


def compute_detailed_statistics(values: List[float], label: str = "") -> StatsSummary:
    """Compute summary statistics for a numeric sequence.

    Parameters
    ----------
    values : List[float]
        A list of numeric values to summarize.
    label : str, optional
        Optional label carried through for debugging; not used in calculations.

    Returns
    -------
    StatsSummary
        Count, mean, median, population std, min, max, 25th and 75th
        percentiles (q25, q75) and range. When ``values`` is empty, all
        numeric fields are ``None`` and ``count`` is 0 to keep CSV/plot
        generation consistent.
    """
    if not values:
        return {
            "count": 0,
            "mean": None,
            "median": None,
            "std": None,
            "min": None,
            "max": None,
            "q25": None,
            "q75": None,
            "range": None,
        }

    sorted_vals = sorted(values)
    n = len(values)

    mean_val = statistics.mean(values)
    median_val = statistics.median(values)
    min_val = min(values)
    max_val = max(values)
    range_val = max_val - min_val
    std_val = statistics.pstdev(values) if n > 1 else 0

    q25 = sorted_vals[n // 4] if n >= 4 else min_val
    q75 = sorted_vals[3 * n // 4] if n >= 4 else max_val

    return {
        "count": n,
        "mean": mean_val,
        "median": median_val,
        "std": std_val,
        "min": min_val,
        "max": max_val,
        "q25": q25,
        "q75": q75,
        "range": range_val,
    }


def compute_grouped_statistics(
    results_list: List[Dict[str, Any]], success_key: str = "success"
) -> Dict[str, Any]:
    """Aggregate metrics by outcome groups (success, failure, timeout).

    A run that hit the step cap counts as a failure; a run that hit the time
    limit counts as a timeout. Each metric in ``METRICS`` present in the
    records gets an ``all_<metric>`` summary plus one per outcome group.
    """
    successes = [r for r in results_list if r.get(success_key, False)]
    timeouts = [r for r in results_list if r.get("timeout", False)]
    failures = [r for r in results_list if not r.get(success_key, False) and not r.get("timeout", False)]

    stats: Dict[str, Any] = {
        "total_runs": len(results_list),
        "successes": len(successes),
        "failures": len(failures),
        "timeouts": len(timeouts),
        "success_rate": len(successes) / len(results_list) if results_list else 0,
        "timeout_rate": len(timeouts) / len(results_list) if results_list else 0,
        "failure_rate": len(failures) / len(results_list) if results_list else 0,
    }

    groups = (("all", results_list), ("success", successes), ("timeout", timeouts), ("failure", failures))
    for prefix, records in groups:
        for metric in METRICS:
            if any(metric in r for r in records):
                values = [r[metric] for r in records if metric in r]
                stats[f"{prefix}_{metric}"] = compute_detailed_statistics(values, f"{prefix}_{metric}")

    return stats
