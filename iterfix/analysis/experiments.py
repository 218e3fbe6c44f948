"""Batch experiment runners for the iterative-repair solver.

These routines execute repeatable batches of independent solves for a set of
board sizes, either sequentially or spread across a process pool, and shape
the per-run records into per-N aggregates suitable for CSV export and
plotting. Validation hooks optionally check that every reported success is a
real solution.
"""
from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor
from time import perf_counter
from typing import Any, Dict, List, Optional, Tuple

from . import settings
from .stats import (
    ExperimentResults,
    ResultEntry,
    RunRecord,
    compute_grouped_statistics,
    ProgressPrinter,
)
from iterfix.solver import solve_random
from iterfix.utils import is_valid_solution

ExperimentParams = Tuple[int, Optional[int], int, Optional[float], bool]


# Reusable workers -----------------------------------------------------------

def run_seed(base_seed: Optional[int], N: int, run_index: int) -> Optional[int]:
    """Derive a distinct, reproducible seed for one run (None stays None)."""
    if base_seed is None:
        return None
    return base_seed * 1_000_003 + N * 10_007 + run_index


def run_single_experiment(params: ExperimentParams) -> RunRecord:
    """Worker wrapper to invoke a single random-start solve (for parallel mapping)."""
    N, seed, max_steps, time_limit, validate = params
    board, (success, steps, elapsed, best_cost, perturbations, timeout) = solve_random(
        N, seed=seed, max_steps=max_steps, time_limit=time_limit
    )
    if validate:
        if success and not is_valid_solution(board.positions):
            raise AssertionError(f"Invalid solution reported for N={N} (seed {seed}): {board.positions}")
        if success and (best_cost != 0 or timeout):
            raise AssertionError(
                f"Inconsistent run for N={N} (seed {seed}): success but best_cost={best_cost}, timeout={timeout}"
            )
    return {
        "success": success,
        "steps": steps,
        "time": elapsed,
        "best_cost": best_cost,
        "perturbations": perturbations,
        "timeout": timeout,
        "seed": seed,
    }


def summarize_runs(runs: List[RunRecord], max_steps: int) -> ResultEntry:
    """Shape raw run records into a per-N aggregate entry."""
    stats = compute_grouped_statistics([dict(r) for r in runs], "success")
    entry: Dict[str, Any] = {
        "success_rate": stats["success_rate"],
        "timeout_rate": stats["timeout_rate"],
        "failure_rate": stats["failure_rate"],
        "total_runs": stats["total_runs"],
        "successes": stats["successes"],
        "failures": stats["failures"],
        "timeouts": stats["timeouts"],
    }
    for key in (
        "success_steps",
        "success_time",
        "success_perturbations",
        "failure_steps",
        "failure_time",
        "failure_best_cost",
        "timeout_steps",
        "timeout_time",
        "timeout_best_cost",
        "all_steps",
        "all_time",
        "all_best_cost",
        "all_perturbations",
    ):
        entry[key] = stats.get(key, {})
    entry["max_steps"] = max_steps
    entry["raw_runs"] = list(runs)
    return entry  # type: ignore[return-value]


def _build_params(
    N: int,
    runs: int,
    max_steps: int,
    time_limit: Optional[float],
    base_seed: Optional[int],
    validate: bool,
) -> List[ExperimentParams]:
    return [(N, run_seed(base_seed, N, i), max_steps, time_limit, validate) for i in range(runs)]


def _experiment_expired(start: float) -> bool:
    limit = settings.EXPERIMENT_TIMEOUT
    return limit is not None and (perf_counter() - start) > limit


# Sequential runner ----------------------------------------------------------

def run_experiments(
    N_values: List[int],
    runs: int,
    max_steps: int,
    time_limit: Optional[float] = None,
    base_seed: Optional[int] = None,
    progress_label: Optional[str] = None,
    validate: bool = False,
) -> ExperimentResults:
    """Run ``runs`` random-start solves for every N, one after another.

    Stops scheduling new sizes once ``settings.EXPERIMENT_TIMEOUT`` is
    exceeded and returns partial results on ``KeyboardInterrupt``.
    """
    results: ExperimentResults = {}
    progress = ProgressPrinter(len(N_values), progress_label) if progress_label else None
    start = perf_counter()

    for index, N in enumerate(N_values, start=1):
        if _experiment_expired(start):
            print(f"Experiment timeout reached; skipping N >= {N}.")
            break
        if progress:
            progress.update(index, f"N={N}")
        print(f"=== N = {N}, {runs} runs, step cap {max_steps} ===")
        try:
            records = [
                run_single_experiment(params)
                for params in _build_params(N, runs, max_steps, time_limit, base_seed, validate)
            ]
        except KeyboardInterrupt:
            print("\nInterrupted by user (sequential). Returning partial results...")
            break
        results[N] = summarize_runs(records, max_steps)
        print(f"  success rate: {results[N]['success_rate']:.2f}")

    return results


# Parallel runner ------------------------------------------------------------

def run_experiments_parallel(
    N_values: List[int],
    runs: int,
    max_steps: int,
    time_limit: Optional[float] = None,
    base_seed: Optional[int] = None,
    progress_label: Optional[str] = None,
    validate: bool = False,
    workers: Optional[int] = None,
) -> ExperimentResults:
    """Parallel version of ``run_experiments`` using a process pool.

    Runs for the same N are distributed across ``workers`` processes
    (default ``settings.NUM_PROCESSES``). Seeds are derived per run, so the
    outcome does not depend on how runs are scheduled.
    """
    results: ExperimentResults = {}
    progress = ProgressPrinter(len(N_values), progress_label) if progress_label else None
    max_workers = workers or settings.NUM_PROCESSES
    start = perf_counter()

    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        for index, N in enumerate(N_values, start=1):
            if _experiment_expired(start):
                print(f"Experiment timeout reached; skipping N >= {N}.")
                break
            if progress:
                progress.update(index, f"N={N}")
            print(f"=== (Parallel) N = {N}, {runs} runs on {max_workers} workers ===")
            try:
                params = _build_params(N, runs, max_steps, time_limit, base_seed, validate)
                records = list(executor.map(run_single_experiment, params))
            except KeyboardInterrupt:
                print("\nInterrupted by user (parallel). Returning partial results...")
                executor.shutdown(wait=False, cancel_futures=True)
                break
            results[N] = summarize_runs(records, max_steps)
            print(f"  success rate: {results[N]['success_rate']:.2f}")

    return results
