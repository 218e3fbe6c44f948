"""Command-line interface and high-level pipelines for iterfix benchmarks.

This module wires together configuration loading and the execution of batch
experiments (sequential or parallel), followed by CSV export and charts. It
isolates I/O, argument parsing, and progress reporting from the core
algorithmic modules so that the rest of the codebase remains easy to test
programmatically.
"""
from __future__ import annotations

import argparse
import os
import random
import tempfile
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List, Optional

from . import settings
from .experiments import run_experiments, run_experiments_parallel
from .plots import plot_and_save
from .reporting import save_raw_data_to_csv, save_results_to_csv
from .stats import ExperimentResults
from config_manager import ConfigManager
from iterfix.board import MIN_SIZE, Board
from iterfix.solver import solve
from iterfix.utils import conflicts, is_valid_solution


# ------------- Utils --------------------------------------------------------

def parse_size_filters(size_args: Optional[List[str]]) -> Optional[List[int]]:
    """Normalize board-size CLI inputs into a sorted list of unique ints.

    Accepts repeated flags (e.g., ``-n 8 -n 16``) and comma-separated lists
    (e.g., ``-n 8,16``). Returns ``None`` when no filter is provided so that
    callers can fall back to the configured default set.
    """
    if not size_args:
        return None
    selected: List[int] = []
    for entry in size_args:
        for token in entry.split(","):
            token = token.strip()
            if not token:
                continue
            try:
                value = int(token)
            except ValueError as exc:
                raise ValueError(f"Invalid board size '{token}'") from exc
            if value < MIN_SIZE:
                raise ValueError(f"Board size {value} is below the minimum of {MIN_SIZE}")
            selected.append(value)
    return sorted(set(selected)) or None


def apply_configuration(config_path: str) -> ConfigManager:
    """Load configuration and push its values into ``settings`` in place."""
    config_mgr = ConfigManager(config_path)

    experiment_settings = config_mgr.get_experiment_settings()
    if experiment_settings:
        settings.N_VALUES = [int(n) for n in experiment_settings.get("N_values", settings.N_VALUES)]
        settings.RUNS_PER_N = int(experiment_settings.get("runs_per_n", settings.RUNS_PER_N))
        settings.MAX_STEPS = int(experiment_settings.get("max_steps", settings.MAX_STEPS))
        seed = experiment_settings.get("base_seed", settings.BASE_SEED)
        settings.BASE_SEED = int(seed) if seed is not None else None
        settings.OUT_DIR = experiment_settings.get("output_dir", settings.OUT_DIR)

    timeout_settings = config_mgr.get_timeout_settings()
    if timeout_settings:
        settings.set_timeouts(
            solve_timeout=timeout_settings.get("solve_time_limit", settings.SOLVE_TIME_LIMIT),
            experiment_timeout=timeout_settings.get("experiment_timeout", settings.EXPERIMENT_TIMEOUT),
        )

    invalid = [n for n in settings.N_VALUES if n < MIN_SIZE]
    if invalid:
        raise ValueError(f"Configured board sizes below {MIN_SIZE}: {invalid}")
    return config_mgr


def best_result_summaries(results: ExperimentResults) -> Dict[int, Dict[str, Any]]:
    """Condense per-N results into the shape stored under ``best_results``."""
    summaries: Dict[int, Dict[str, Any]] = {}
    for N, entry in results.items():
        steps = entry.get("success_steps") or {}
        summaries[N] = {
            "success_rate": entry.get("success_rate", 0.0),
            "mean_steps": steps.get("mean"),
            "runs": entry.get("total_runs", 0),
            "max_steps": entry.get("max_steps"),
            "run_id": settings.RUN_ID,
        }
    return summaries


def _export(results: ExperimentResults, config_mgr: Optional[ConfigManager], plots: bool) -> None:
    save_results_to_csv(results, settings.N_VALUES, settings.OUT_DIR)
    save_raw_data_to_csv(results, settings.N_VALUES, settings.OUT_DIR)
    if plots:
        plot_and_save(results, settings.N_VALUES, settings.OUT_DIR)
    if config_mgr is not None and results:
        config_mgr.save_best_results(best_result_summaries(results))


# ------------- Pipelines ---------------------------------------------------

def main_sequential(
    config_mgr: Optional[ConfigManager] = None,
    validate: bool = False,
    plots: bool = True,
) -> ExperimentResults:
    """Run the benchmark one solve at a time and export the results.

    Suitable when parallel resources are limited or when deterministic ordering
    of output is preferred for debugging.
    """
    os.makedirs(settings.OUT_DIR, exist_ok=True)
    print("\n============================================")
    print("SEQUENTIAL ITERATIVE-REPAIR BENCHMARK")
    print("============================================")

    start_total = perf_counter()
    results = run_experiments(
        settings.N_VALUES,
        runs=settings.RUNS_PER_N,
        max_steps=settings.MAX_STEPS,
        time_limit=settings.SOLVE_TIME_LIMIT,
        base_seed=settings.BASE_SEED,
        progress_label="Experiments",
        validate=validate,
    )
    _export(results, config_mgr, plots)
    print(f"\nSequential pipeline completed in {perf_counter() - start_total:.1f}s.")
    return results


def main_parallel(
    config_mgr: Optional[ConfigManager] = None,
    validate: bool = False,
    plots: bool = True,
) -> ExperimentResults:
    """Run the benchmark across a process pool and export the results."""
    os.makedirs(settings.OUT_DIR, exist_ok=True)
    print(f"\nStarting parallel pipeline with {settings.NUM_PROCESSES} worker processes")
    print(f"Available CPU cores: {os.cpu_count()}")
    print(f"   - Solve: {settings.SOLVE_TIME_LIMIT}s" if settings.SOLVE_TIME_LIMIT else "   - Solve: unlimited")
    print(
        f"   - Experiment: {settings.EXPERIMENT_TIMEOUT}s"
        if settings.EXPERIMENT_TIMEOUT
        else "   - Experiment: unlimited"
    )

    start_total = perf_counter()
    results = run_experiments_parallel(
        settings.N_VALUES,
        runs=settings.RUNS_PER_N,
        max_steps=settings.MAX_STEPS,
        time_limit=settings.SOLVE_TIME_LIMIT,
        base_seed=settings.BASE_SEED,
        progress_label="Experiments (parallel)",
        validate=validate,
    )
    _export(results, config_mgr, plots)
    total_time = perf_counter() - start_total
    print(f"\nParallel pipeline completed in {total_time:.1f}s ({total_time/60:.1f} minutes).")
    return results


# ------------- Quick regression -------------------------------------------

def run_quick_regression_tests() -> None:
    """Execute a fast, deterministic smoke test at N=8.

    Verifies that:
    - The cost model agrees with an independent pair count.
    - A seeded board reaches a valid solution within the step cap.
    - The batch pipeline produces a non-empty CSV in a temporary folder.
    """
    print("Running quick regression tests (N=8)...")

    board = Board(8, rng=random.Random(42)).randomize()
    if board.total_cost() != 2 * conflicts(board.positions):
        raise AssertionError("Board cost disagrees with the pairwise conflict count.")

    success, steps, elapsed, _, _, timeout = solve(board, max_steps=10000, time_limit=5.0)
    if not success or timeout:
        raise AssertionError("Iterative repair did not succeed for N=8 with deterministic seed.")
    if not is_valid_solution(board.positions):
        raise AssertionError(f"Iterative repair returned an invalid solution for N=8: {board.positions}.")
    print(f"  Iterative repair: success in {steps} steps, {elapsed:.4f}s")

    results = run_experiments([8], runs=3, max_steps=10000, time_limit=5.0, base_seed=42, progress_label="Quick regression experiments")

    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(save_results_to_csv(results, [8], tmpdir))
        if not csv_path.exists() or csv_path.stat().st_size == 0:
            raise AssertionError("Results CSV was not generated successfully during quick tests.")

    print("Quick regression tests passed.")


# ------------- CLI wiring --------------------------------------------------

def build_arg_parser():
    """Construct the argument parser for the benchmark entry point."""
    parser = argparse.ArgumentParser(description="Benchmark the iterative-repair N-Queens solver.")
    parser.add_argument(
        "--mode",
        choices=["sequential", "parallel"],
        default="parallel",
        help="Execution mode: sequential or parallel (default).",
    )
    parser.add_argument(
        "--sizes",
        "-n",
        action="append",
        help="Board sizes to run (comma-separated values or multiple flags). Default: from config.",
    )
    parser.add_argument("--runs", "-r", type=int, help="Runs per board size (overrides config).")
    parser.add_argument("--max-steps", type=int, help="Step cap per run (overrides config).")
    parser.add_argument("--seed", type=int, help="Base seed for reproducible batches (overrides config).")
    parser.add_argument("--tag", help="Label appended to output filenames.")
    parser.add_argument("--config", default="config.json", help="Path to configuration file (default: config.json).")
    parser.add_argument("--no-plots", action="store_true", help="Skip chart generation.")
    parser.add_argument("--no-save", action="store_true", help="Do not record best results back into the config file.")
    parser.add_argument("--quick-test", action="store_true", help="Run quick regression tests (N=8) and exit.")
    parser.add_argument("--validate", action="store_true", help="Validate every reported solution (extra assertions).")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point: parse arguments and dispatch to the chosen pipeline."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.quick_test:
        run_quick_regression_tests()
        return

    try:
        config_mgr = apply_configuration(args.config)
        sizes = parse_size_filters(args.sizes)
    except FileNotFoundError as exc:
        print(f"Configuration file not found: {exc}")
        raise SystemExit(1) from exc
    except ValueError as exc:
        print(f"Configuration error: {exc}")
        raise SystemExit(1) from exc

    if sizes:
        settings.N_VALUES = sizes
    if args.runs is not None:
        settings.RUNS_PER_N = args.runs
    if args.max_steps is not None:
        settings.MAX_STEPS = args.max_steps
    if args.seed is not None:
        settings.BASE_SEED = args.seed
    if args.tag:
        settings.RUN_TAG = args.tag

    print(f"Board sizes: {settings.N_VALUES}, runs per size: {settings.RUNS_PER_N}, step cap: {settings.MAX_STEPS}")

    try:
        if args.mode == "sequential":
            main_sequential(None if args.no_save else config_mgr, validate=args.validate, plots=not args.no_plots)
        else:
            main_parallel(None if args.no_save else config_mgr, validate=args.validate, plots=not args.no_plots)
    except KeyboardInterrupt:
        print("\nExecution interrupted by user. Cleaning up workers...")
        raise SystemExit(130) from None
    except ValueError as exc:
        print(f"Execution error: {exc}")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
