"""Global settings and timeouts for the iterfix benchmark pipeline.

This module centralizes tunable constants used across the orchestration code.
Values can be overridden at runtime via the configuration loader in
`iterfix.analysis.cli.apply_configuration`.
"""
from __future__ import annotations

import multiprocessing
from typing import List, Optional
from datetime import datetime

# Board sizes to evaluate (in ascending order) for scalability analysis
N_VALUES: List[int] = [8, 16, 24, 32, 48, 64]

# Number of independent solves per N (higher = more robust stats)
RUNS_PER_N: int = 40

# Step cap per solve; the heuristic has no termination proof
MAX_STEPS: int = 10000

# Base seed for reproducible batches (None = fresh entropy per run)
BASE_SEED: Optional[int] = None

# Per-solve time limit in seconds (None = no limit)
SOLVE_TIME_LIMIT: Optional[float] = 30.0

# Global timeout per batch of N values (None = no limit)
EXPERIMENT_TIMEOUT: Optional[float] = 600.0

# Output directory for CSV and charts
OUT_DIR: str = "results_iterfix"

# Number of worker processes to use (leave one core for the OS)
NUM_PROCESSES: int = max(1, multiprocessing.cpu_count() - 1)

# Output naming policy --------------------------------------------------------

# When True, results and plots include a datestamp suffix (e.g., _20251113-142530)
# applied consistently across all artifacts produced within the same run.
DATE_IN_FILENAMES: bool = True

# Unique run identifier used for filename stamping; set once at import time.
RUN_ID: str = datetime.now().strftime("%Y%m%d-%H%M%S")

# Optional run label appended to filenames to avoid overwriting outputs
RUN_TAG: Optional[str] = None


def set_timeouts(
        solve_timeout: Optional[float] = 30.0,
        experiment_timeout: Optional[float] = 600.0,
) -> None:
        """Configure the per-solve and per-batch time limits.

        Parameters
        - solve_timeout: limit for a single solve in seconds (None disables).
        - experiment_timeout: hard cap for a whole batch in seconds (None
            disables). When reached, no new N values are scheduled.

        Side effects
        - Updates module-level globals and prints a concise summary to stdout to
            make the active limits explicit at run start.
        """
        global SOLVE_TIME_LIMIT, EXPERIMENT_TIMEOUT
        SOLVE_TIME_LIMIT = solve_timeout
        EXPERIMENT_TIMEOUT = experiment_timeout

        print("Timeout settings configured:")
        print(f"   - Solve: {SOLVE_TIME_LIMIT}s" if SOLVE_TIME_LIMIT else "   - Solve: unlimited")
        print(
                f"   - Experiment: {EXPERIMENT_TIMEOUT}s"
                if EXPERIMENT_TIMEOUT
                else "   - Experiment: unlimited"
        )


def filename_suffix() -> str:
    """Return the ``_<tag>_<run id>`` suffix configured for output files (or empty)."""
    parts: List[str] = []
    if RUN_TAG:
        parts.append(str(RUN_TAG))
    if DATE_IN_FILENAMES and RUN_ID:
        parts.append(RUN_ID)
    return ("_" + "_".join(parts)) if parts else ""
