"""
Benchmark and orchestration package for the iterative-repair solver.

This package contains:
- settings: global knobs and timeouts
- stats: typed summaries and aggregation helpers
- experiments: sequential and parallel batch runners with result shaping
- reporting: CSV exports and raw-data writers
- plots: visualization utilities
- cli: top-level pipeline entry points and argument parser
"""

from . import settings as settings  # re-export for convenience
from .stats import (
    StatsSummary,
    RunRecord,
    ResultEntry,
    ExperimentResults,
    compute_detailed_statistics,
    compute_grouped_statistics,
    ProgressPrinter,
)

__all__ = [
    # types
    "StatsSummary",
    "RunRecord",
    "ResultEntry",
    "ExperimentResults",
    # utils
    "compute_detailed_statistics",
    "compute_grouped_statistics",
    "ProgressPrinter",
    # settings module
    "settings",
]
