"""Tests for the benchmark pipeline: statistics, batch runners, exports and config."""

from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path
import json
import os
import sys
import tempfile
import unittest

import pandas as pd

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config_manager import ConfigManager
from iterfix.analysis import settings
from iterfix.analysis import cli as bench_cli
from iterfix.analysis.experiments import (
    run_experiments,
    run_experiments_parallel,
    run_seed,
    run_single_experiment,
    summarize_runs,
)
from iterfix.analysis.plots import plot_and_save
from iterfix.analysis.reporting import raw_runs_frame, save_raw_data_to_csv, save_results_to_csv
from iterfix.analysis.stats import compute_detailed_statistics, compute_grouped_statistics


def quiet(fn, *args, **kwargs):
    with redirect_stdout(StringIO()):
        return fn(*args, **kwargs)


class StatisticsTests(unittest.TestCase):

    def test_detailed_statistics(self):
        summary = compute_detailed_statistics([4, 1, 3, 2])
        self.assertEqual(summary["count"], 4)
        self.assertEqual(summary["mean"], 2.5)
        self.assertEqual(summary["median"], 2.5)
        self.assertEqual(summary["min"], 1)
        self.assertEqual(summary["max"], 4)
        self.assertEqual(summary["range"], 3)
        self.assertEqual(summary["q25"], 2)
        self.assertEqual(summary["q75"], 4)

    def test_detailed_statistics_empty(self):
        summary = compute_detailed_statistics([])
        self.assertEqual(summary["count"], 0)
        self.assertIsNone(summary["mean"])

    def test_grouped_statistics(self):
        runs = [
            {"success": True, "steps": 10, "time": 0.1, "best_cost": 0, "perturbations": 1, "timeout": False},
            {"success": True, "steps": 20, "time": 0.2, "best_cost": 0, "perturbations": 3, "timeout": False},
            {"success": False, "steps": 50, "time": 0.5, "best_cost": 4, "perturbations": 9, "timeout": False},
            {"success": False, "steps": 5, "time": 1.0, "best_cost": 2, "perturbations": 0, "timeout": True},
        ]
        stats = compute_grouped_statistics(runs)
        self.assertEqual(stats["total_runs"], 4)
        self.assertEqual(stats["successes"], 2)
        self.assertEqual(stats["failures"], 1)
        self.assertEqual(stats["timeouts"], 1)
        self.assertEqual(stats["success_rate"], 0.5)
        self.assertEqual(stats["success_steps"]["mean"], 15)
        self.assertEqual(stats["failure_best_cost"]["mean"], 4)
        self.assertEqual(stats["timeout_best_cost"]["mean"], 2)
        self.assertEqual(stats["all_perturbations"]["max"], 9)


class ExperimentTests(unittest.TestCase):

    def test_run_seed(self):
        self.assertIsNone(run_seed(None, 8, 0))
        self.assertNotEqual(run_seed(1, 8, 0), run_seed(1, 8, 1))
        self.assertNotEqual(run_seed(1, 8, 0), run_seed(1, 9, 0))

    def test_single_experiment_is_reproducible(self):
        first = run_single_experiment((8, 5, 10000, None, True))
        second = run_single_experiment((8, 5, 10000, None, True))
        self.assertTrue(first["success"])
        self.assertEqual(first["seed"], 5)
        for key in ("success", "steps", "best_cost", "perturbations", "timeout"):
            self.assertEqual(first[key], second[key])

    def test_run_experiments_shapes_results(self):
        results = quiet(run_experiments, [6, 8], runs=3, max_steps=10000, base_seed=7, validate=True)
        self.assertEqual(sorted(results), [6, 8])
        entry = results[8]
        self.assertEqual(entry["total_runs"], 3)
        self.assertEqual(entry["successes"], 3)
        self.assertEqual(entry["success_rate"], 1.0)
        self.assertEqual(entry["max_steps"], 10000)
        self.assertEqual(len(entry["raw_runs"]), 3)
        self.assertEqual(entry["success_steps"]["count"], 3)

    def test_parallel_runs_match_sequential(self):
        sequential = quiet(run_experiments, [8, 10], runs=4, max_steps=10000, base_seed=7)
        parallel = quiet(run_experiments_parallel, [8, 10], runs=4, max_steps=10000, base_seed=7, workers=2)
        self.assertEqual(sorted(parallel), [8, 10])
        for N in (8, 10):
            expected = [(r["success"], r["steps"], r["seed"]) for r in sequential[N]["raw_runs"]]
            actual = [(r["success"], r["steps"], r["seed"]) for r in parallel[N]["raw_runs"]]
            self.assertEqual(actual, expected)
            self.assertEqual(parallel[N]["successes"], sequential[N]["successes"])

    def test_summarize_failed_runs(self):
        runs = [
            {"success": False, "steps": 1, "time": 0.0, "best_cost": 6, "perturbations": 0, "timeout": False, "seed": None},
        ]
        entry = summarize_runs(runs, max_steps=1)
        self.assertEqual(entry["failure_rate"], 1.0)
        self.assertEqual(entry["success_steps"], {})
        self.assertEqual(entry["failure_best_cost"]["mean"], 6)


class ReportingTests(unittest.TestCase):

    def setUp(self):
        self.results = quiet(run_experiments, [8], runs=4, max_steps=10000, base_seed=3)
        self._tag, self._date = settings.RUN_TAG, settings.DATE_IN_FILENAMES
        settings.RUN_TAG = "unit"
        settings.DATE_IN_FILENAMES = False

    def tearDown(self):
        settings.RUN_TAG, settings.DATE_IN_FILENAMES = self._tag, self._date

    def test_filename_suffix(self):
        self.assertEqual(settings.filename_suffix(), "_unit")

    def test_aggregate_csv(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = quiet(save_results_to_csv, self.results, [8, 16], tmpdir)
            self.assertEqual(os.path.basename(path), "results_iterfix_unit.csv")
            frame = pd.read_csv(path)
        self.assertEqual(list(frame["n"]), [8])
        self.assertEqual(frame.loc[0, "total_runs"], 4)
        self.assertEqual(frame.loc[0, "success_rate"], 1.0)

    def test_raw_csv(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = quiet(save_raw_data_to_csv, self.results, [8], tmpdir)
            frame = pd.read_csv(path)
        self.assertEqual(len(frame), 4)
        self.assertEqual(list(frame["run"]), [0, 1, 2, 3])
        self.assertTrue(frame["success"].all())

    def test_raw_frame_skips_missing_sizes(self):
        frame = raw_runs_frame(self.results, [8, 99])
        self.assertEqual(set(frame["n"]), {8})

    def test_plots_written(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            files = quiet(plot_and_save, self.results, [8], tmpdir)
            self.assertEqual(len(files), 5)
            for path in files:
                self.assertTrue(os.path.exists(path))


class ConfigTests(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = Path(self.tmpdir.name) / "config.json"
        self.path.write_text(json.dumps({
            "experiment_settings": {
                "N_values": [8, 10],
                "runs_per_n": 2,
                "max_steps": 500,
                "base_seed": 9,
                "output_dir": str(Path(self.tmpdir.name) / "out"),
            },
            "timeout_settings": {"solve_time_limit": 5.0, "experiment_timeout": None},
        }))
        self._saved = {
            name: getattr(settings, name)
            for name in ("N_VALUES", "RUNS_PER_N", "MAX_STEPS", "BASE_SEED", "OUT_DIR", "SOLVE_TIME_LIMIT", "EXPERIMENT_TIMEOUT", "NUM_PROCESSES")
        }

    def tearDown(self):
        for name, value in self._saved.items():
            setattr(settings, name, value)
        self.tmpdir.cleanup()

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            ConfigManager(Path(self.tmpdir.name) / "missing.json")

    def test_apply_configuration(self):
        quiet(bench_cli.apply_configuration, str(self.path))
        self.assertEqual(settings.N_VALUES, [8, 10])
        self.assertEqual(settings.RUNS_PER_N, 2)
        self.assertEqual(settings.MAX_STEPS, 500)
        self.assertEqual(settings.BASE_SEED, 9)
        self.assertEqual(settings.SOLVE_TIME_LIMIT, 5.0)
        self.assertIsNone(settings.EXPERIMENT_TIMEOUT)

    def test_apply_configuration_rejects_small_sizes(self):
        data = json.loads(self.path.read_text())
        data["experiment_settings"]["N_values"] = [3, 8]
        self.path.write_text(json.dumps(data))
        with self.assertRaises(ValueError):
            quiet(bench_cli.apply_configuration, str(self.path))

    def test_save_best_results_keeps_better_entry(self):
        mgr = ConfigManager(self.path)
        quiet(mgr.save_best_results, {8: {"success_rate": 1.0, "mean_steps": 40.0}})
        quiet(mgr.save_best_results, {8: {"success_rate": 1.0, "mean_steps": 55.0}})
        quiet(mgr.save_best_results, {8: {"success_rate": 1.0, "mean_steps": 30.0}, 10: {"success_rate": 0.5, "mean_steps": None}})
        stored = ConfigManager(self.path).get_best_results()
        self.assertEqual(stored["8"]["mean_steps"], 30.0)
        self.assertEqual(stored["10"]["success_rate"], 0.5)

    def test_update_setting(self):
        mgr = ConfigManager(self.path)
        mgr.update_setting("experiment_settings", "runs_per_n", 7)
        self.assertEqual(ConfigManager(self.path).get_experiment_settings()["runs_per_n"], 7)

    def test_parse_size_filters(self):
        self.assertIsNone(bench_cli.parse_size_filters(None))
        self.assertEqual(bench_cli.parse_size_filters(["16,8", "8", "12"]), [8, 12, 16])
        with self.assertRaises(ValueError):
            bench_cli.parse_size_filters(["2"])
        with self.assertRaises(ValueError):
            bench_cli.parse_size_filters(["x"])

    def test_sequential_pipeline_end_to_end(self):
        quiet(bench_cli.apply_configuration, str(self.path))
        mgr = ConfigManager(self.path)
        results = quiet(bench_cli.main_sequential, mgr, validate=True, plots=False)
        self.assertEqual(sorted(results), [8, 10])
        self.assertTrue(any(name.startswith("results_iterfix") for name in os.listdir(settings.OUT_DIR)))
        self.assertIn("8", ConfigManager(self.path).get_best_results())

    def test_parallel_pipeline_end_to_end(self):
        quiet(bench_cli.apply_configuration, str(self.path))
        settings.NUM_PROCESSES = 2
        results = quiet(bench_cli.main_parallel, None, plots=False)
        self.assertEqual(sorted(results), [8, 10])
        self.assertEqual(len(results[10]["raw_runs"]), 2)
        written = os.listdir(settings.OUT_DIR)
        self.assertTrue(any(name.startswith("results_iterfix") for name in written))
        self.assertTrue(any(name.startswith("raw_runs_iterfix") for name in written))
        # No config manager, so no best results are stored
        self.assertEqual(ConfigManager(self.path).get_best_results(), {})


if __name__ == "__main__":
    unittest.main()
