"""Configuration management for the iterfix benchmark suite.

This module provides a thin, explicit wrapper around a JSON configuration file
to centralize benchmark settings, timeouts, and the best results recorded per
board size.

File format (high-level)
------------------------
- experiment_settings: board sizes, runs per size, step cap, seed, output dir.
- timeout_settings: per-solve time limit and global experiment timeout.
- best_results: mapping N -> {success_rate, mean_steps, ...} from past runs.

All methods return Python native types; the class does not validate semantics
beyond presence of keys to keep responsibilities minimal.
"""
import json
from pathlib import Path


class ConfigManager:
    """Load, query, and persist configuration and recorded results.

    Parameters
    ----------
    config_path : str | os.PathLike, default "config.json"
        Path to the configuration file.
    """

    def __init__(self, config_path="config.json"):
        self.config_path = Path(config_path)
        self.config = self.load_config()

    def load_config(self):
        """Load and parse the JSON configuration file.

        Returns
        -------
        dict
            Root configuration object.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}\n"
                f"Create it or use the default config.json template"
            )

        with open(self.config_path, 'r') as f:
            return json.load(f)

    def save_config(self):
        """Persist the current in-memory configuration to disk."""
        with open(self.config_path, 'w') as f:
            json.dump(self.config, f, indent=2)

    def get_experiment_settings(self):
        """Return high-level benchmark settings (sizes, runs, step cap, seed, output dir)."""
        return self.config.get("experiment_settings", {})

    def get_timeout_settings(self):
        """Return per-solve and global timeout settings."""
        return self.config.get("timeout_settings", {})

    def get_best_results(self):
        """Return recorded best results keyed by board size (as stored, usually strings)."""
        return self.config.get("best_results", {})

    def save_best_results(self, summaries):
        """Merge per-N summaries into ``best_results`` and persist.

        Parameters
        ----------
        summaries : dict
            Mapping ``{N: {"success_rate": ..., "mean_steps": ...}}``. An
            existing entry is replaced only when the new success rate is
            higher, or equal with fewer mean steps.
        """
        best = self.config.setdefault("best_results", {})
        for n, summary in summaries.items():
            key = str(n)
            current = best.get(key)
            if current is None or _is_better(summary, current):
                best[key] = summary
        self.save_config()
        print(f"Best results saved to {self.config_path}")

    def update_setting(self, section, key, value):
        """Update a specific setting and persist the change immediately."""
        if section not in self.config:
            self.config[section] = {}
        self.config[section][key] = value
        self.save_config()


def _is_better(candidate, current):
    rate_new = candidate.get("success_rate", 0.0)
    rate_old = current.get("success_rate", 0.0)
    if rate_new != rate_old:
        return rate_new > rate_old
    steps_new = candidate.get("mean_steps")
    steps_old = current.get("mean_steps")
    if steps_new is None:
        return False
    return steps_old is None or steps_new < steps_old
