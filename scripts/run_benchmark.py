"""Benchmark duration regressors and backtest the completion predictor on a task export."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from analytics_engine.adapters import csv_adapter, json_adapter
from analytics_engine.config import EngineConfig
from analytics_engine.evaluator import backtest, compare
from analytics_engine.ml_pipeline import benchmark_regressors, build_duration_table


def _load_tasks(path: Path):
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return csv_adapter.parse_tasks(str(path))
    if suffix == ".json":
        return json_adapter.parse_tasks(str(path))
    raise ValueError("Unsupported input format, expected .csv or .json")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run task-duration benchmark")
    parser.add_argument("--data", required=True, help="Path to CSV/JSON task export")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    tasks = _load_tasks(Path(args.data))
    X, y, feature_names = build_duration_table(tasks)
    report = benchmark_regressors(X, y, seed=42)
    report["feature_names"] = feature_names
    report["n_tasks"] = int(len(y))

    predictor = backtest(tasks, EngineConfig.from_env())
    report["predictor_backtest"] = predictor
    report["predictor_vs_estimates"] = compare(predictor["estimate_mae"], predictor["predictor_mae"])

    print(json.dumps(report, indent=2))

    outputs_dir = Path("outputs")
    outputs_dir.mkdir(parents=True, exist_ok=True)
    out_path = outputs_dir / "benchmark_report.json"
    out_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    print(f"Saved benchmark report to {out_path}")


if __name__ == "__main__":
    main()
