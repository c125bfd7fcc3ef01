"""
Print analytics reports for task and time-entry exports as JSON.

Usage examples:

    python scripts/run_report.py metrics --tasks tasks.csv --entries entries.csv
    python scripts/run_report.py team --tasks tasks.csv --entries entries.csv --member alice --member bob
    python scripts/run_report.py predict --tasks tasks.csv --task-id t42
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from analytics_engine.adapters import csv_adapter, json_adapter
from analytics_engine.config import ConfigurationError, EngineConfig
from analytics_engine.engine import AnalyticsEngine


def _adapter(path: Path):
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return csv_adapter
    if suffix == ".json":
        return json_adapter
    raise SystemExit(f"Unsupported input format for {path}, expected .csv or .json")


def _load(args: argparse.Namespace):
    tasks_path = Path(args.tasks)
    tasks = _adapter(tasks_path).parse_tasks(str(tasks_path))
    entries = []
    if getattr(args, "entries", None):
        entries_path = Path(args.entries)
        entries = _adapter(entries_path).parse_time_entries(str(entries_path))
    return tasks, entries


def cmd_metrics(engine: AnalyticsEngine, args: argparse.Namespace) -> dict:
    tasks, entries = _load(args)
    return engine.compute_metrics(tasks, entries).to_dict()


def cmd_insights(engine: AnalyticsEngine, args: argparse.Namespace) -> dict:
    tasks, entries = _load(args)
    return engine.generate_insights(tasks, entries).to_dict()


def cmd_team(engine: AnalyticsEngine, args: argparse.Namespace) -> dict:
    tasks, entries = _load(args)
    members = args.member or sorted({task.assignee for task in tasks if task.assignee})
    return engine.aggregate_team(tasks, entries, members).to_dict()


def cmd_predict(engine: AnalyticsEngine, args: argparse.Namespace) -> dict:
    tasks, _ = _load(args)
    matches = [task for task in tasks if task.task_id == args.task_id]
    if not matches:
        raise SystemExit(f"[predict] Task {args.task_id!r} not found in {args.tasks}")
    return engine.predict(matches[0], tasks).to_dict()


def cmd_recommend(engine: AnalyticsEngine, args: argparse.Namespace) -> dict:
    tasks, entries = _load(args)
    members = args.member or sorted({task.assignee for task in tasks if task.assignee})
    metrics = engine.compute_metrics(tasks, entries)
    insights = engine.generate_insights(tasks, entries)
    team = engine.aggregate_team(tasks, entries, members)
    return engine.compose_recommendations(metrics, insights, team).to_dict()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Task analytics reports")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, handler, help_text in (
        ("metrics", cmd_metrics, "Productivity metrics for a snapshot."),
        ("insights", cmd_insights, "Peak hours, task types and suggestions."),
        ("team", cmd_team, "Team distribution, bottlenecks and collaboration."),
        ("recommend", cmd_recommend, "Personal, team and system recommendations."),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--tasks", required=True, help="Task export (.csv or .json)")
        sub.add_argument("--entries", help="Time-entry export (.csv or .json)")
        if name in ("team", "recommend"):
            sub.add_argument("--member", action="append", help="Team member id; repeatable")
        sub.set_defaults(func=handler)

    pred = subparsers.add_parser("predict", help="Estimate completion time of one task.")
    pred.add_argument("--tasks", required=True, help="Task export holding the task and its history")
    pred.add_argument("--task-id", required=True, help="Id of the task to estimate")
    pred.set_defaults(func=cmd_predict)
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        engine = AnalyticsEngine(EngineConfig.from_env())
    except ConfigurationError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    print(json.dumps(args.func(engine, args), indent=2))


if __name__ == "__main__":
    main()
