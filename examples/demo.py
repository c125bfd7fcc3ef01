"""Demo script for the analytics engine."""

import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from analytics_engine.adapters.csv_adapter import parse_tasks, parse_time_entries
from analytics_engine.engine import AnalyticsEngine
from analytics_engine.schema import AdvisoryHint, UserPreferences


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    tasks = parse_tasks("examples/sample_tasks.csv")
    entries = parse_time_entries("examples/sample_time_entries.csv")
    engine = AnalyticsEngine()

    metrics = engine.compute_metrics(tasks, entries)
    insights = engine.generate_insights(tasks, entries, preferences=UserPreferences())
    team = engine.aggregate_team(tasks, entries, ["alice", "bob"])
    pending = next(task for task in tasks if task.task_id == "t10")
    prediction = engine.predict(pending, tasks)
    advisory = AdvisoryHint(priority_hint="high", suggestions=("Start the cache layer before load testing",))
    recommendations = engine.compose_recommendations(metrics, insights, team, advisory=advisory)

    print("Metrics:", json.dumps(metrics.to_dict(), indent=2))
    print("Insights:", json.dumps(insights.to_dict(), indent=2))
    print("Team:", json.dumps(team.to_dict(), indent=2))
    print("Prediction for t10:", json.dumps(prediction.to_dict(), indent=2))
    print("Recommendations:", json.dumps(recommendations.to_dict(), indent=2))


if __name__ == "__main__":
    main()
