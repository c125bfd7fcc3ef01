"""Stateless service facade over the analytics functions."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Mapping, Optional, Union

from analytics_engine.config import EngineConfig
from analytics_engine.insights import generate_insights
from analytics_engine.metrics import compute_metrics
from analytics_engine.prediction import predict
from analytics_engine.recommendations import compose_recommendations
from analytics_engine.schema import (
    AdvisoryHint,
    Prediction,
    ProductivityMetrics,
    Recommendations,
    Task,
    TeamAnalytics,
    UserInsights,
    UserPreferences,
)
from analytics_engine.team import aggregate_team

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineFailure:
    """Placeholder result for a batch item whose computation raised."""

    key: str
    error: str

    def to_dict(self) -> dict:
        return {"key": self.key, "error": self.error}


@dataclass(frozen=True)
class AnalyticsEngine:
    """
    Bundles an EngineConfig with the engine operations.

    Holds no mutable state, so one instance can serve concurrent callers and
    differently configured instances never interfere.
    """

    config: EngineConfig = field(default_factory=EngineConfig)

    def compute_metrics(self, tasks, time_entries) -> ProductivityMetrics:
        return compute_metrics(tasks, time_entries, self.config)

    def generate_insights(
        self,
        tasks,
        time_entries,
        preferences: Optional[UserPreferences] = None,
        advisory: Optional[AdvisoryHint] = None,
    ) -> UserInsights:
        return generate_insights(tasks, time_entries, preferences, self.config, advisory)

    def aggregate_team(self, team_tasks, team_time_entries, members) -> TeamAnalytics:
        return aggregate_team(team_tasks, team_time_entries, members, self.config)

    def predict(self, task: Task, historical_tasks) -> Prediction:
        return predict(task, historical_tasks, self.config)

    def compose_recommendations(
        self,
        metrics: ProductivityMetrics,
        insights: UserInsights,
        team_analytics: TeamAnalytics,
        advisory: Optional[AdvisoryHint] = None,
    ) -> Recommendations:
        return compose_recommendations(metrics, insights, team_analytics, self.config, advisory)

    def _metrics_or_failure(self, key: str, snapshot) -> Union[ProductivityMetrics, EngineFailure]:
        try:
            tasks, entries = snapshot
            return self.compute_metrics(tasks, entries)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Metrics computation failed for %s", key)
            return EngineFailure(key=key, error=f"{type(exc).__name__}: {exc}")

    def batch_metrics(
        self, snapshots: Mapping[str, tuple], max_workers: Optional[int] = None
    ) -> dict[str, Union[ProductivityMetrics, EngineFailure]]:
        """
        Compute metrics for many independent (tasks, entries) snapshots in parallel.

        A snapshot that raises yields an EngineFailure for its key; the rest of
        the batch still completes. Results keep the input key order.
        """
        keys = list(snapshots)
        if not keys:
            return {}
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(lambda key: self._metrics_or_failure(key, snapshots[key]), keys))
        return dict(zip(keys, results))
