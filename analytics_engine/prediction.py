"""Similarity-based completion time prediction."""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from analytics_engine.config import EngineConfig
from analytics_engine.schema import Prediction, Task
from analytics_engine.validation import split_tasks

logger = logging.getLogger(__name__)

TIER_PRIORITY = "priority"
TIER_TAG_OVERLAP = "tag_overlap"
TIER_FULL_HISTORY = "full_history"
TIER_NONE = "none"


def completed_history(historical_tasks) -> list[Task]:
    """Completed, well-formed tasks with a recorded actual time, oldest first."""

    valid, _ = split_tasks(historical_tasks)
    completed = [item for item in valid if item.is_completed and item.actual_time is not None]
    return sorted(completed, key=lambda item: (item.updated_at, item.task_id))


def usable_history(task: Task, historical_tasks) -> list[Task]:
    return [item for item in completed_history(historical_tasks) if item.task_id != task.task_id]


def select_similar(task: Task, history: list[Task], min_sample_size: int) -> tuple[str, list[Task]]:
    """Walk the fallback ladder: same priority, then priority or shared tag, then everything."""

    same_priority = [item for item in history if item.priority == task.priority]
    if len(same_priority) >= min_sample_size:
        return TIER_PRIORITY, same_priority

    broadened = [item for item in history if item.priority == task.priority or item.tags & task.tags]
    if len(broadened) >= min_sample_size:
        return TIER_TAG_OVERLAP, broadened

    if history:
        return TIER_FULL_HISTORY, list(history)
    return TIER_NONE, []


def recency_weights(tasks: list[Task], half_life_days: float) -> np.ndarray:
    """Exponential decay by age relative to the most recently updated task."""

    newest = max(item.updated_at for item in tasks)
    ages = np.array([(newest - item.updated_at).total_seconds() / 86400.0 for item in tasks])
    return np.power(0.5, ages / half_life_days)


def confidence_score(actual_times: np.ndarray, sample_scale: float) -> float:
    """Grow with sample size, shrink with relative spread; bounded to [0, 1]."""

    n = len(actual_times)
    if n == 0:
        return 0.0
    mean = float(np.mean(actual_times))
    cv = float(np.std(actual_times)) / mean if mean > 0 else 0.0
    score = (n / (n + sample_scale)) * (1.0 / (1.0 + cv))
    return max(0.0, min(1.0, score))


def _factors(task: Task, tier: str, selected: list[Task], weights: np.ndarray) -> tuple[str, ...]:
    if tier == TIER_NONE:
        return ("own estimate",)
    factors = []
    if any(item.priority == task.priority for item in selected):
        factors.append("priority match")
    if tier == TIER_TAG_OVERLAP and any(item.tags & task.tags for item in selected):
        factors.append("tag overlap")
    if tier == TIER_FULL_HISTORY:
        factors.append("full history")
    if len(selected) > 1 and float(np.ptp(weights)) > 0:
        factors.append("recency weighting")
    return tuple(factors)


def predict(task: Task, historical_tasks, config: Optional[EngineConfig] = None) -> Prediction:
    """Estimate minutes to complete ``task`` from comparable completed tasks."""

    config = config or EngineConfig()
    history = usable_history(task, historical_tasks)
    tier, selected = select_similar(task, history, config.min_sample_size)
    logger.debug("Task %s: %s tier with %d samples", task.task_id, tier, len(selected))

    _, own_warnings = split_tasks([task])

    if not selected:
        own_estimate = float(task.estimated_time)
        if not math.isfinite(own_estimate) or own_estimate < 0:
            return Prediction(0.0, 0.0, ("own estimate unavailable",), tier=tier, warnings=tuple(own_warnings))
        return Prediction(
            estimated_time=own_estimate,
            confidence=0.0,
            factors=_factors(task, tier, selected, np.array([])),
            sample_size=0,
            tier=tier,
            warnings=tuple(own_warnings),
        )

    actual_times = np.array([float(item.actual_time) for item in selected])
    weights = recency_weights(selected, config.recency_half_life_days)
    return Prediction(
        estimated_time=float(np.average(actual_times, weights=weights)),
        confidence=confidence_score(actual_times, config.confidence_sample_scale),
        factors=_factors(task, tier, selected, weights),
        sample_size=len(selected),
        tier=tier,
        warnings=tuple(own_warnings),
    )
