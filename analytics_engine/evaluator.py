"""Chronological backtest of the completion predictor."""

from __future__ import annotations

from typing import Optional

from analytics_engine.config import EngineConfig
from analytics_engine.prediction import completed_history, predict


def backtest(history, config: Optional[EngineConfig] = None) -> dict:
    """
    Replay completed tasks in completion order, predicting each from those finished before it.

    Reports the predictor's mean absolute error next to the error of simply
    trusting each task's own estimate.
    """

    config = config or EngineConfig()
    ordered = completed_history(history)
    if not ordered:
        return {"samples": 0, "predictor_mae": 0.0, "estimate_mae": 0.0, "mean_confidence": 0.0}

    predictor_errors = []
    estimate_errors = []
    confidences = []
    for index, task in enumerate(ordered):
        prediction = predict(task, ordered[:index], config)
        predictor_errors.append(abs(prediction.estimated_time - task.actual_time))
        estimate_errors.append(abs(task.estimated_time - task.actual_time))
        confidences.append(prediction.confidence)

    n = len(ordered)
    return {
        "samples": n,
        "predictor_mae": sum(predictor_errors) / n,
        "estimate_mae": sum(estimate_errors) / n,
        "mean_confidence": sum(confidences) / n,
    }


def compare(baseline_mae: float, candidate_mae: float) -> dict:
    """Percentage error reduction of the candidate over the baseline."""

    def pct_change(old: float, new: float) -> float:
        if old == 0:
            return 0.0
        return ((new - old) / old) * 100.0

    return {
        "baseline_mae": baseline_mae,
        "candidate_mae": candidate_mae,
        "mae_reduction_pct": -pct_change(baseline_mae, candidate_mae),
    }
