from datetime import datetime, timedelta

import numpy as np
import pytest

from analytics_engine.config import EngineConfig
from analytics_engine.prediction import confidence_score, predict
from analytics_engine.schema import Task

BASE = datetime(2025, 1, 1, 9, 0)


def done(task_id, actual, priority="high", tags=(), day=0, estimated=60.0):
    updated = BASE + timedelta(days=day)
    return Task(task_id, priority, "completed", estimated, BASE, updated, actual, tags=frozenset(tags))


def new_task(priority="high", tags=(), estimated=45.0):
    return Task("new", priority, "todo", estimated, BASE, BASE, tags=frozenset(tags))


def test_priority_matches_use_recency_weighted_mean():
    history = [done(f"h{i}", actual, day=i) for i, actual in enumerate([40, 50, 60, 70, 80])]

    prediction = predict(new_task(), history)

    assert 40 <= prediction.estimated_time <= 80
    # the newest samples are the slowest, so recency pulls the estimate above the plain mean
    assert prediction.estimated_time > 60
    assert prediction.confidence > 0
    assert prediction.factors == ("priority match", "recency weighting")
    assert prediction.tier == "priority"
    assert prediction.sample_size == 5


def test_empty_history_falls_back_to_own_estimate():
    prediction = predict(new_task(estimated=45), [])
    assert prediction.estimated_time == 45.0
    assert prediction.confidence == 0.0
    assert prediction.factors == ("own estimate",)
    assert prediction.tier == "none"


def test_broadens_to_tag_overlap_when_priority_matches_are_scarce():
    history = [
        done("h1", 60, priority="high", tags=("backend",), day=1),
        done("h2", 30, priority="low", tags=("backend",), day=2),
        done("h3", 40, priority="low", tags=("backend", "api"), day=3),
        done("h4", 500, priority="low", tags=("design",), day=4),
    ]
    prediction = predict(new_task(tags=("backend",)), history)
    assert prediction.tier == "tag_overlap"
    assert prediction.sample_size == 3
    assert prediction.factors[:2] == ("priority match", "tag overlap")
    assert prediction.estimated_time < 500


def test_falls_back_to_full_history():
    history = [done("h1", 30, priority="low", day=1), done("h2", 50, priority="medium", day=1)]
    prediction = predict(new_task(priority="urgent"), history)
    assert prediction.tier == "full_history"
    assert prediction.factors == ("full history",)
    assert prediction.estimated_time == pytest.approx(40.0)


def test_min_sample_size_is_configurable():
    history = [done("h1", 30, day=1), done("h2", 50, day=2), done("h3", 900, priority="low", day=3)]
    assert predict(new_task(), history).tier == "full_history"
    assert predict(new_task(), history, EngineConfig(min_sample_size=2)).tier == "priority"


def test_ignores_unusable_history_and_the_task_itself():
    history = [
        done("h1", 40, day=1),
        Task("open", "high", "in-progress", 60.0, BASE, BASE, 999.0),
        Task("no-actual", "high", "completed", 60.0, BASE, BASE),
        Task("new", "high", "completed", 60.0, BASE, BASE, 999.0),
        done("broken", -10, day=2),
    ]
    prediction = predict(new_task(), history)
    assert prediction.sample_size == 1
    assert prediction.estimated_time == 40.0


def test_uniform_recency_has_no_recency_factor():
    history = [done(f"h{i}", actual, day=0) for i, actual in enumerate([30, 60, 90])]
    prediction = predict(new_task(), history)
    assert prediction.estimated_time == pytest.approx(60.0)
    assert "recency weighting" not in prediction.factors


def test_prediction_is_deterministic():
    history = [done(f"h{i}", 30 + 7 * i, day=i) for i in range(6)]
    assert predict(new_task(), history) == predict(new_task(), list(reversed(history)))


@pytest.mark.parametrize("spread", [0.0, 5.0, 20.0])
def test_confidence_non_decreasing_in_sample_size_at_fixed_variance(spread):
    scores = []
    for repeats in range(1, 8):
        sample = np.array([60.0 - spread, 60.0 + spread] * repeats)
        scores.append(confidence_score(sample, sample_scale=3.0))
    assert all(later >= earlier for earlier, later in zip(scores, scores[1:]))
    assert all(0.0 <= score <= 1.0 for score in scores)


def test_confidence_drops_with_variance():
    tight = confidence_score(np.array([58.0, 60.0, 62.0]), sample_scale=3.0)
    loose = confidence_score(np.array([10.0, 60.0, 110.0]), sample_scale=3.0)
    assert tight > loose
    assert confidence_score(np.array([]), sample_scale=3.0) == 0.0
    assert confidence_score(np.array([0.0, 0.0]), sample_scale=3.0) == pytest.approx(0.4)


@pytest.mark.parametrize("estimated", [float("nan"), float("inf"), -10.0])
def test_unusable_own_estimate_without_history_is_reported(estimated):
    prediction = predict(new_task(estimated=estimated), [])
    assert prediction.estimated_time == 0.0
    assert prediction.confidence == 0.0
    assert prediction.factors == ("own estimate unavailable",)
    assert [w.record_id for w in prediction.warnings] == ["new"]
    assert prediction.to_dict()["warnings"][0]["record_id"] == "new"


def test_non_finite_history_is_skipped():
    history = [done("h0", 40), done("h1", float("nan"), day=1), done("h2", float("inf"), day=2)]
    prediction = predict(new_task(), history)
    assert prediction.estimated_time == 40.0
    assert prediction.sample_size == 1
    assert prediction.warnings == ()
