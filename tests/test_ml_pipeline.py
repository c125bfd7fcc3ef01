from datetime import datetime, timedelta

import pytest

from analytics_engine.explain import explain_model
from analytics_engine.ml_pipeline import benchmark_regressors, build_duration_table, train_best_regressor
from analytics_engine.schema import Task

BASE = datetime(2025, 1, 1, 9, 0)


def sample_tasks():
    rows = [
        ("t1", "high", 60, 75, ("backend",)),
        ("t2", "low", 30, 25, ("docs",)),
        ("t3", "urgent", 30, 45, ("bug", "auth")),
        ("t4", "high", 120, 150, ("backend", "design")),
        ("t5", "medium", 60, 60, ("planning",)),
        ("t6", "high", 90, 140, ("backend", "auth")),
        ("t7", "low", 20, 20, ("docs",)),
        ("t8", "medium", 45, 50, ("review",)),
        ("t9", "urgent", 15, 30, ("bug",)),
        ("t10", "high", 100, 120, ("backend",)),
        ("t11", "medium", 40, 35, ("review", "docs")),
        ("t12", "low", 25, 30, ("planning",)),
    ]
    tasks = [
        Task(task_id, priority, "completed", est, BASE, BASE + timedelta(days=i), actual, tags=frozenset(tags))
        for i, (task_id, priority, est, actual, tags) in enumerate(rows)
    ]
    tasks.append(Task("open", "high", "todo", 60.0, BASE, BASE))
    return tasks


def test_build_duration_table_smoke():
    X, y, feature_names = build_duration_table(sample_tasks())
    assert X.shape == (12, len(feature_names))
    assert len(y) == 12
    assert feature_names[:2] == ["estimated_time", "tag_count"]
    assert "priority=urgent" in feature_names
    assert "tag=backend" in feature_names


def test_benchmark_regressors_smoke():
    X, y, _ = build_duration_table(sample_tasks())
    report = benchmark_regressors(X, y, seed=42)

    assert report["best_model"] in report["models"]
    for name in ("LinearRegression", "RandomForest", "GradientBoosting"):
        assert name in report["models"]
        assert report["models"][name]["test"]["mae"] >= 0.0
        assert report["models"][name]["cv"]["mae"]["mean"] >= 0.0
    assert [item["model"] for item in report["ranking"]][0] == report["best_model"]


def test_benchmark_on_empty_table():
    X, y, names = build_duration_table([])
    assert names == []
    assert benchmark_regressors(X, y) == {"models": {}, "best_model": None}
    with pytest.raises(ValueError):
        train_best_regressor(X, y)


def test_explain_best_model():
    X, y, feature_names = build_duration_table(sample_tasks())
    model, _ = train_best_regressor(X, y)
    explanation = explain_model(model, feature_names, top_n=5)
    assert explanation["type"] in ("coefficients", "feature_importances")
    assert len(explanation["top_features"]) == 5
    assert all(item["feature"] in feature_names for item in explanation["top_features"])


def test_explain_unsupported_model():
    assert explain_model(object(), ["a"]) == {"type": "unsupported", "top_features": []}
