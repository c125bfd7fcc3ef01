"""ML benchmarking pipeline for task duration regression."""

from __future__ import annotations

from typing import Any

import numpy as np
from sklearn.ensemble import GradientBoostingRegressor, RandomForestRegressor
from sklearn.linear_model import LinearRegression
from sklearn.metrics import mean_absolute_error, r2_score
from sklearn.model_selection import KFold, cross_validate, train_test_split
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from analytics_engine.prediction import completed_history
from analytics_engine.schema import PRIORITIES


def build_duration_table(tasks) -> tuple[np.ndarray, np.ndarray, list[str]]:
    """Build a deterministic (X, y, feature_names) table of completed task durations."""

    history = completed_history(tasks)
    if not history:
        return np.empty((0, 0)), np.array([], dtype=float), []

    tags = sorted({tag for task in history for tag in task.tags})
    feature_names = ["estimated_time", "tag_count"]
    feature_names += [f"priority={priority}" for priority in PRIORITIES]
    feature_names += [f"tag={tag}" for tag in tags]

    rows: list[list[float]] = []
    targets: list[float] = []
    for task in history:
        row = [float(task.estimated_time), float(len(task.tags))]
        row.extend(1.0 if task.priority == priority else 0.0 for priority in PRIORITIES)
        row.extend(1.0 if tag in task.tags else 0.0 for tag in tags)
        rows.append(row)
        targets.append(float(task.actual_time))

    return np.asarray(rows, dtype=float), np.asarray(targets, dtype=float), feature_names


def _make_models(seed: int) -> dict[str, Any]:
    return {
        "LinearRegression": Pipeline(
            [
                ("scaler", StandardScaler()),
                ("reg", LinearRegression()),
            ]
        ),
        "RandomForest": RandomForestRegressor(n_estimators=200, random_state=seed),
        "GradientBoosting": GradientBoostingRegressor(random_state=seed),
    }


def _safe_r2(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    if len(y_true) < 2 or float(np.var(y_true)) == 0.0:
        return 0.0
    return float(r2_score(y_true, y_pred))


def benchmark_regressors(X: np.ndarray, y: np.ndarray, seed: int = 42) -> dict:
    """Benchmark candidate duration regressors with a hold-out split + k-fold CV."""

    if len(X) < 2 or len(y) < 2:
        return {"models": {}, "best_model": None}

    models = _make_models(seed)
    X_train, X_test, y_train, y_test = train_test_split(X, y, test_size=0.25, random_state=seed)

    cv_folds = max(2, min(5, len(y_train)))
    cv = KFold(n_splits=cv_folds, shuffle=True, random_state=seed)

    report: dict[str, Any] = {"models": {}}

    for name, model in models.items():
        model_metrics: dict[str, Any] = {}

        if len(y_train) >= 2:
            cv_scores = cross_validate(model, X_train, y_train, cv=cv, scoring="neg_mean_absolute_error")
            mae = -np.asarray(cv_scores["test_score"])
            model_metrics["cv"] = {"mae": {"mean": float(np.mean(mae)), "std": float(np.std(mae))}}
        else:
            baseline = float(np.mean(np.abs(y_train - np.mean(y_train))))
            model_metrics["cv"] = {"mae": {"mean": baseline, "std": 0.0}}

        fitted = model.fit(X_train, y_train)
        y_pred = fitted.predict(X_test)
        model_metrics["test"] = {
            "mae": float(mean_absolute_error(y_test, y_pred)),
            "r2": _safe_r2(y_test, y_pred),
        }
        report["models"][name] = model_metrics

    ranked = sorted(report["models"].items(), key=lambda item: (item[1]["cv"]["mae"]["mean"], item[0]))
    report["ranking"] = [{"model": name, "cv_mae_mean": metrics["cv"]["mae"]["mean"]} for name, metrics in ranked]
    report["best_model"] = ranked[0][0] if ranked else None
    return report


def train_best_regressor(X: np.ndarray, y: np.ndarray) -> tuple[Any, dict]:
    """Train the best-performing regressor (by CV MAE) on full data."""

    report = benchmark_regressors(X, y, seed=42)
    best_name = report.get("best_model")
    if best_name is None:
        raise ValueError("Cannot train a duration model on fewer than two completed tasks")

    model = _make_models(seed=42)[best_name]
    model.fit(X, y)
    return model, report
