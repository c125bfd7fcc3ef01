"""Explain which task features drive a fitted duration model."""

from __future__ import annotations

from typing import Any

import numpy as np
from sklearn.pipeline import Pipeline


def _final_estimator(model: Any) -> Any:
    return model.steps[-1][1] if isinstance(model, Pipeline) else model


def explain_model(model: Any, feature_names: list[str], top_n: int = 10) -> dict:
    """Return the ``top_n`` task features with the largest absolute weight."""

    estimator = _final_estimator(model)
    if hasattr(estimator, "coef_"):
        kind, weights = "coefficients", estimator.coef_
    elif hasattr(estimator, "feature_importances_"):
        kind, weights = "feature_importances", estimator.feature_importances_
    else:
        return {"type": "unsupported", "top_features": []}

    values = np.asarray(weights, dtype=float).ravel()
    order = sorted(range(len(feature_names)), key=lambda i: (-abs(values[i]), feature_names[i]))[:top_n]
    return {
        "type": kind,
        "top_features": [{"feature": feature_names[i], "weight": float(values[i])} for i in order],
    }
