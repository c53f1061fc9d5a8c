# src/predspace/core/weights.py
"""
Predictor weights, either given directly or derived from the variable
importance of a fitted model.

An unusable weight source is an expected outcome, so resolution returns
`WeightsResolved` / `WeightsUnavailable` instead of raising.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Mapping, Sequence
import numpy as np
import pandas as pd

from .types import WeightResolution, WeightsResolved, WeightsUnavailable

logger = logging.getLogger(__name__)

ImportanceFn = Callable[[Any], Any]


def sklearn_importance(model: Any) -> pd.DataFrame:
    """
    Variable importance of a fitted scikit-learn estimator, indexed by feature.

    - tree ensembles: `feature_importances_` -> single "Overall" column
    - linear models: |coef_|, one column per class for multi-class models
    """
    names = getattr(model, "feature_names_in_", None)
    if names is None:
        raise AttributeError(
            f"{type(model).__name__} has no feature_names_in_; fit it on a DataFrame with named columns"
        )
    names = [str(n) for n in names]

    if hasattr(model, "feature_importances_"):
        imp = np.asarray(model.feature_importances_, dtype=float)
        return pd.DataFrame({"Overall": imp}, index=names)

    if hasattr(model, "coef_"):
        coef = np.abs(np.atleast_2d(np.asarray(model.coef_, dtype=float)))  # (K, M)
        if coef.shape[0] == 1:
            return pd.DataFrame({"Overall": coef[0]}, index=names)
        classes = getattr(model, "classes_", np.arange(coef.shape[0]))
        return pd.DataFrame(coef.T, index=names, columns=[str(c) for c in classes])

    raise AttributeError(f"{type(model).__name__} exposes neither feature_importances_ nor coef_")


def importance_to_weights(table: Any) -> dict[str, float]:
    """
    Collapse an importance table (features as index) to one weight per feature.

    An "Overall" column, or a single column, is used as is; per-class columns
    are averaged.
    """
    if isinstance(table, pd.Series):
        table = table.to_frame("Overall")
    if not isinstance(table, pd.DataFrame):
        raise TypeError(f"importance table must be a pandas DataFrame, got {type(table).__name__}")
    if table.empty:
        raise ValueError("importance table is empty")

    numeric = table.select_dtypes(include="number")
    if "Overall" in numeric.columns:
        col = numeric["Overall"]
    elif numeric.shape[1] == 1:
        col = numeric.iloc[:, 0]
    elif numeric.shape[1] > 1:
        col = numeric.mean(axis=1)
    else:
        raise ValueError("importance table has no numeric columns")

    return _as_weight_dict(col)


def weights_from_mapping(weights: Any) -> dict[str, float]:
    """Accepts a mapping, a Series (index=features) or a one-row DataFrame (columns=features)."""
    if isinstance(weights, pd.DataFrame):
        if len(weights) != 1:
            raise ValueError(f"weight DataFrame must have exactly one row, got {len(weights)}")
        weights = weights.iloc[0]
    if isinstance(weights, pd.Series):
        return _as_weight_dict(weights)
    if isinstance(weights, Mapping):
        return _as_weight_dict(pd.Series(dict(weights), dtype=float))
    raise TypeError(f"unsupported weight source {type(weights).__name__}")


def _as_weight_dict(col: pd.Series) -> dict[str, float]:
    vals = pd.to_numeric(col, errors="raise").astype(float)
    if not np.all(np.isfinite(vals.to_numpy())):
        raise ValueError("weights must be finite")
    return {str(k): float(v) for k, v in vals.items()}


def resolve_weights(
    weights: Any = None,
    model: Any = None,
    importance_fn: ImportanceFn | None = None,
) -> WeightResolution:
    """
    Resolve the weight source. A model, when given, is authoritative.
    """
    if model is not None:
        if weights is not None:
            logger.info("both weights and model were given; weights are derived from the model")
        fn = importance_fn if importance_fn is not None else sklearn_importance
        try:
            return WeightsResolved(importance_to_weights(fn(model)))
        except Exception as e:
            return WeightsUnavailable(
                f"no variable importance could be retrieved from the given model ({type(e).__name__}: {e})"
            )

    if weights is None:
        return WeightsUnavailable("no weights or model were given")

    try:
        return WeightsResolved(weights_from_mapping(weights))
    except (TypeError, ValueError) as e:
        return WeightsUnavailable(f"weights could not be read ({e})")


def align_weights(
    weights: Mapping[str, float],
    features: Sequence[str],
) -> tuple[list[str], np.ndarray]:
    """
    Restrict `features` to those with a weight and return weights in that order.
    Negative weights are set to 0.
    """
    kept = [f for f in features if f in weights]
    w = np.array([weights[f] for f in kept], dtype=float)

    if np.any(w < 0):
        neg = [f for f, v in zip(kept, w) if v < 0]
        logger.warning("negative weights were set to 0: %s", neg)
        w = np.clip(w, 0.0, None)

    return kept, w
