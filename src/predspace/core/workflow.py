# src/predspace/core/workflow.py
from __future__ import annotations
from concurrent.futures import Executor
import logging
from typing import Any
import numpy as np
import pandas as pd

from .types import DistanceConfig, UncertaintyConfig, UncertaintyResult, WeightsResolved
from .features import select_features
from .weights import ImportanceFn, align_weights, resolve_weights
from .scaling import apply_scale, fit_scale
from .distance import min_distances
from .normalization import check_range, normalize_distances, reference_range
from .shapes import as_query, restore_shape

logger = logging.getLogger(__name__)


def _check_train_size(n: int) -> None:
    if n < 2:
        raise ValueError(f"at least two training points need to be specified, got {n}")


def estimate_uncertainty(
    train: pd.DataFrame,
    predictors: Any,
    weights: Any = None,
    model: Any = None,
    config: UncertaintyConfig = UncertaintyConfig(),
    executor: Executor | None = None,
    distance_cfg: DistanceConfig = DistanceConfig(),
    importance_fn: ImportanceFn | None = None,
) -> UncertaintyResult:
    """
    Distance of each prediction location to the nearest training point in
    predictor space, as a measure of prediction uncertainty.

    Steps:
      1) flatten gridded predictors to a table
      2) select features shared by train and predictors
      3) resolve weights (model importance or given mapping); fall back to unweighted
      4) scale (no centering) with divisors fitted on train, apply weights
      5) nearest-training-point distance per query row (serial or on `executor`)
      6) divide by the training gradient length (or `config.range`), optionally rescale to [0, 1]
      7) restore the grid layout

    A value of 0.5 means the nearest training point is half the length of the
    training gradient away; values above 1 lie outside what the model was
    trained on. With `config.scale=True` values are rescaled to [0, 1] and can
    no longer be compared between models; `reference_range` is kept on the
    result either way.
    """
    if not isinstance(train, pd.DataFrame):
        raise TypeError(f"train must be a pandas DataFrame, got {type(train).__name__}")
    _check_train_size(len(train))
    train = train.rename(columns=str)

    # 1) shape
    query = as_query(predictors)

    # 2) features
    features = select_features(train, query.frame.columns, config.variables)

    # 3) weights
    resolution = resolve_weights(weights=weights, model=model, importance_fn=importance_fn)
    w: np.ndarray | None = None
    if isinstance(resolution, WeightsResolved):
        features, w = align_weights(resolution.weights, features)
        if not features:
            raise ValueError("none of the selected predictor variables has a weight")
        status = "resolved"
    else:
        logger.info(
            "note: variables were not weighted either because no weights or model were given, "
            "or no variable importance could be retrieved from the given model: %s",
            resolution.reason,
        )
        status = resolution.reason

    # 4) scaling
    train_sel = train.loc[:, features]
    complete = train_sel.dropna()
    if len(complete) < len(train_sel):
        logger.info("dropped %d training rows with missing predictor values", len(train_sel) - len(complete))
    _check_train_size(len(complete))

    params = fit_scale(complete, features, ddof=config.ddof)
    T = apply_scale(complete, params, w)
    Q = apply_scale(query.frame, params, w)

    # 5) distances
    mind = min_distances(T, Q, executor=executor, config=distance_cfg)

    # 6) normalisation
    ref = check_range(config.range) if config.range is not None else reference_range(T)
    values = normalize_distances(mind, ref, rescale=config.scale)

    # 7) back to input layout
    return restore_shape(
        query,
        values,
        reference_range=ref,
        features=tuple(features),
        weights=w,
        weights_status=status,
        rescaled=config.scale,
        layer_name=config.layer_name,
    )
