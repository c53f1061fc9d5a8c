# src/predspace/core/scaling.py
from __future__ import annotations
from typing import Sequence
import numpy as np
import pandas as pd

from .types import ScaleParams


def fit_scale(train: pd.DataFrame, features: Sequence[str], ddof: int = 0) -> ScaleParams:
    """
    Root-mean-square spread of each feature, without centering:

      s_j = sqrt( sum_i x_ij^2 / (n_j - ddof) )

    NaNs are ignored. A zero (or undefined) spread gives s_j = 1.
    """
    X = train.loc[:, list(features)].to_numpy(dtype=float)   # (N, M)
    n = np.sum(np.isfinite(X), axis=0).astype(float)
    denom = n - ddof

    with np.errstate(invalid="ignore", divide="ignore"):
        s = np.sqrt(np.nansum(X**2, axis=0) / denom)

    s = np.where(np.isfinite(s) & (s > 0), s, 1.0)
    return ScaleParams(features=tuple(features), divisors=s)


def apply_scale(
    frame: pd.DataFrame,
    params: ScaleParams,
    weights: np.ndarray | None = None,
) -> np.ndarray:
    """
    Divide by the fitted divisors and, if given, multiply by the weights.
    Columns are picked by name, so column order in `frame` does not matter.
    """
    X = frame.loc[:, list(params.features)].to_numpy(dtype=float)   # (P, M)
    X = X / params.divisors[None, :]
    if weights is not None:
        w = np.asarray(weights, dtype=float)
        if w.shape != params.divisors.shape:
            raise ValueError(f"weights shape {w.shape} does not match {len(params.features)} features")
        X = X * w[None, :]
    return X
