# src/predspace/core/shapes.py
from __future__ import annotations
from typing import Any
import numpy as np
import pandas as pd

from .types import GridStack, QueryTable, UncertaintyResult


def as_query(predictors: Any) -> QueryTable:
    """Resolve tabular vs gridded predictors once; everything downstream sees a flat table."""
    if isinstance(predictors, GridStack):
        return QueryTable(kind="gridded", frame=predictors.to_frame(), grid=predictors)
    if isinstance(predictors, pd.DataFrame):
        return QueryTable(kind="tabular", frame=predictors.rename(columns=str))
    raise TypeError(
        f"predictors must be a pandas DataFrame or a GridStack, got {type(predictors).__name__}"
    )


def restore_shape(
    query: QueryTable,
    values: np.ndarray,
    *,
    reference_range: float,
    features: tuple[str, ...],
    weights: np.ndarray | None,
    weights_status: str,
    rescaled: bool,
    layer_name: str = "uncertainty",
) -> UncertaintyResult:
    values = np.asarray(values, dtype=float)
    if values.shape != (len(query.frame),):
        raise ValueError(f"expected {len(query.frame)} values, got shape {values.shape}")

    profile = None
    if query.kind == "gridded":
        h, w = query.grid.shape
        values = values.reshape(h, w)
        profile = query.grid.profile

    return UncertaintyResult(
        values=values,
        reference_range=float(reference_range),
        features=tuple(features),
        weights=weights,
        weights_status=weights_status,
        rescaled=rescaled,
        layer_name=layer_name,
        profile=profile,
    )
