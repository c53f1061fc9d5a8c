# src/predspace/core/features.py
from __future__ import annotations
from typing import Iterable, Sequence
import pandas as pd

ALL = "all"


def numeric_columns(frame: pd.DataFrame) -> list[str]:
    return [str(c) for c in frame.select_dtypes(include="number").columns]


def select_features(
    train: pd.DataFrame,
    query_columns: Iterable[str],
    variables: Sequence[str] | str = ALL,
) -> list[str]:
    """
    Features used for the distance, in training-column order.

    `variables="all"` takes every numeric training column. Requested names
    missing from the training or query columns are dropped without notice.
    """
    query_cols = {str(c) for c in query_columns}

    if isinstance(variables, str):
        if variables != ALL:
            variables = [variables]
        else:
            variables = numeric_columns(train)

    wanted = {str(v) for v in variables}
    selected = [str(c) for c in train.columns if str(c) in wanted and str(c) in query_cols]

    if not selected:
        raise ValueError(
            "No predictor variables in common between the training data and the predictors. "
            f"Requested: {sorted(wanted)}"
        )

    non_numeric = [c for c in selected if not pd.api.types.is_numeric_dtype(train[c])]
    if non_numeric:
        raise ValueError(f"Predictor variables must be numeric, got non-numeric columns {non_numeric}")

    return selected
