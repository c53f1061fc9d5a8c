# src/predspace/core/__init__.py
from .types import (
    GridStack,
    QueryTable,
    WeightsResolved,
    WeightsUnavailable,
    ScaleParams,
    DistanceConfig,
    UncertaintyConfig,
    UncertaintyResult,
)

from .workflow import estimate_uncertainty

__all__ = [
    "GridStack",
    "QueryTable",
    "WeightsResolved",
    "WeightsUnavailable",
    "ScaleParams",
    "DistanceConfig",
    "UncertaintyConfig",
    "UncertaintyResult",
    "estimate_uncertainty",
]

from .features import select_features
from .weights import resolve_weights, align_weights, sklearn_importance, importance_to_weights
from .scaling import fit_scale, apply_scale
from .distance import min_distances, running_min_distances
from .normalization import reference_range, check_range, normalize_distances, rescale_unit
from .shapes import as_query, restore_shape
__all__ += [
    "select_features",
    "resolve_weights",
    "align_weights",
    "sklearn_importance",
    "importance_to_weights",
    "fit_scale",
    "apply_scale",
    "min_distances",
    "running_min_distances",
    "reference_range",
    "check_range",
    "normalize_distances",
    "rescale_unit",
    "as_query",
    "restore_shape",
]
