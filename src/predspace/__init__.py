"""
Prediction uncertainty from distances in predictor space.

This package provides:
- Distance of prediction locations to the nearest training point, after
  scaling and optional importance weighting of the predictors
- Normalisation by the length of the training gradient
- Gridded (raster) and tabular predictors, serial or on a worker pool
"""
from .core import (
    GridStack,
    UncertaintyConfig,
    DistanceConfig,
    UncertaintyResult,
    estimate_uncertainty,
)

__all__ = [
    "GridStack",
    "UncertaintyConfig",
    "DistanceConfig",
    "UncertaintyResult",
    "estimate_uncertainty",
]
