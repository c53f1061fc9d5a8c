# src/predspace/core/normalization.py
from __future__ import annotations
import logging
import numpy as np

logger = logging.getLogger(__name__)


def reference_range(train_scaled: np.ndarray) -> float:
    """
    Length of the training gradient: distance between the column-wise
    maximum and minimum vectors of the scaled (and weighted) training matrix.

    Identical training rows (or all-zero weights) give 0; normalised values
    are then inf (or NaN where the distance is 0 as well).
    """
    T = np.asarray(train_scaled, dtype=float)
    if T.ndim != 2:
        raise ValueError("train_scaled must be 2D (rows, features)")

    maxv = np.nanmax(T, axis=0)
    minv = np.nanmin(T, axis=0)
    r = float(np.linalg.norm(maxv - minv))

    if not np.isfinite(r):
        raise ValueError("training data contain no finite predictor values")
    if r == 0:
        logger.warning(
            "training data span no range in the (weighted) predictor space; "
            "normalised distances will be inf/NaN. Pass an explicit range to avoid this"
        )
    return r


def check_range(value: float) -> float:
    """Validate a caller-supplied reference range."""
    value = float(value)
    if not np.isfinite(value) or value <= 0:
        raise ValueError(f"range must be a positive number, got {value}")
    return value


def rescale_unit(x: np.ndarray) -> np.ndarray:
    """Linear min-max rescaling to [0, 1] over finite values; a constant vector maps to 0.5."""
    x = np.asarray(x, dtype=float)
    finite = np.isfinite(x)
    if not finite.any():
        return x.copy()

    lo = float(np.min(x[finite]))
    hi = float(np.max(x[finite]))
    if hi == lo:
        return np.where(finite, 0.5, x)
    return (x - lo) / (hi - lo)


def normalize_distances(
    min_dist: np.ndarray,
    reference: float,
    rescale: bool = False,
) -> np.ndarray:
    """
    Divide by the reference range. With `rescale=True` the result is
    additionally stretched to [0, 1], which makes it incomparable across runs.
    """
    reference = float(reference)
    if not np.isfinite(reference) or reference < 0:
        raise ValueError(f"reference range must be a non-negative number, got {reference}")

    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.asarray(min_dist, dtype=float) / reference
    if rescale:
        out = rescale_unit(out)
    return out
