# src/predspace/core/types.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Literal
import numpy as np
import pandas as pd


@dataclass(frozen=True)
class GridStack:
    """
    Gridded predictors, one band per feature.

    data    : (B, H, W) band-major, NaN marks missing cells
    names   : (B,) band / feature names
    profile : optional raster profile (crs, transform, ...) carried to the output
    """
    data: np.ndarray
    names: tuple[str, ...]
    profile: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        data = np.asarray(self.data, dtype=float)
        if data.ndim == 2:
            data = data[None, :, :]
        if data.ndim != 3:
            raise ValueError(f"grid data must be (B, H, W), got shape {data.shape}")

        names = tuple(str(n) for n in self.names)
        if len(names) != data.shape[0]:
            raise ValueError(
                f"got {len(names)} band names for {data.shape[0]} bands"
            )
        if len(set(names)) != len(names):
            raise ValueError(f"band names must be unique, got {names}")

        object.__setattr__(self, "data", data)
        object.__setattr__(self, "names", names)

    @property
    def shape(self) -> tuple[int, int]:
        return int(self.data.shape[1]), int(self.data.shape[2])

    @property
    def n_cells(self) -> int:
        h, w = self.shape
        return h * w

    def to_frame(self) -> pd.DataFrame:
        """Cells as rows (row-major order), bands as columns."""
        flat = self.data.reshape(self.data.shape[0], -1).T  # (H*W, B)
        return pd.DataFrame(flat, columns=list(self.names))


@dataclass(frozen=True)
class QueryTable:
    """Query predictors resolved to a flat table; `grid` kept for the inverse step."""
    kind: Literal["tabular", "gridded"]
    frame: pd.DataFrame
    grid: GridStack | None = None


@dataclass(frozen=True)
class WeightsResolved:
    weights: dict[str, float]


@dataclass(frozen=True)
class WeightsUnavailable:
    reason: str


WeightResolution = WeightsResolved | WeightsUnavailable


@dataclass(frozen=True)
class ScaleParams:
    """Per-feature divisors fitted on the training set."""
    features: tuple[str, ...]
    divisors: np.ndarray   # (M,)


@dataclass(frozen=True)
class DistanceConfig:
    chunk_size: int | None = None          # query rows per cdist block; None -> derived
    max_chunk_elements: int = 4_000_000    # chunk_size * N_train upper bound
    task_rows: int = 65_536                # query rows per executor task


@dataclass(frozen=True)
class UncertaintyConfig:
    variables: tuple[str, ...] | str = "all"
    scale: bool = False
    range: float | None = None
    ddof: int = 0
    layer_name: str = "uncertainty"


@dataclass(frozen=True)
class UncertaintyResult:
    """
    Normalised distance to the nearest training point.

    values          : (P,) for tabular queries, (H, W) for gridded queries
    reference_range : distance used for normalisation (kept in rescale mode too)
    features        : features that entered the distance, in training order
    weights         : (M,) weights aligned to `features`, or None if unweighted
    weights_status  : "resolved" or the reason weighting was disabled
    """
    values: np.ndarray
    reference_range: float
    features: tuple[str, ...]
    weights: np.ndarray | None
    weights_status: str
    rescaled: bool
    layer_name: str = "uncertainty"
    profile: dict[str, Any] | None = None

    @property
    def is_gridded(self) -> bool:
        return self.values.ndim == 2

    def as_grid(self) -> GridStack:
        if not self.is_gridded:
            raise ValueError("result was computed for tabular predictors")
        return GridStack(data=self.values[None, :, :], names=(self.layer_name,), profile=self.profile)
