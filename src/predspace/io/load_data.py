# src/predspace/io/load_data.py
from __future__ import annotations
from pathlib import Path
from typing import Sequence
import numpy as np
import pandas as pd
import rasterio

from predspace.core import GridStack, UncertaintyResult


def load_table(path: str | Path) -> pd.DataFrame:
    """Training data or tabular predictors as CSV (header row = feature names)."""
    return pd.read_csv(Path(path))


def _read_bands(path: Path) -> tuple[np.ndarray, list[str | None], dict]:
    with rasterio.open(path) as src:
        data = src.read(masked=True).astype(float).filled(np.nan)   # (B, H, W)
        descriptions = list(src.descriptions)
        profile = dict(src.profile)
    return data, descriptions, profile


def read_grid(
    paths: str | Path | Sequence[str | Path],
    names: Sequence[str] | None = None,
) -> GridStack:
    """
    Read gridded predictors.

    - one multi-band raster: band descriptions are the feature names
    - several single-band rasters: file stems are the feature names
    `names` overrides both. Nodata cells become NaN.
    """
    if isinstance(paths, (str, Path)):
        paths = [paths]
    paths = [Path(p) for p in paths]
    if not paths:
        raise ValueError("no raster paths given")

    bands: list[np.ndarray] = []
    band_names: list[str] = []
    profile: dict | None = None

    for p in paths:
        data, descriptions, prof = _read_bands(p)
        if profile is None:
            profile = prof
        elif data.shape[1:] != bands[0].shape:
            raise ValueError(
                f"{p} has shape {data.shape[1:]}, expected {bands[0].shape} like {paths[0]}"
            )

        for i in range(data.shape[0]):
            bands.append(data[i])
            desc = descriptions[i] if i < len(descriptions) else None
            if data.shape[0] == 1 and (len(paths) > 1 or not desc):
                band_names.append(p.stem)
            elif desc:
                band_names.append(desc)
            else:
                band_names.append(f"{p.stem}_{i + 1}")

    if names is not None:
        band_names = [str(n) for n in names]

    return GridStack(data=np.stack(bands, axis=0), names=tuple(band_names), profile=profile)


def write_grid(path: str | Path, result: UncertaintyResult) -> Path:
    """Write a gridded result as single-band float32 GeoTIFF."""
    grid = result.as_grid()
    h, w = grid.shape
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    profile = dict(grid.profile or {})
    profile.update(driver="GTiff", count=1, dtype="float32", nodata=np.nan, height=h, width=w)

    with rasterio.open(path, "w", **profile) as dst:
        dst.write(grid.data[0].astype(np.float32), 1)
        dst.set_band_description(1, result.layer_name)
    return path


def write_table(path: str | Path, result: UncertaintyResult) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame({result.layer_name: result.values.ravel()}).to_csv(path, index=False)
    return path
