#!/usr/bin/env python3
"""
Estimate prediction uncertainty as the distance to the nearest training point
in predictor space, for a raster stack or a table of prediction locations.

Inputs
------
  --train        CSV with the predictor values at the training locations
  --predictors   one multi-band GeoTIFF, several single-band GeoTIFFs
                 (file stem = predictor name), or a CSV table

Optional weighting by variable importance:
  --model        joblib pickle of a fitted scikit-learn estimator
  --weights      CSV importance table (first column = predictor name)

Outputs are written into --out-dir:
  uncertainty.tif   (gridded predictors)  or  uncertainty.csv (tabular)
  uncertainty_run_metadata.json

Example
-------
python run_uncertainty.py \
  --train ./data/train.csv \
  --predictors ./data/predictors.tif \
  --model ./data/rf_model.joblib \
  --variables DEM Easting Northing \
  --workers 4 --parallel process \
  --out-dir ./data/uncertainty_out

Notes
-----
- Without --scale, values are distances divided by the length of the training
  gradient; 1 means as far away as the full training gradient.
- The worker pool is created here and handed to the engine.
"""

from __future__ import annotations

import argparse
import json
import logging
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import asdict
from pathlib import Path

import numpy as np
import pandas as pd

from predspace.core import DistanceConfig, UncertaintyConfig, estimate_uncertainty, importance_to_weights
from predspace.io import load_table, read_grid, write_grid, write_table

RASTER_SUFFIXES = {".tif", ".tiff", ".grd", ".img", ".vrt", ".nc"}


def _load_predictors(paths: list[str]):
    if len(paths) == 1 and Path(paths[0]).suffix.lower() not in RASTER_SUFFIXES:
        return load_table(paths[0])
    return read_grid(paths)


def _load_model(path: str):
    import joblib
    return joblib.load(path)


def _qa_plot(result, out_path: Path) -> None:
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(7, 5))
    if result.is_gridded:
        im = ax.imshow(result.values, cmap="viridis")
        fig.colorbar(im, ax=ax, label=result.layer_name)
        ax.set_axis_off()
    else:
        vals = result.values[np.isfinite(result.values)]
        ax.hist(vals, bins=50)
        ax.set_xlabel(result.layer_name)
        ax.set_ylabel("count")
    ax.set_title(f"reference range = {result.reference_range:.4g}")
    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Distance-based prediction uncertainty in predictor space.")
    p.add_argument("--train", type=str, required=True, help="CSV of training predictor values.")
    p.add_argument("--predictors", type=str, nargs="+", required=True,
                   help="Raster file(s) or a CSV table of prediction locations.")
    p.add_argument("--variables", type=str, nargs="+", default=["all"],
                   help="Predictor variables to use. Default: all numeric training columns.")
    p.add_argument("--weights", type=str, default=None,
                   help="CSV importance table: predictor names in the first column.")
    p.add_argument("--model", type=str, default=None,
                   help="joblib file of a fitted scikit-learn model to derive weights from.")
    p.add_argument("--scale", action="store_true", help="Rescale the output to [0, 1].")
    p.add_argument("--range", type=float, default=None,
                   help="Reference range. Default: detected from the training data.")
    p.add_argument("--workers", type=int, default=0, help="Worker pool size. 0 means serial.")
    p.add_argument("--parallel", type=str, default="process", choices=["process", "thread", "serial"])
    p.add_argument("--chunk-size", type=int, default=None, help="Query rows per distance block (memory bound).")
    p.add_argument("--task-rows", type=int, default=65_536, help="Query rows per worker task.")
    p.add_argument("--out-dir", type=str, default="./uncertainty_out")
    p.add_argument("--qa-plot", action="store_true", help="Save a QA figure (requires matplotlib).")
    p.add_argument("--verbose", action="store_true")
    return p


def main() -> None:
    args = build_argparser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    # -----------------------
    # Load inputs
    # -----------------------
    train = load_table(args.train)
    predictors = _load_predictors(args.predictors)
    model = _load_model(args.model) if args.model else None
    weights = importance_to_weights(pd.read_csv(args.weights, index_col=0)) if args.weights else None

    variables = "all" if args.variables == ["all"] else tuple(args.variables)
    cfg = UncertaintyConfig(variables=variables, scale=bool(args.scale), range=args.range)
    dist_cfg = DistanceConfig(chunk_size=args.chunk_size, task_rows=args.task_rows)

    # -----------------------
    # Run
    # -----------------------
    if args.parallel == "serial" or args.workers <= 0:
        result = estimate_uncertainty(train, predictors, weights=weights, model=model,
                                      config=cfg, distance_cfg=dist_cfg)
    else:
        Executor = ProcessPoolExecutor if args.parallel == "process" else ThreadPoolExecutor
        with Executor(max_workers=args.workers) as ex:
            result = estimate_uncertainty(train, predictors, weights=weights, model=model,
                                          config=cfg, executor=ex, distance_cfg=dist_cfg)

    # -----------------------
    # Save outputs
    # -----------------------
    if result.is_gridded:
        out_path = write_grid(out_dir / f"{result.layer_name}.tif", result)
    else:
        out_path = write_table(out_dir / f"{result.layer_name}.csv", result)

    finite = result.values[np.isfinite(result.values)]
    meta = {
        "train": str(args.train),
        "predictors": [str(p) for p in args.predictors],
        "model": args.model,
        "weights": args.weights,
        "n_train": int(len(train)),
        "n_values": int(result.values.size),
        "features": list(result.features),
        "feature_weights": None if result.weights is None else result.weights.tolist(),
        "weights_status": result.weights_status,
        "reference_range": result.reference_range,
        "rescaled": result.rescaled,
        "uncertainty_cfg": asdict(cfg),
        "distance_cfg": asdict(dist_cfg),
        "workers": int(args.workers),
        "parallel": args.parallel,
        "summary": {
            "min": float(finite.min()) if finite.size else None,
            "max": float(finite.max()) if finite.size else None,
            "mean": float(finite.mean()) if finite.size else None,
            "n_missing": int(result.values.size - finite.size),
        },
    }
    (out_dir / "uncertainty_run_metadata.json").write_text(json.dumps(meta, indent=2))

    if args.qa_plot:
        _qa_plot(result, out_dir / "uncertainty_qa.png")

    print(f"features: {', '.join(result.features)}")
    print(f"reference range: {result.reference_range:.6g}")
    print(f"Done. Wrote {out_path}")


if __name__ == "__main__":
    main()
