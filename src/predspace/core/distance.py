# src/predspace/core/distance.py
from __future__ import annotations
from concurrent.futures import Executor, as_completed
import logging
import numpy as np
from scipy.spatial.distance import cdist

from .types import DistanceConfig

logger = logging.getLogger(__name__)


def _chunk_min_distance(train: np.ndarray, query_chunk: np.ndarray, block_rows: int) -> np.ndarray:
    """
    Nearest-training-row Euclidean distance for each row of `query_chunk`,
    computed in blocks of `block_rows` so that the (block, N) matrix stays bounded.
    """
    out = np.empty(query_chunk.shape[0], dtype=float)
    for s, e in _chunk_bounds(query_chunk.shape[0], block_rows):
        d = cdist(query_chunk[s:e], train, metric="euclidean")   # (b, N)
        out[s:e] = d.min(axis=1)
    return out


def _chunk_bounds(n_rows: int, chunk_size: int) -> list[tuple[int, int]]:
    return [(s, min(s + chunk_size, n_rows)) for s in range(0, n_rows, chunk_size)]


def _resolve_chunk_size(n_train: int, n_query: int, cfg: DistanceConfig) -> int:
    if cfg.chunk_size is not None:
        if cfg.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        return int(cfg.chunk_size)
    return max(1, min(n_query, cfg.max_chunk_elements // max(n_train, 1)))


def min_distances(
    train: np.ndarray,
    query: np.ndarray,
    executor: Executor | None = None,
    config: DistanceConfig = DistanceConfig(),
) -> np.ndarray:
    """
    Minimum Euclidean distance from every query row to the training rows.

    Parameters
    ----------
    train : (N, M) scaled (and weighted) training matrix
    query : (P, M) scaled (and weighted) query matrix
    executor : optional caller-owned thread/process pool. Query rows are split
        into tasks of `config.task_rows` rows, submitted to it and placed back
        by index. None -> serial.

    Notes
    -----
    Every task carries its own copy of `train` (pickled for process pools), so
    fewer, larger tasks are cheaper; `task_rows` sets that trade-off. Inside a
    task, rows are processed in blocks of `config.chunk_size`, the same blocks
    as in the serial path.

    Returns
    -------
    (P,) distances; NaN for query rows containing NaN.
    """
    T = np.asarray(train, dtype=float)
    Q = np.asarray(query, dtype=float)
    if T.ndim != 2 or Q.ndim != 2:
        raise ValueError("train and query must be 2D (rows, features)")
    if T.shape[1] != Q.shape[1]:
        raise ValueError(f"feature mismatch: train has {T.shape[1]} columns, query has {Q.shape[1]}")
    if T.shape[0] < 1:
        raise ValueError("train must have at least one row")
    if config.task_rows < 1:
        raise ValueError("task_rows must be >= 1")

    P = Q.shape[0]
    out = np.empty(P, dtype=float)
    if P == 0:
        return out

    block = _resolve_chunk_size(T.shape[0], P, config)

    if executor is None:
        return _chunk_min_distance(T, Q, block)

    bounds = _chunk_bounds(P, max(block, int(config.task_rows)))
    logger.debug("dispatching %d tasks of <=%d query rows to %s", len(bounds), bounds[0][1], type(executor).__name__)
    futures = {executor.submit(_chunk_min_distance, T, Q[s:e], block): (s, e) for s, e in bounds}
    for fut in as_completed(futures):
        s, e = futures[fut]
        out[s:e] = fut.result()

    return out


def running_min_distances(train: np.ndarray, query: np.ndarray) -> np.ndarray:
    """
    Reference strategy: fold over training rows, keeping a running minimum
    per query row.
    """
    T = np.asarray(train, dtype=float)
    Q = np.asarray(query, dtype=float)

    mind = np.full(Q.shape[0], np.inf)
    for t in T:
        d = np.sqrt(np.sum((Q - t[None, :]) ** 2, axis=1))
        mind = np.minimum(mind, d)
    return mind
