from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor

import numpy as np
import pytest

from predspace.core import DistanceConfig, min_distances, running_min_distances


@pytest.fixture
def arrays():
    rng = np.random.default_rng(42)
    train = rng.normal(size=(37, 4))
    query = rng.normal(scale=2.0, size=(203, 4))
    return train, query


def test_chunked_matches_running_minimum(arrays):
    train, query = arrays
    d = min_distances(train, query, config=DistanceConfig(chunk_size=16))
    np.testing.assert_allclose(d, running_min_distances(train, query), atol=1e-9)


def test_chunk_size_does_not_change_result(arrays):
    train, query = arrays
    a = min_distances(train, query, config=DistanceConfig(chunk_size=1))
    b = min_distances(train, query)
    np.testing.assert_allclose(a, b, rtol=0, atol=1e-12)


def test_thread_pool_matches_serial(arrays):
    train, query = arrays
    serial = min_distances(train, query, config=DistanceConfig(chunk_size=10))
    with ThreadPoolExecutor(max_workers=4) as ex:
        par = min_distances(train, query, executor=ex, config=DistanceConfig(chunk_size=10, task_rows=30))
    np.testing.assert_allclose(par, serial, atol=1e-9)


def test_process_pool_matches_serial(arrays):
    train, query = arrays
    serial = min_distances(train, query, config=DistanceConfig(chunk_size=25))
    with ProcessPoolExecutor(max_workers=2) as ex:
        par = min_distances(train, query, executor=ex, config=DistanceConfig(chunk_size=25, task_rows=60))
    np.testing.assert_allclose(par, serial, atol=1e-9)


def test_training_rows_have_zero_distance(arrays):
    train, _ = arrays
    np.testing.assert_allclose(min_distances(train, train[5:12]), 0.0, atol=1e-12)


def test_known_distance():
    train = np.array([[0.0, 0.0], [10.0, 10.0]])
    query = np.array([[3.0, 4.0], [10.0, 12.0]])
    np.testing.assert_allclose(min_distances(train, query), [5.0, 2.0])


def test_single_training_row():
    d = min_distances(np.array([[1.0, 1.0]]), np.array([[1.0, 2.0], [4.0, 5.0]]))
    np.testing.assert_allclose(d, [1.0, 5.0])


def test_nan_query_rows_give_nan():
    train = np.array([[0.0, 0.0], [1.0, 1.0]])
    query = np.array([[np.nan, 0.0], [1.0, 1.0]])
    d = min_distances(train, query)
    assert np.isnan(d[0])
    assert d[1] == 0.0


def test_empty_query():
    assert min_distances(np.zeros((2, 3)), np.zeros((0, 3))).shape == (0,)


def test_column_mismatch_raises():
    with pytest.raises(ValueError, match="feature mismatch"):
        min_distances(np.zeros((2, 3)), np.zeros((4, 2)))


def test_bad_chunk_size_raises(arrays):
    train, query = arrays
    with pytest.raises(ValueError):
        min_distances(train, query, config=DistanceConfig(chunk_size=0))


class _CountingExecutor(ThreadPoolExecutor):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.n_submitted = 0

    def submit(self, fn, /, *args, **kwargs):
        self.n_submitted += 1
        return super().submit(fn, *args, **kwargs)


def test_task_rows_bounds_number_of_tasks(arrays):
    train, query = arrays   # 203 query rows
    serial = min_distances(train, query, config=DistanceConfig(chunk_size=8))
    with _CountingExecutor(max_workers=2) as ex:
        par = min_distances(train, query, executor=ex, config=DistanceConfig(chunk_size=8, task_rows=100))
    assert ex.n_submitted == 3
    np.testing.assert_allclose(par, serial, atol=1e-9)


def test_default_task_rows_submits_single_task_for_small_query(arrays):
    train, query = arrays
    with _CountingExecutor(max_workers=2) as ex:
        min_distances(train, query, executor=ex, config=DistanceConfig(chunk_size=8))
    assert ex.n_submitted == 1


def test_bad_task_rows_raises(arrays):
    train, query = arrays
    with pytest.raises(ValueError):
        min_distances(train, query, config=DistanceConfig(task_rows=0))
