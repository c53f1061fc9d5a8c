from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from predspace.core import apply_scale, fit_scale


def test_root_mean_square_divisor():
    train = pd.DataFrame({"a": [0.0, 10.0], "b": [0.0, 10.0]})
    params = fit_scale(train, ["a", "b"])
    np.testing.assert_allclose(params.divisors, [np.sqrt(50.0)] * 2)
    assert params.divisors[0] == pytest.approx(7.0710678)


def test_ddof_one_divisor():
    train = pd.DataFrame({"a": [0.0, 10.0]})
    params = fit_scale(train, ["a"], ddof=1)
    np.testing.assert_allclose(params.divisors, [10.0])


def test_zero_spread_gives_unit_divisor():
    train = pd.DataFrame({"a": [0.0, 0.0, 0.0], "b": [1.0, 2.0, 3.0]})
    params = fit_scale(train, ["a", "b"])
    assert params.divisors[0] == 1.0


def test_no_centering():
    train = pd.DataFrame({"a": [2.0, 2.0]})
    params = fit_scale(train, ["a"])
    np.testing.assert_allclose(apply_scale(train, params), [[1.0], [1.0]])


def test_query_scaled_with_training_divisors_by_name():
    train = pd.DataFrame({"a": [0.0, 10.0], "b": [0.0, 2.0]})
    query = pd.DataFrame({"b": [2.0], "a": [10.0], "extra": [99.0]})
    params = fit_scale(train, ["a", "b"])

    Q = apply_scale(query, params)
    T = apply_scale(train, params)
    np.testing.assert_allclose(Q[0], T[1])


def test_weights_multiply_scaled_columns():
    train = pd.DataFrame({"a": [0.0, 10.0], "b": [0.0, 10.0]})
    params = fit_scale(train, ["a", "b"])
    X = apply_scale(train, params, np.array([2.0, 0.0]))
    np.testing.assert_allclose(X[1], [2 * 10.0 / np.sqrt(50.0), 0.0])


def test_weight_length_mismatch_raises():
    train = pd.DataFrame({"a": [0.0, 10.0], "b": [0.0, 10.0]})
    params = fit_scale(train, ["a", "b"])
    with pytest.raises(ValueError):
        apply_scale(train, params, np.array([1.0]))
