"""Tests for the scikit-learn style PosTrendFilter."""

import numpy as np
import pytest
from sklearn.base import clone

from tfboot.model.estimator import PosTrendFilter


def test_zero_lambda_fit_predict(y_canonical):
    """Tests fit(None, y) with lam=0 reproduces y and scores R^2 = 1."""
    est = PosTrendFilter(order=1, lam=0.0).fit(None, y_canonical)
    np.testing.assert_allclose(est.predict(None), y_canonical, atol=1e-6)
    np.testing.assert_allclose(est.beta_, np.diff(est.alpha_))
    assert est.score(None, y_canonical) == pytest.approx(1.0, abs=1e-6)
    assert est.n_features_in_ == 6


def test_keys_sort_rows_before_fitting(y_canonical):
    """Tests that X is used as the ordering key."""
    perm = np.array([3, 0, 5, 1, 4, 2])
    keys = np.arange(1.0, 7.0)
    est = PosTrendFilter(order=1, lam=1000.0).fit(keys[perm], y_canonical[perm])
    np.testing.assert_array_equal(est.keys_, keys)
    np.testing.assert_allclose(est.alpha_, [0.0, 1.5, 1.5, 2.5, 2.5, 4.0], atol=1e-3)


def test_predict_length_mismatch(y_canonical):
    """Tests that predict rejects a different number of points."""
    est = PosTrendFilter(lam=0.0).fit(None, y_canonical)
    with pytest.raises(ValueError):
        est.predict(np.zeros(3))


def test_params_and_info(y_canonical, identity_solver):
    """Tests get_params/clone and the info_ summary."""
    est = PosTrendFilter(order=2, lam=0.5, solver=identity_solver)
    assert est.get_params()["lam"] == 0.5
    assert clone(est).get_params()["order"] == 2
    info = est.fit(None, y_canonical).info_
    assert info["solver"] == "identity"
    assert info["order"] == 2 and len(info["beta"]) == 4


def test_predict_and_score_follow_row_order(identity_solver):
    """Tests that predict(X) lines up with X's rows when the keys arrive unsorted."""
    keys = np.array([3.0, 1.0, 2.0])
    y = np.array([30.0, 10.0, 20.0])
    est = PosTrendFilter(order=1, lam=0.0, solver=identity_solver).fit(keys, y)
    np.testing.assert_array_equal(est.alpha_, [10.0, 20.0, 30.0])
    np.testing.assert_array_equal(est.predict(keys), y)
    np.testing.assert_array_equal(est.predict(None), [10.0, 20.0, 30.0])
    assert est.score(keys, y) == pytest.approx(1.0)
