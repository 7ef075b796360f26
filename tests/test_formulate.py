"""Tests for formulate_and_solve with the cvxpy adapter and with fake adapters."""

import numpy as np
import pytest
from sklearn.isotonic import IsotonicRegression

from tfboot.data.base import Series
from tfboot.errors import InvalidInput, SolverError, SolverErrorKind
from tfboot.model.formulate import formulate_and_solve
from tfboot.model.solver import CvxpySolver, PosPenaltyObjective
from tfboot.model.difference import build_difference_matrix

EPS = 1e-4


@pytest.mark.parametrize("order", [1, 2])
def test_zero_lambda_returns_input(y_canonical, order):
    """Tests that lam=0 reproduces the observations for both orders."""
    res = formulate_and_solve(y_canonical, lam=0.0, order=order)
    np.testing.assert_allclose(res.estimate, y_canonical, atol=1e-6)
    assert res.order == order and res.lam == 0.0


def test_accepts_series(canonical_series, y_canonical):
    """Tests that a Series is fitted on its values."""
    res = formulate_and_solve(canonical_series, lam=0.0, order=1)
    np.testing.assert_allclose(res.estimate, y_canonical, atol=1e-6)


def test_large_lambda_order1_is_isotonic_regression(y_canonical):
    """Tests that a large order-1 penalty gives the isotonic least-squares fit."""
    res = formulate_and_solve(y_canonical, lam=1000.0, order=1)
    assert np.all(np.diff(res.estimate) >= -EPS)
    keys = np.arange(1, 7, dtype=float)
    ref = IsotonicRegression().fit_transform(keys, y_canonical)
    np.testing.assert_allclose(ref, [0.0, 1.5, 1.5, 2.5, 2.5, 4.0])
    np.testing.assert_allclose(res.estimate, ref, atol=1e-3)


def test_large_lambda_order2_is_convex():
    """Tests that a large order-2 penalty gives non-negative second differences."""
    rng = np.random.default_rng(1)
    t = np.linspace(-1.0, 1.0, 25)
    y = np.sin(3.0 * t) + 0.2 * rng.standard_normal(t.size)
    res = formulate_and_solve(y, lam=1000.0, order=2)
    assert np.all(np.diff(res.estimate, n=2) >= -EPS)


def test_solution_minimises_objective(y_canonical):
    """Tests that the fit beats the data and random perturbations on the objective."""
    lam = 0.44
    res = formulate_and_solve(y_canonical, lam=lam, order=1)
    obj = PosPenaltyObjective(y=y_canonical, A=-build_difference_matrix(1, 6), lam=lam)
    best = obj.value(res.estimate)
    assert best <= obj.value(y_canonical) + 1e-7
    rng = np.random.default_rng(2)
    for _ in range(20):
        assert best <= obj.value(res.estimate + 0.05 * rng.standard_normal(6)) + 1e-7


def test_penalty_only_charges_violations():
    """Tests that a non-decreasing series is left unchanged by any order-1 penalty."""
    y = np.array([0.0, 0.5, 0.5, 2.0, 3.0])
    res = formulate_and_solve(y, lam=50.0, order=1)
    np.testing.assert_allclose(res.estimate, y, atol=1e-5)


def test_estimate_is_read_only(y_canonical):
    """Tests that FitResult.estimate cannot be modified in place."""
    res = formulate_and_solve(y_canonical, lam=0.1, order=1)
    with pytest.raises(ValueError):
        res.estimate[0] = 10.0


@pytest.mark.parametrize(
    "y,lam,order",
    [
        ([0.0, 1.0, 2.0], -0.1, 1),
        ([0.0, 1.0, 2.0], float("nan"), 1),
        ([0.0, 1.0, 2.0], 1.0, 3),
        ([0.0, 1.0, 2.0], 1.0, 0),
        ([0.0], 1.0, 1),
        ([0.0, 1.0], 1.0, 2),
        ([0.0, np.inf, 2.0], 1.0, 1),
    ],
)
def test_invalid_input(y, lam, order, identity_solver):
    """Tests that bad lam, order, length or values raise InvalidInput before solving."""
    with pytest.raises(InvalidInput):
        formulate_and_solve(y, lam=lam, order=order, solver=identity_solver)


@pytest.mark.parametrize("kind", list(SolverErrorKind))
def test_solver_error_propagates_with_context(y_canonical, failing_solver, kind):
    """Tests that the adapter's error kind is kept and tagged with (n, order, lam)."""
    with pytest.raises(SolverError) as info:
        formulate_and_solve(y_canonical, lam=2.0, order=2, solver=failing_solver(kind=kind))
    err = info.value
    assert err.kind is kind
    assert err.context == {"n": 6, "order": 2, "lam": 2.0}
    assert "n=6" in str(err)


def test_invalid_solution_vector_is_numerical_failure(y_canonical):
    """Tests that a wrong-shaped solver output is reported, not returned."""

    class ShortSolver:
        name = "short"

        def minimize(self, objective):
            return objective.y[:-1]

    with pytest.raises(SolverError) as info:
        formulate_and_solve(y_canonical, lam=1.0, order=1, solver=ShortSolver())
    assert info.value.kind is SolverErrorKind.NUMERICAL_FAILURE


def test_unknown_forced_solver_is_numerical_failure(y_canonical):
    """Tests that a cvxpy solver error surfaces as a SolverError, not a silent fallback."""
    with pytest.raises(SolverError) as info:
        formulate_and_solve(y_canonical, lam=1.0, order=1, solver=CvxpySolver(solver="NOT_A_SOLVER"))
    assert info.value.kind is SolverErrorKind.NUMERICAL_FAILURE


def test_objective_value_matches_definition():
    """Tests PosPenaltyObjective.value on a hand-computed case."""
    y = np.array([0.0, 2.0, 1.0])
    obj = PosPenaltyObjective(y=y, A=-build_difference_matrix(1, 3), lam=2.0)
    # beta = y: residual 0, one decrease of size 1
    assert obj.value(y) == pytest.approx(2.0)
    assert obj.value(np.array([0.0, 1.5, 1.5])) == pytest.approx(0.5 * (0.25 + 0.25))


def test_series_too_short_from_series():
    """Tests the length check on Series input."""
    with pytest.raises(InvalidInput):
        formulate_and_solve(Series.from_values([1.0, 2.0]), lam=1.0, order=2)


def test_empty_candidate_list_is_numerical_failure(y_canonical, monkeypatch):
    """Tests that an adapter with no solver to try raises instead of returning nothing."""
    monkeypatch.setattr(CvxpySolver, "_candidates", lambda self, installed: ())
    with pytest.raises(SolverError) as info:
        formulate_and_solve(y_canonical, lam=1.0, order=1, solver=CvxpySolver())
    assert info.value.kind is SolverErrorKind.NUMERICAL_FAILURE
    assert "no cvxpy solver" in str(info.value)
