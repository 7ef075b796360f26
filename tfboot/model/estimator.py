# tfboot/model/estimator.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np

from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.metrics import r2_score
from sklearn.utils.validation import check_is_fitted

from tfboot.data.utils import sort_by_key
from .difference import finite_difference
from .formulate import formulate_and_solve
from .solver import ConvexSolver


class PosTrendFilter(BaseEstimator, RegressorMixin):
    """
    Positive-part (shape-constrained) trend filter with a scikit-learn style API.

    Parameters
    ----------
    order : int, default=1
        1 -> penalise decreases (isotonic limit), 2 -> penalise concavity (convex limit).
    lam : float, default=1.0
        Penalty weight; 0 reproduces the data.
    solver : ConvexSolver, optional
        Solver adapter; defaults to the cvxpy adapter.

    Attributes (after fit)
    ----------------------
    alpha_ : (n,)        fitted trend, in key order
    beta_  : (n-order,)  finite differences of alpha_
    keys_  : (n,)        ordering keys used (0..n-1 when X is None)
    runtime_s_ : float
    n_features_in_ : int
    """

    def __init__(self,
                 order: int = 1,
                 lam: float = 1.0,
                 solver: Optional[ConvexSolver] = None):
        self.order = order
        self.lam = lam
        self.solver = solver

    def fit(self, X, y=None):
        """
        Fit on y. Preferred call: fit(None, y).
        If X is given it is used as the ordering key and rows are sorted by it first.
        """
        if y is None:
            if X is None:
                raise ValueError("y must be provided.")
            y, X = X, None
        y = np.asarray(y, dtype=float).ravel()
        if X is None:
            keys = np.arange(y.size, dtype=float)
        else:
            keys = np.asarray(X, dtype=float).ravel()
            if keys.size != y.size:
                raise ValueError(f"X has {keys.size} rows but y has {y.size}")
            keys, y = sort_by_key(keys, y)

        res = formulate_and_solve(y, lam=self.lam, order=self.order, solver=self.solver)

        self.alpha_ = np.asarray(res.estimate, dtype=float)
        self.beta_ = finite_difference(self.alpha_, res.order)
        self.keys_ = keys
        self.runtime_s_ = res.runtime_s
        self.solver_name_ = res.solver
        self.n_features_in_ = int(y.size)
        return self

    def predict(self, X=None) -> np.ndarray:
        """
        Fitted trend. With X=None it is returned in key order; with keys X the
        values are laid out in X's row order (rows matched by key rank).
        """
        check_is_fitted(self, ["alpha_"])
        if X is None or np.ndim(X) == 0:
            return self.alpha_
        keys = np.asarray(X, dtype=float).ravel()
        if keys.size != self.n_features_in_:
            raise ValueError("Predict called with different number of points than fit.")
        out = np.empty_like(self.alpha_)
        out[np.argsort(keys, kind="stable")] = self.alpha_
        return out

    def score(self, X, y) -> float:
        y = np.asarray(y, dtype=float).ravel()
        return float(r2_score(y, self.predict(X)))

    @property
    def info_(self) -> Dict[str, Any]:
        check_is_fitted(self, ["alpha_"])
        return {
            "order": int(self.order),
            "lam": float(self.lam),
            "solver": self.solver_name_,
            "runtime_s": self.runtime_s_,
            "beta": self.beta_.tolist(),
        }
