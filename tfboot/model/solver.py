# tfboot/model/solver.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

import numpy as np

from tfboot.errors import SolverError, SolverErrorKind

logger = logging.getLogger(__name__)

# Tried in order when no solver is forced; uninstalled ones are skipped.
DEFAULT_PREFERENCE: Tuple[str, ...] = ("CLARABEL", "ECOS", "OSQP", "SCS")


@dataclass(frozen=True)
class PosPenaltyObjective:
    """
    0.5 * ||y - beta||_2^2 + lam * sum_j max(0, (A beta)_j), beta free in R^n.
    """
    y: np.ndarray
    A: np.ndarray
    lam: float

    @property
    def n(self) -> int:
        return int(self.y.size)

    def value(self, beta: np.ndarray) -> float:
        beta = np.asarray(beta, dtype=float).ravel()
        resid = self.y - beta
        pen = np.maximum(0.0, self.A @ beta).sum() if self.A.size else 0.0
        return float(0.5 * resid @ resid + self.lam * pen)


class ConvexSolver(Protocol):
    """Anything that can minimise a PosPenaltyObjective."""
    name: str

    def minimize(self, objective: PosPenaltyObjective) -> np.ndarray: ...


@dataclass
class CvxpySolver:
    """
    cvxpy-backed adapter.

    Parameters
    ----------
    solver : str, optional
        Force a single cvxpy solver (e.g. "CLARABEL"). Otherwise the installed
        solvers in `preference` are tried in turn until one reports optimal.
    accept_inaccurate : bool, default=False
        Treat OPTIMAL_INACCURATE as success instead of a numerical failure.
    solver_opts : dict
        Passed through to `Problem.solve` (e.g. time_limit, max_iter).
    """
    solver: Optional[str] = None
    preference: Sequence[str] = DEFAULT_PREFERENCE
    accept_inaccurate: bool = False
    verbose: bool = False
    solver_opts: Dict[str, Any] = field(default_factory=dict)
    name: str = "cvxpy"

    def _candidates(self, installed: Sequence[str]) -> Tuple[str, ...]:
        if self.solver is not None:
            return (self.solver.upper(),)
        chosen = tuple(s for s in self.preference if s in installed)
        if not chosen:
            raise SolverError(SolverErrorKind.NUMERICAL_FAILURE,
                              f"none of {tuple(self.preference)} is installed (have {tuple(installed)})")
        return chosen

    def minimize(self, objective: PosPenaltyObjective) -> np.ndarray:
        import cvxpy as cp  # imported lazily so other adapters work without it
        from cvxpy import settings as cvx_settings
        from cvxpy.error import SolverError as CvxpySolverError

        n = objective.n
        beta = cp.Variable(n)
        obj = 0.5 * cp.sum_squares(objective.y - beta)
        if objective.lam > 0 and objective.A.shape[0] > 0:
            obj = obj + objective.lam * cp.sum(cp.pos(objective.A @ beta))
        prob = cp.Problem(cp.Minimize(obj))

        ok = {cp.OPTIMAL}
        if self.accept_inaccurate:
            ok.add(cp.OPTIMAL_INACCURATE)

        failure: Optional[SolverError] = None
        for cand in self._candidates(cp.installed_solvers()):
            try:
                prob.solve(solver=cand, verbose=self.verbose, **self.solver_opts)
            except CvxpySolverError as exc:
                failure = SolverError(SolverErrorKind.NUMERICAL_FAILURE, f"{cand}: {exc}",
                                      context={"solver": cand})
                logger.debug("cvxpy solver %s raised: %s", cand, exc)
                continue

            status = prob.status
            if status in ok and beta.value is not None:
                logger.debug("cvxpy solver %s: status=%s objective=%.6g", cand, status, prob.value)
                return np.asarray(beta.value, dtype=float).ravel()

            failure = SolverError(_kind_from_status(status, cp, cvx_settings),
                                  f"{cand} returned status '{status}'",
                                  context={"solver": cand})
            logger.debug("cvxpy solver %s did not converge: %s", cand, status)

        if failure is None:
            raise SolverError(SolverErrorKind.NUMERICAL_FAILURE, "no cvxpy solver was tried")
        raise failure


def _kind_from_status(status: str, cp: Any, cvx_settings: Any) -> SolverErrorKind:
    if status in (cp.INFEASIBLE, cp.INFEASIBLE_INACCURATE):
        return SolverErrorKind.INFEASIBLE
    if status in (cp.UNBOUNDED, cp.UNBOUNDED_INACCURATE):
        return SolverErrorKind.UNBOUNDED
    if status == cvx_settings.USER_LIMIT:
        return SolverErrorKind.TIMEOUT
    return SolverErrorKind.NUMERICAL_FAILURE
