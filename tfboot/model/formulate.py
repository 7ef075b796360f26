# tfboot/model/formulate.py
from __future__ import annotations
import logging
import math
import time
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from tfboot.data.base import Series
from tfboot.errors import InvalidInput, SolverError, SolverErrorKind
from .difference import build_difference_matrix, SUPPORTED_ORDERS
from .solver import ConvexSolver, CvxpySolver, PosPenaltyObjective

logger = logging.getLogger(__name__)

SeriesLike = Union[Series, np.ndarray, list]


@dataclass(frozen=True)
class FitResult:
    """Minimiser of the pos-penalty objective for one (series, order, lam)."""
    estimate: np.ndarray
    order: int
    lam: float
    solver: str
    runtime_s: float

    @property
    def n(self) -> int:
        return int(self.estimate.size)


def default_solver() -> ConvexSolver:
    return CvxpySolver()


def validate_fit_params(n: int, lam: float, order: int) -> None:
    if isinstance(order, bool) or not isinstance(order, (int, np.integer)) or int(order) not in SUPPORTED_ORDERS:
        raise InvalidInput(f"order must be one of {SUPPORTED_ORDERS}, got {order!r}")
    try:
        lam_f = float(lam)
    except (TypeError, ValueError):
        raise InvalidInput(f"lam must be a real number, got {lam!r}") from None
    if not math.isfinite(lam_f) or lam_f < 0:
        raise InvalidInput(f"lam must be finite and >= 0, got {lam!r}")
    if n < int(order) + 1:
        raise InvalidInput(f"series of length {n} too short for order={order} (need >= {int(order) + 1})")


def _values_of(series: SeriesLike) -> np.ndarray:
    y = series.values if isinstance(series, Series) else np.asarray(series, dtype=float).ravel()
    if y.size and not np.all(np.isfinite(y)):
        raise InvalidInput("series contains non-finite values")
    return y


def formulate_and_solve(series: SeriesLike,
                        lam: float,
                        order: int,
                        solver: Optional[ConvexSolver] = None) -> FitResult:
    """
    Solve:  min_beta  0.5*||y - beta||_2^2 + lam * sum_j pos(-(D^{(order)} beta)_j)

    Only differences of the "wrong" sign are penalised. order=1 charges every
    decrease, so large lam forces a non-decreasing (isotonic) fit; order=2
    charges every negative second difference, so large lam forces a discretely
    convex fit. lam=0 returns y.

    Solver failures are re-raised with (n, order, lam) attached to `context`.
    """
    y = _values_of(series)
    n = y.size
    validate_fit_params(n, lam, order)
    order, lam = int(order), float(lam)

    solver = solver or default_solver()
    objective = PosPenaltyObjective(y=y, A=-build_difference_matrix(order, n), lam=lam)

    t0 = time.perf_counter()
    try:
        beta = solver.minimize(objective)
    except SolverError as err:
        raise err.with_context(n=n, order=order, lam=lam)
    runtime = time.perf_counter() - t0

    beta = np.array(beta, dtype=float).ravel()
    if beta.shape != (n,) or not np.all(np.isfinite(beta)):
        raise SolverError(SolverErrorKind.NUMERICAL_FAILURE,
                          f"solver '{getattr(solver, 'name', solver)}' returned an invalid vector "
                          f"(shape {beta.shape}, finite={bool(np.all(np.isfinite(beta)))})",
                          context={"n": n, "order": order, "lam": lam})
    beta.setflags(write=False)
    logger.debug("fit n=%d order=%d lam=%.4g in %.3fs", n, order, lam, runtime)
    return FitResult(estimate=beta, order=order, lam=lam,
                     solver=str(getattr(solver, "name", type(solver).__name__)),
                     runtime_s=float(runtime))
