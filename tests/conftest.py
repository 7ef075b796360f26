"""Shared fixtures: BLAS thread pinning, the canonical series and fake solver adapters."""

import os
from typing import Callable, Optional

import numpy as np
import pytest

from tfboot.data.base import Series
from tfboot.errors import SolverError, SolverErrorKind
from tfboot.model.solver import PosPenaltyObjective

Y_CANONICAL = [0.0, 2.0, 1.0, 3.0, 2.0, 4.0]


@pytest.fixture(autouse=True, scope="session")
def _limit_blas_threads():
    os.environ.setdefault("OMP_NUM_THREADS", "1")
    os.environ.setdefault("OPENBLAS_NUM_THREADS", "1")
    os.environ.setdefault("MKL_NUM_THREADS", "1")


@pytest.fixture
def y_canonical() -> np.ndarray:
    """Returns y = [0, 2, 1, 3, 2, 4]."""
    return np.array(Y_CANONICAL)


@pytest.fixture
def canonical_series() -> Series:
    """Returns the canonical series with keys 1..6."""
    return Series.from_values(Y_CANONICAL, name="canonical")


class IdentitySolver:
    """Returns y unchanged (the lam=0 minimiser) so replicate estimates equal the resampled values."""
    name = "identity"

    def minimize(self, objective: PosPenaltyObjective) -> np.ndarray:
        return np.array(objective.y, dtype=float)


class FailingSolver(IdentitySolver):
    """Raises `kind` whenever `should_fail(objective)` is true, otherwise behaves like IdentitySolver."""
    name = "failing"

    def __init__(self, kind: SolverErrorKind = SolverErrorKind.NUMERICAL_FAILURE,
                 should_fail: Optional[Callable[[PosPenaltyObjective], bool]] = None):
        self.kind = kind
        self.should_fail = should_fail or (lambda obj: True)

    def minimize(self, objective: PosPenaltyObjective) -> np.ndarray:
        if self.should_fail(objective):
            raise SolverError(self.kind, "forced failure")
        return super().minimize(objective)


@pytest.fixture
def identity_solver() -> IdentitySolver:
    return IdentitySolver()


@pytest.fixture
def failing_solver() -> Callable[..., FailingSolver]:
    """Factory: failing_solver(kind=..., should_fail=...)."""
    return FailingSolver
