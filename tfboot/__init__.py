"""Positive-part trend filtering with pointwise bootstrap confidence bands."""
from .errors import (
    TrendFilterError,
    InvalidInput,
    InsufficientReplicates,
    SolverError,
    SolverErrorKind,
    BootstrapFailed,
)
from .data.base import Series
from .model.difference import finite_difference, build_difference_matrix
from .model.solver import ConvexSolver, CvxpySolver, PosPenaltyObjective
from .model.formulate import FitResult, formulate_and_solve
from .model.estimator import PosTrendFilter
from .bootstrap.resample import resample
from .bootstrap.aggregate import AggregatedResult, AggregatedRow, aggregate
from .bootstrap.engine import bootstrap_ci

__all__ = [
    "TrendFilterError", "InvalidInput", "InsufficientReplicates", "SolverError", "SolverErrorKind",
    "BootstrapFailed", "Series", "finite_difference", "build_difference_matrix", "ConvexSolver",
    "CvxpySolver", "PosPenaltyObjective", "FitResult", "formulate_and_solve", "PosTrendFilter",
    "resample", "AggregatedResult", "AggregatedRow", "aggregate", "bootstrap_ci",
]
__version__ = "0.1.0"
