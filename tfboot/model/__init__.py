from .difference import finite_difference, build_difference_matrix
from .solver import ConvexSolver, CvxpySolver, PosPenaltyObjective
from .formulate import FitResult, formulate_and_solve

__all__ = [
    "finite_difference", "build_difference_matrix",
    "ConvexSolver", "CvxpySolver", "PosPenaltyObjective",
    "FitResult", "formulate_and_solve",
]
