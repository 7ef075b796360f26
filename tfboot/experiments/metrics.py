from __future__ import annotations
import numpy as np
from typing import Dict, Any, Optional, Sequence, Union, List

from tfboot.bootstrap.aggregate import AggregatedResult

ArrayLike = Union[np.ndarray, Sequence[float], List[float]]


def mse(y_true: np.ndarray, y_hat: np.ndarray) -> float:
    return float(np.mean((y_true - y_hat) ** 2))


def mae(y_true: np.ndarray, y_hat: np.ndarray) -> float:
    return float(np.mean(np.abs(y_true - y_hat)))


def shape_violations(estimate: ArrayLike, order: int, tol: float = 1e-6) -> int:
    """Number of order-th differences below -tol (decreases for order 1, concave kinks for order 2)."""
    d = np.diff(np.asarray(estimate, dtype=float).ravel(), n=order)
    return int(np.sum(d < -tol))


def band_coverage(lower: ArrayLike, upper: ArrayLike, y_true: ArrayLike) -> float:
    lo = np.asarray(lower, dtype=float)
    hi = np.asarray(upper, dtype=float)
    f = np.asarray(y_true, dtype=float).ravel()
    return float(np.mean((f >= lo) & (f <= hi)))


def compute_metrics(result: AggregatedResult,
                    order: int,
                    y_true: Optional[ArrayLike] = None) -> Dict[str, Any]:
    y = result.column("observed")
    est = result.column("estimate")
    lower = result.column("lower")
    upper = result.column("upper")
    has_band = bool(np.all(np.isfinite(lower)) and np.all(np.isfinite(upper)))
    out: Dict[str, Any] = {
        "mse": mse(y, est),
        "mae": mae(y, est),
        "shape_violations": shape_violations(est, order),
        "mean_band_width": float(np.mean(upper - lower)) if has_band else float("nan"),
        "runtime_s": float(result.meta.get("runtime_s", float("nan"))),
    }
    if y_true is not None:
        f = np.asarray(y_true, dtype=float).ravel()
        out["mse_true"] = mse(f, est)
        out["mae_true"] = mae(f, est)
        out["coverage_true"] = band_coverage(lower, upper, f) if has_band else float("nan")
    return out
