# tfboot/model/difference.py
from __future__ import annotations
import math
import numpy as np

from tfboot.errors import InvalidInput

SUPPORTED_ORDERS = (1, 2)


def _check_order(order: int, n: int) -> int:
    if isinstance(order, bool) or int(order) != order or int(order) not in SUPPORTED_ORDERS:
        raise InvalidInput(f"order must be one of {SUPPORTED_ORDERS}, got {order!r}")
    order = int(order)
    if n <= order:
        raise InvalidInput(f"need more than {order} points for order={order}, got n={n}")
    return order


def finite_difference(v: np.ndarray, order: int) -> np.ndarray:
    """
    Forward differences of order 1 or 2; output has length n - order.

    order=1 -> v[i+1] - v[i]
    order=2 -> v[i+2] - 2 v[i+1] + v[i]
    """
    v = np.asarray(v, dtype=float).ravel()
    order = _check_order(order, v.size)
    return np.diff(v, n=order)


def build_difference_matrix(order: int, n: int) -> np.ndarray:
    """
    Forward-difference operator D^{(order)} of shape (n-order, n), so that
    D @ v == finite_difference(v, order).
    """
    order = _check_order(order, int(n))
    coeffs = np.array([(-1) ** (order - k) * math.comb(order, k) for k in range(order + 1)], dtype=float)
    D = np.zeros((n - order, n), dtype=float)
    for i in range(n - order):
        D[i, i:i + order + 1] = coeffs
    return D
