from __future__ import annotations
import numpy as np
from typing import Optional, Tuple

from tfboot.errors import InvalidInput


def sort_by_key(keys: np.ndarray, values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Stable sort of (key, value) rows by key."""
    keys = np.asarray(keys, dtype=float).ravel()
    values = np.asarray(values, dtype=float).ravel()
    order = np.argsort(keys, kind="stable")
    return keys[order], values[order]


def filter_key_range(keys: np.ndarray, values: np.ndarray,
                     key_range: Optional[Tuple[float, float]]) -> Tuple[np.ndarray, np.ndarray]:
    """Inclusive filter on keys, e.g. year_range=(1880, 2024)."""
    if key_range is None:
        return keys, values
    lo, hi = key_range
    if lo > hi:
        raise InvalidInput(f"empty key range ({lo}, {hi})")
    m = (keys >= lo) & (keys <= hi)
    return keys[m], values[m]


def integer_keys(n: int, start: int = 1) -> np.ndarray:
    if n < 1:
        raise InvalidInput("n must be at least 1.")
    return np.arange(start, start + n, dtype=float)
