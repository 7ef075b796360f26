from __future__ import annotations
import numpy as np

from tfboot.data.base import Series


def resample_indices(m: int, rng: np.random.Generator, keys: np.ndarray) -> np.ndarray:
    """m draws with replacement from 0..m-1, reordered so keys[idx] is ascending (stable)."""
    idx = rng.integers(0, m, size=m)
    return idx[np.argsort(keys[idx], kind="stable")]


def resample(series: Series, rng: np.random.Generator) -> Series:
    """
    Pairs bootstrap draw: m (key, value) rows with replacement, re-sorted by key.

    Duplicated rows are kept as-is. The re-sort is part of the draw because the
    penalty acts on neighbours in key order, not in draw order.
    """
    m = len(series)
    idx = resample_indices(m, rng, series.keys)
    return Series(keys=series.keys[idx], values=series.values[idx],
                  name=f"{series.name}[resample]", meta={"indices": idx})
