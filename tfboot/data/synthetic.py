from __future__ import annotations
import numpy as np
from dataclasses import dataclass
from typing import Optional, Dict, Any
from .base import DataSource, Series
from .utils import integer_keys

SHAPES = ("monotone", "convex")


@dataclass
class SyntheticShape(DataSource):
    """
    Noisy shape-constrained signal on integer keys start..start+n-1.

    shape="monotone": logistic ramp (isotonic truth, suits order=1).
    shape="convex":   parabola (convex truth, suits order=2).
    The noiseless signal is kept in meta["y_true"].
    """
    n: int = 60
    sigma: float = 0.3
    seed: Optional[int] = None
    shape: str = "monotone"
    start: int = 1
    name: str = "synthetic_shape"

    def _true_signal(self, t: np.ndarray) -> np.ndarray:
        if self.shape == "monotone":
            return 2.0 / (1.0 + np.exp(-10.0 * (t - 0.5)))
        if self.shape == "convex":
            return 4.0 * (t - 0.4) ** 2
        raise ValueError(f"shape must be one of {SHAPES}, got {self.shape!r}")

    def load(self) -> Series:
        rng = np.random.default_rng(self.seed)
        keys = integer_keys(int(self.n), int(self.start))
        t = np.linspace(0.0, 1.0, num=keys.size)
        y_true = self._true_signal(t)
        y = y_true + self.sigma * rng.standard_normal(keys.size)
        meta: Dict[str, Any] = {"sigma": self.sigma, "seed": self.seed, "shape": self.shape,
                                "y_true": y_true}
        return Series(keys=keys, values=y, name=self.name, meta=meta)
