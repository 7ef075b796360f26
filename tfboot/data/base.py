from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Protocol, Tuple

import numpy as np

from tfboot.errors import InvalidInput


@dataclass
class Series:
    """
    Ordered 1-D observations paired with an ordering key (e.g. a year).

    Canonical series have strictly increasing keys; bootstrap resamples only
    need non-decreasing keys (duplicates are legal).
    """
    keys: np.ndarray
    values: np.ndarray
    name: str = "series"
    meta: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.keys = np.asarray(self.keys, dtype=float).ravel()
        self.values = np.asarray(self.values, dtype=float).ravel()
        if self.keys.shape != self.values.shape:
            raise InvalidInput(f"keys and values differ in length: {self.keys.size} vs {self.values.size}")
        if self.values.size < 1:
            raise InvalidInput("series must hold at least one observation")

    @classmethod
    def from_values(cls, values, name: str = "series", start: int = 1) -> "Series":
        """Series with keys start, start+1, ..."""
        values = np.asarray(values, dtype=float).ravel()
        return cls(keys=np.arange(start, start + values.size, dtype=float), values=values, name=name)

    def validate(self, strict: bool = True) -> "Series":
        if not np.all(np.isfinite(self.values)):
            raise InvalidInput(f"series '{self.name}' contains non-finite values")
        if self.keys.size >= 2:
            d = np.diff(self.keys)
            if strict and not np.all(d > 0):
                raise InvalidInput(f"series '{self.name}' keys must be strictly increasing")
            if not strict and not np.all(d >= 0):
                raise InvalidInput(f"series '{self.name}' keys must be non-decreasing")
        return self

    def __len__(self) -> int:
        return int(self.values.size)

    def __getitem__(self, i: int) -> Tuple[float, float]:
        return float(self.keys[i]), float(self.values[i])


class DataSource(Protocol):
    """Interface for all data sources."""
    def load(self) -> Series: ...

    def add_params(self, **params: Any) -> DataSource:
        for k, v in params.items():
            setattr(self, k, v)
        return self
