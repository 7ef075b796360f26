from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, NamedTuple, Optional

import numpy as np
import pandas as pd

from tfboot.errors import InvalidInput

COLUMNS = ("key", "observed", "estimate", "lower", "upper")


class AggregatedRow(NamedTuple):
    key: float
    observed: float
    estimate: float
    lower: float
    upper: float


@dataclass(frozen=True)
class AggregatedResult:
    """Per-index (key, observed, estimate, lower, upper) rows plus run metadata."""
    rows: List[AggregatedRow]
    meta: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[AggregatedRow]:
        return iter(self.rows)

    def __getitem__(self, i: int) -> AggregatedRow:
        return self.rows[i]

    def column(self, name: str) -> np.ndarray:
        if name not in COLUMNS:
            raise KeyError(f"unknown column '{name}', expected one of {COLUMNS}")
        return np.array([getattr(r, name) for r in self.rows], dtype=float)

    def to_records(self) -> List[Dict[str, float]]:
        return [r._asdict() for r in self.rows]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame.from_records(self.to_records(), columns=list(COLUMNS))


def aggregate(keys, observed, estimate, lower, upper,
              meta: Optional[Dict[str, Any]] = None) -> AggregatedResult:
    cols = [np.asarray(c, dtype=float).ravel() for c in (keys, observed, estimate, lower, upper)]
    sizes = {name: c.size for name, c in zip(COLUMNS, cols)}
    if len(set(sizes.values())) != 1:
        raise InvalidInput(f"cannot aggregate columns of different lengths: {sizes}")
    rows = [AggregatedRow(*map(float, vals)) for vals in zip(*cols)]
    return AggregatedResult(rows=rows, meta=dict(meta or {}))
