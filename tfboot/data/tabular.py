from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

import pandas as pd

from .base import DataSource, Series
from .utils import filter_key_range, sort_by_key


@dataclass
class CsvSeries(DataSource):
    """Two columns of a CSV file: an ordering key and a value. Rows are sorted by key; NaN rows dropped."""
    path: str
    key_column: str = "year"
    value_column: str = "value"
    key_range: Optional[Tuple[float, float]] = None
    name: str = "csv_series"
    seed: Optional[int] = None  # unused; registry passes one to every source

    def load(self) -> Series:
        df = pd.read_csv(self.path, usecols=[self.key_column, self.value_column])
        n_raw = len(df)
        df = df.dropna()
        keys, values = sort_by_key(df[self.key_column].to_numpy(dtype=float),
                                   df[self.value_column].to_numpy(dtype=float))
        keys, values = filter_key_range(keys, values, self.key_range)
        meta = {"source_path": self.path, "key_column": self.key_column,
                "value_column": self.value_column, "rows_dropped": int(n_raw - len(df))}
        return Series(keys=keys, values=values, name=self.name, meta=meta).validate(strict=True)
