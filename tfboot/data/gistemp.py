# tfboot/data/gistemp.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Dict, Any, List, Tuple
import numpy as np

from .base import DataSource, Series
from .utils import filter_key_range


@dataclass
class GISTempAnnual(DataSource):
    """
    Loader for NASA GISTEMP Land-Ocean Temperature Index (annual anomalies, deg C).

    Expected text format (like nasa_temp.txt):
        Land-Ocean Temperature Index (C)
        --------------------------------
        Year No_Smoothing  Lowess(5)
        ----------------------------
        1880    -0.17   -0.10
        1881    -0.09   -0.13
        ...
    Non-numeric header/separator lines are ignored. Keys are the years.

    Parameters
    ----------
    path : str
        Local path to the nasa_temp.txt file.
    use_column : {"no_smoothing", "lowess"}
        Which series to load (default: "no_smoothing").
    year_range : Optional[tuple[int, int]]
        Inclusive filter (e.g., (1880, 2024)).
    name : str
        Dataset name.
    """

    path: str
    use_column: str = "no_smoothing"  # or "lowess"
    year_range: Optional[Tuple[int, int]] = None
    name: str = "gistemp_annual"
    seed: Optional[int] = None  # unused; registry passes one to every source

    def _parse_file(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        years: List[int] = []
        no_smooth: List[float] = []
        lowess: List[float] = []

        with open(self.path, "r", encoding="utf-8") as f:
            for line in f:
                s = line.strip()
                if not s:
                    continue
                # header/separator lines
                if s[0].isalpha() or s.startswith("-"):
                    continue
                parts = s.split()
                if len(parts) < 3:
                    continue
                try:
                    yr = int(parts[0])
                    val_no = float(parts[1])
                    val_lo = float(parts[2])
                except ValueError:
                    continue
                years.append(yr)
                no_smooth.append(val_no)
                lowess.append(val_lo)

        if len(years) == 0:
            raise ValueError(f"No data rows found in {self.path}")

        return (
            np.asarray(years, dtype=float),
            np.asarray(no_smooth, dtype=float),
            np.asarray(lowess, dtype=float),
        )

    def load(self) -> Series:
        years, no_smooth, lowess = self._parse_file()

        if self.use_column.lower() in ("no_smoothing", "no", "nosmooth", "no_smooth"):
            series = no_smooth
            col_used = "No_Smoothing"
        elif self.use_column.lower() in ("lowess", "smooth", "loess"):
            series = lowess
            col_used = "Lowess(5)"
        else:
            raise ValueError("use_column must be one of {'no_smoothing','lowess'}")

        years, series = filter_key_range(years, series, self.year_range)

        meta: Dict[str, Any] = {
            "source_path": self.path,
            "years_span": (int(years.min()), int(years.max())) if years.size else None,
            "column_used": col_used,
            "units": "deg C (anomaly)",
        }
        return Series(keys=years, values=series, name=self.name, meta=meta).validate(strict=True)
