from .resample import resample, resample_indices
from .aggregate import AggregatedResult, AggregatedRow, aggregate
from .engine import bootstrap_ci, critical_value

__all__ = [
    "resample", "resample_indices",
    "AggregatedResult", "AggregatedRow", "aggregate",
    "bootstrap_ci", "critical_value",
]
