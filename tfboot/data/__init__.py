from .base import Series, DataSource
from .utils import sort_by_key, filter_key_range, integer_keys
from .gistemp import GISTempAnnual
from .synthetic import SyntheticShape
from .tabular import CsvSeries

__all__ = [
    "Series",
    "DataSource",
    "sort_by_key",
    "filter_key_range",
    "integer_keys",
    "GISTempAnnual",
    "SyntheticShape",
    "CsvSeries",
]
