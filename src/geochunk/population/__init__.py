"""Population table loading and prefix aggregation."""

from .loader import iter_population_rows, load_population_frame, validate_population_frame
from .table import PrefixPopulation

__all__ = [
    "PrefixPopulation",
    "iter_population_rows",
    "load_population_frame",
    "validate_population_frame",
]
