"""Population-weighted postal-code chunking."""

from .chunks.classifier import Classifier
from .core.errors import (
    ConfigError,
    DataLoadError,
    GeochunkError,
    InvalidCodeError,
    InvariantViolation,
)
from .population.table import PrefixPopulation

__all__ = [
    "Classifier",
    "ConfigError",
    "DataLoadError",
    "GeochunkError",
    "InvalidCodeError",
    "InvariantViolation",
    "PrefixPopulation",
]
