"""Failure taxonomy for geochunk construction and queries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Tuple


class FailureCategory(Enum):
    """High-level buckets for geochunk failures."""

    DATA_LOAD = "data_load"
    INPUT = "invalid_input"
    CONFIG = "configuration"
    INVARIANT = "internal_invariant"


_FAILURE_CODE_MAP: Mapping[str, Tuple[FailureCategory, str]] = {
    "E101_POPULATION_SOURCE_MISSING": (FailureCategory.DATA_LOAD, "population_source_missing"),
    "E102_POPULATION_MALFORMED": (FailureCategory.DATA_LOAD, "population_table_malformed"),
    "E103_POPULATION_NEGATIVE": (FailureCategory.DATA_LOAD, "population_negative"),
    "E104_CODE_MALFORMED": (FailureCategory.DATA_LOAD, "source_code_malformed"),
    "E105_UNSUPPORTED_FORMAT": (FailureCategory.DATA_LOAD, "unsupported_source_format"),
    "E201_CODE_TOO_SHORT": (FailureCategory.INPUT, "code_too_short"),
    "E202_CODE_NOT_NUMERIC": (FailureCategory.INPUT, "code_not_numeric"),
    "E301_TARGET_INVALID": (FailureCategory.CONFIG, "target_population_invalid"),
    "E302_CONFIG_MISSING": (FailureCategory.CONFIG, "config_missing"),
    "E303_CONFIG_INVALID": (FailureCategory.CONFIG, "config_invalid"),
    "E304_CODE_LENGTH_INVALID": (FailureCategory.CONFIG, "code_length_invalid"),
    "E901_PREFIX_TOO_LONG": (FailureCategory.INVARIANT, "prefix_exceeds_code_length"),
    "E902_LEFTOVER_OVERSIZE": (FailureCategory.INVARIANT, "leftover_population_not_below_target"),
    "E903_NO_CHUNK_MATCH": (FailureCategory.INVARIANT, "no_chunk_for_code"),
}


@dataclass(frozen=True)
class ErrorContext:
    """Structured payload describing a geochunk failure."""

    code: str
    category: FailureCategory
    reason: str
    detail: str


class GeochunkError(RuntimeError):
    """Exception carrying the canonical geochunk error context."""

    def __init__(self, context: ErrorContext) -> None:
        super().__init__(f"{context.code}: {context.detail}")
        self.context = context

    @property
    def code(self) -> str:
        return self.context.code


class DataLoadError(GeochunkError):
    """Raised when population rows cannot be read or validated."""


class InvalidCodeError(GeochunkError):
    """Raised when a queried code is not a well-formed code."""


class ConfigError(GeochunkError):
    """Raised when configuration is missing or invalid."""


class InvariantViolation(GeochunkError):
    """Raised when the builder or classifier detects its own defect.

    Never reachable from validated external input.
    """


_CATEGORY_TYPES: Mapping[FailureCategory, type[GeochunkError]] = {
    FailureCategory.DATA_LOAD: DataLoadError,
    FailureCategory.INPUT: InvalidCodeError,
    FailureCategory.CONFIG: ConfigError,
    FailureCategory.INVARIANT: InvariantViolation,
}


def err(code: str, detail: str) -> GeochunkError:
    """Build the ``GeochunkError`` subclass matching ``code``'s category."""

    if code not in _FAILURE_CODE_MAP:
        raise ValueError(f"unknown geochunk failure code '{code}'")
    category, reason = _FAILURE_CODE_MAP[code]
    context = ErrorContext(code=code, category=category, reason=reason, detail=detail)
    return _CATEGORY_TYPES[category](context)


__all__ = [
    "ConfigError",
    "DataLoadError",
    "ErrorContext",
    "FailureCategory",
    "GeochunkError",
    "InvalidCodeError",
    "InvariantViolation",
    "err",
]
