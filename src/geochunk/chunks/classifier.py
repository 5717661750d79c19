"""Classify postal codes into geochunks by longest-prefix match."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Tuple

import polars as pl

from geochunk.core.config import DEFAULT_CODE_LENGTH, GeochunkConfig
from geochunk.core.errors import err
from geochunk.core.hashing import mapping_digest
from geochunk.population.loader import (
    CODE_COLUMN,
    POPULATION_COLUMN,
    iter_population_rows,
    load_population_frame,
    validate_population_frame,
)
from geochunk.population.table import PrefixPopulation

from .builder import build_chunks, ensure_target_population


@dataclass(frozen=True)
class Classifier:
    """Classifies codes into geochunks of roughly ``target_population`` people.

    Instances are immutable once built and may be shared between threads.
    """

    target_population: int
    code_length: int
    chunk_id_for_prefix: Mapping[str, str] = field(repr=False)
    _digest: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        ensure_target_population(self.target_population)
        if (
            isinstance(self.code_length, bool)
            or not isinstance(self.code_length, int)
            or self.code_length < 1
        ):
            raise err("E304_CODE_LENGTH_INVALID", f"code length must be a positive integer, got {self.code_length!r}")
        if not isinstance(self.chunk_id_for_prefix, MappingProxyType):
            object.__setattr__(
                self, "chunk_id_for_prefix", MappingProxyType(dict(self.chunk_id_for_prefix))
            )
        object.__setattr__(self, "_digest", mapping_digest(self.chunk_id_for_prefix))

    def __hash__(self) -> int:
        return hash((self.target_population, self.code_length, self._digest))

    @classmethod
    def build(cls, target_population: int, population: PrefixPopulation) -> "Classifier":
        """Create a classifier from an aggregated population table."""
        mapping = build_chunks(population, target_population)
        return cls(
            target_population=target_population,
            code_length=population.code_length,
            chunk_id_for_prefix=mapping,
        )

    @classmethod
    def from_rows(
        cls,
        target_population: int,
        rows: Iterable[Tuple[str, int]],
        *,
        code_length: int = DEFAULT_CODE_LENGTH,
    ) -> "Classifier":
        """Validate ``(code, population)`` rows, aggregate them and build."""
        try:
            frame = pl.DataFrame(
                [(code, population) for code, population in rows],
                schema=[CODE_COLUMN, POPULATION_COLUMN],
                orient="row",
            )
        except (TypeError, ValueError, OverflowError, pl.exceptions.PolarsError) as exc:
            raise err("E102_POPULATION_MALFORMED", f"population rows have the wrong shape: {exc}") from exc
        frame = validate_population_frame(frame, code_length=code_length)
        population = PrefixPopulation.from_rows(iter_population_rows(frame), code_length=code_length)
        return cls.build(target_population, population)

    @classmethod
    def from_path(
        cls,
        target_population: int,
        path: Path,
        *,
        code_column: str = "zip",
        population_column: str = "pop",
        code_length: int = DEFAULT_CODE_LENGTH,
    ) -> "Classifier":
        """Load a CSV or Parquet population table and build."""
        frame = load_population_frame(
            path,
            code_column=code_column,
            population_column=population_column,
            code_length=code_length,
        )
        population = PrefixPopulation.from_frame(frame, code_length=code_length)
        return cls.build(target_population, population)

    @classmethod
    def from_config(cls, config: GeochunkConfig) -> "Classifier":
        if config.population_path is None:
            raise err("E303_CONFIG_INVALID", "config does not name a population_path")
        return cls.from_path(
            config.target_population,
            config.population_path,
            code_column=config.code_column,
            population_column=config.population_column,
            code_length=config.code_length,
        )

    @property
    def mapping(self) -> Mapping[str, str]:
        """Read-only prefix -> chunk identifier view."""
        return self.chunk_id_for_prefix

    def __len__(self) -> int:
        return len(self.chunk_id_for_prefix)

    def chunk_ids(self) -> list[str]:
        return sorted(set(self.chunk_id_for_prefix.values()))

    def digest(self) -> str:
        return self._digest

    def _check_code(self, code: str) -> str:
        if len(code) < self.code_length:
            raise err(
                "E201_CODE_TOO_SHORT",
                f"code {code!r} has {len(code)} characters; expected {self.code_length}",
            )
        head = code[: self.code_length]
        if not (head.isascii() and head.isdigit()):
            raise err("E202_CODE_NOT_NUMERIC", f"code {code!r} must start with {self.code_length} digits")
        return head

    def chunk_for(self, code: str) -> str:
        """Return the geochunk identifier for ``code``.

        Longer codes (ZIP+4 and the like) are matched on their leading digits.
        Raises ``InvalidCodeError`` for short or non-numeric codes.
        """
        head = self._check_code(code)
        for i in range(self.code_length, -1, -1):
            chunk_id = self.chunk_id_for_prefix.get(head[:i])
            if chunk_id is not None:
                return chunk_id
        raise err("E903_NO_CHUNK_MATCH", f"no prefix of {code!r} is mapped to a chunk")

    def chunk_for_many(self, codes: Iterable[str]) -> list[str]:
        return [self.chunk_for(code) for code in codes]


__all__ = ["Classifier"]
