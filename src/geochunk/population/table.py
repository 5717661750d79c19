"""Aggregate population counts for every postal-code prefix."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Tuple

import polars as pl

from geochunk.core.config import DEFAULT_CODE_LENGTH
from geochunk.core.errors import err

from .loader import CODE_COLUMN, POPULATION_COLUMN


class PrefixPopulation:
    """The population associated with each code prefix.

    Holds one map per prefix length ``0..code_length``; the empty prefix
    carries the total population. Write-once: built by ``from_rows`` or
    ``from_frame`` and read through ``lookup`` afterwards.
    """

    __slots__ = ("_code_length", "_maps")

    def __init__(self, maps: Iterable[Mapping[str, int]], *, code_length: int) -> None:
        frozen = tuple(MappingProxyType(dict(level)) for level in maps)
        if len(frozen) != code_length + 1:
            raise ValueError(
                f"expected {code_length + 1} prefix levels, got {len(frozen)}"
            )
        self._code_length = code_length
        self._maps = frozen

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Tuple[str, int]],
        *,
        code_length: int = DEFAULT_CODE_LENGTH,
    ) -> "PrefixPopulation":
        """Aggregate ``(code, population)`` pairs by every prefix of each code."""

        maps: list[dict[str, int]] = [{} for _ in range(code_length + 1)]
        for code, population in rows:
            for prefix_len, level in enumerate(maps):
                prefix = code[:prefix_len]
                level[prefix] = level.get(prefix, 0) + population
        return cls(maps, code_length=code_length)

    @classmethod
    def from_frame(
        cls,
        frame: pl.DataFrame,
        *,
        code_length: int = DEFAULT_CODE_LENGTH,
    ) -> "PrefixPopulation":
        """Aggregate a validated ``code``/``population`` frame, one group-by per length."""

        maps: list[dict[str, int]] = []
        for prefix_len in range(code_length + 1):
            grouped = (
                frame.lazy()
                .select(
                    pl.col(CODE_COLUMN).str.slice(0, prefix_len).alias("prefix"),
                    pl.col(POPULATION_COLUMN).cast(pl.UInt64),
                )
                .group_by("prefix")
                .agg(pl.col(POPULATION_COLUMN).sum())
                .collect()
            )
            maps.append(
                {prefix: int(total) for prefix, total in grouped.iter_rows()}
            )
        return cls(maps, code_length=code_length)

    @property
    def code_length(self) -> int:
        return self._code_length

    @property
    def total(self) -> int:
        """Population across all codes."""
        return self.lookup("")

    def level(self, prefix_len: int) -> Mapping[str, int]:
        """Read-only view of every observed prefix of ``prefix_len`` digits."""
        return self._maps[prefix_len]

    def prefix_count(self, prefix_len: int) -> int:
        return len(self._maps[prefix_len])

    def lookup(self, prefix: str) -> int:
        """Look up the population of a prefix, 0 if it was never observed.

        Prefixes are generated internally, so one longer than the code length
        indicates a builder defect.
        """
        if len(prefix) > self._code_length:
            raise err(
                "E901_PREFIX_TOO_LONG",
                f"prefix '{prefix}' exceeds code length {self._code_length}",
            )
        return self._maps[len(prefix)].get(prefix, 0)


__all__ = ["PrefixPopulation"]
