"""Load and validate raw (code, population) rows."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Tuple

import polars as pl

from geochunk.core.config import DEFAULT_CODE_LENGTH
from geochunk.core.errors import err

logger = logging.getLogger(__name__)

CODE_COLUMN = "code"
POPULATION_COLUMN = "population"

_CSV_SUFFIXES = frozenset({".csv", ".txt"})
_PARQUET_SUFFIXES = frozenset({".parquet", ".pq"})


def _read_source(path: Path) -> pl.DataFrame:
    suffix = path.suffix.lower()
    try:
        if suffix in _CSV_SUFFIXES:
            # Everything is read as text so codes keep their leading zeros.
            return pl.read_csv(path, infer_schema_length=0)
        if suffix in _PARQUET_SUFFIXES:
            return pl.read_parquet(path)
    except (pl.exceptions.PolarsError, OSError) as exc:
        raise err("E102_POPULATION_MALFORMED", f"unable to read '{path}': {exc}") from exc
    raise err(
        "E105_UNSUPPORTED_FORMAT",
        f"population source '{path}' must be CSV or Parquet (got suffix '{suffix}')",
    )


def validate_population_frame(
    frame: pl.DataFrame,
    *,
    code_length: int = DEFAULT_CODE_LENGTH,
) -> pl.DataFrame:
    """Normalise a ``code``/``population`` frame and reject malformed rows.

    Integer code columns are zero-padded to ``code_length``; populations are
    parsed into ``UInt64``.
    """

    missing = [name for name in (CODE_COLUMN, POPULATION_COLUMN) if name not in frame.columns]
    if missing:
        raise err("E102_POPULATION_MALFORMED", f"population table missing columns {missing}")

    code_expr = pl.col(CODE_COLUMN).cast(pl.Utf8).str.strip_chars()
    if frame.schema[CODE_COLUMN].is_integer():
        code_expr = code_expr.str.zfill(code_length)

    normalised = frame.select(
        code_expr.alias(CODE_COLUMN),
        pl.col(POPULATION_COLUMN).cast(pl.Utf8).str.strip_chars().alias("_raw_population"),
    ).with_columns(
        pl.col("_raw_population").cast(pl.UInt64, strict=False).alias(POPULATION_COLUMN)
    )

    negative = normalised.filter(pl.col("_raw_population").str.contains(r"^-0*[1-9][0-9]*$"))
    if negative.height:
        sample = negative.row(0, named=True)
        raise err(
            "E103_POPULATION_NEGATIVE",
            f"{negative.height} row(s) with negative population; "
            f"first: code={sample[CODE_COLUMN]!r} population={sample['_raw_population']}",
        )

    unparseable = normalised.filter(pl.col(POPULATION_COLUMN).is_null())
    if unparseable.height:
        sample = unparseable.row(0, named=True)
        raise err(
            "E102_POPULATION_MALFORMED",
            f"{unparseable.height} row(s) with unparseable population; "
            f"first: code={sample[CODE_COLUMN]!r} population={sample['_raw_population']!r}",
        )

    bad_codes = normalised.filter(
        pl.col(CODE_COLUMN).is_null()
        | ~pl.col(CODE_COLUMN).str.contains(rf"^[0-9]{{{code_length}}}$")
    )
    if bad_codes.height:
        raise err(
            "E104_CODE_MALFORMED",
            f"{bad_codes.height} row(s) with codes that are not {code_length} digits; "
            f"first: {bad_codes.get_column(CODE_COLUMN)[0]!r}",
        )

    return normalised.select(CODE_COLUMN, POPULATION_COLUMN)


def load_population_frame(
    path: Path,
    *,
    code_column: str = "zip",
    population_column: str = "pop",
    code_length: int = DEFAULT_CODE_LENGTH,
) -> pl.DataFrame:
    """Read a CSV or Parquet population table into a validated frame."""

    if not path.exists():
        raise err("E101_POPULATION_SOURCE_MISSING", f"population source '{path}' not found")

    raw = _read_source(path)
    missing = [name for name in (code_column, population_column) if name not in raw.columns]
    if missing:
        raise err(
            "E102_POPULATION_MALFORMED",
            f"population source '{path}' missing columns {missing} (found {raw.columns})",
        )
    renamed = raw.select(
        pl.col(code_column).alias(CODE_COLUMN),
        pl.col(population_column).alias(POPULATION_COLUMN),
    )
    frame = validate_population_frame(renamed, code_length=code_length)
    logger.info("Loaded %d population rows from %s", frame.height, path)
    return frame


def iter_population_rows(frame: pl.DataFrame) -> Iterator[Tuple[str, int]]:
    """Yield ``(code, population)`` pairs from a validated frame."""

    for code, population in frame.select(CODE_COLUMN, POPULATION_COLUMN).iter_rows():
        yield code, int(population)


__all__ = [
    "CODE_COLUMN",
    "POPULATION_COLUMN",
    "iter_population_rows",
    "load_population_frame",
    "validate_population_frame",
]
