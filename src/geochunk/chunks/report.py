"""Tabular views and exports of a built chunk mapping."""

from __future__ import annotations

import logging
from pathlib import Path

import polars as pl

from geochunk.population.table import PrefixPopulation

from .builder import GROUP_SEPARATOR
from .classifier import Classifier

logger = logging.getLogger(__name__)


def mapping_frame(classifier: Classifier) -> pl.DataFrame:
    """Return the prefix -> chunk mapping as a frame sorted by prefix."""

    mapping = classifier.mapping
    prefixes = sorted(mapping)
    return pl.DataFrame(
        {
            "prefix": prefixes,
            "chunk_id": [mapping[prefix] for prefix in prefixes],
        },
        schema={"prefix": pl.Utf8, "chunk_id": pl.Utf8},
    )


def summarize_chunks(classifier: Classifier, population: PrefixPopulation) -> pl.DataFrame:
    """One row per chunk with its kind, prefix count and total population."""

    frame = mapping_frame(classifier)
    frame = frame.with_columns(
        pl.Series(
            "population",
            [population.lookup(prefix) for prefix in frame.get_column("prefix")],
            dtype=pl.UInt64,
        )
    )
    return (
        frame.group_by("chunk_id")
        .agg(
            pl.len().alias("prefix_count"),
            pl.col("population").sum().alias("population"),
        )
        .with_columns(
            pl.when(pl.col("chunk_id").str.contains(GROUP_SEPARATOR, literal=True))
            .then(pl.lit("group"))
            .otherwise(pl.lit("leaf"))
            .alias("kind")
        )
        .select("chunk_id", "kind", "prefix_count", "population")
        .sort("chunk_id")
    )


def write_frame(frame: pl.DataFrame, path: Path) -> Path:
    """Write ``frame`` as CSV or Parquet depending on ``path``'s suffix."""

    suffix = path.suffix.lower()
    path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        frame.write_csv(path)
    elif suffix in {".parquet", ".pq"}:
        frame.write_parquet(path)
    else:
        raise ValueError(f"output '{path}' must be CSV or Parquet (got suffix '{suffix}')")
    logger.info("Wrote %d rows to %s", frame.height, path)
    return path


def write_mapping(classifier: Classifier, path: Path) -> Path:
    return write_frame(mapping_frame(classifier), path)


__all__ = ["mapping_frame", "summarize_chunks", "write_frame", "write_mapping"]
