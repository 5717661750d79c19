"""Recursive partitioning of code prefixes into population-sized chunks."""

from __future__ import annotations

import logging
from typing import MutableMapping

from geochunk.core.errors import err
from geochunk.population.table import PrefixPopulation

logger = logging.getLogger(__name__)

DIGITS = "0123456789"
GROUP_SEPARATOR = "_"


def group_chunk_id(prefix: str, index: int) -> str:
    """Identifier of the ``index``-th leftover group under ``prefix``."""
    return f"{prefix}{GROUP_SEPARATOR}{index}"


def ensure_target_population(target_population: int) -> int:
    if isinstance(target_population, bool) or not isinstance(target_population, int):
        raise err(
            "E301_TARGET_INVALID",
            f"target population must be an integer, got {type(target_population).__name__}",
        )
    if target_population <= 0:
        raise err("E301_TARGET_INVALID", f"target population must be positive, got {target_population}")
    return target_population


def build_chunks(population: PrefixPopulation, target_population: int) -> dict[str, str]:
    """Map code prefixes to chunk identifiers of roughly ``target_population`` people."""

    ensure_target_population(target_population)
    chunk_id_for_prefix: dict[str, str] = {}
    _build_chunks_recursive(population, target_population, "", chunk_id_for_prefix)
    logger.info(
        "Built %d chunks over %d prefixes (target=%d, total population=%d)",
        len(set(chunk_id_for_prefix.values())),
        len(chunk_id_for_prefix),
        target_population,
        population.total,
    )
    return chunk_id_for_prefix


def _assign(chunk_id_for_prefix: MutableMapping[str, str], prefix: str, chunk_id: str, pop: int) -> None:
    logger.debug("Mapping %s (pop %d) to %s", prefix, pop, chunk_id)
    chunk_id_for_prefix[prefix] = chunk_id


def _build_chunks_recursive(
    population: PrefixPopulation,
    target_population: int,
    prefix: str,
    chunk_id_for_prefix: MutableMapping[str, str],
) -> None:
    prefix_pop = population.lookup(prefix)
    if prefix_pop <= target_population:
        # Small enough to fill a chunk on our own.
        _assign(chunk_id_for_prefix, prefix, prefix, prefix_pop)
        return
    if len(prefix) == population.code_length:
        # A single code cannot be split any further.
        logger.warning(
            "Code %s (pop %d) exceeds target %d; keeping it as an oversized chunk",
            prefix,
            prefix_pop,
            target_population,
        )
        _assign(chunk_id_for_prefix, prefix, prefix, prefix_pop)
        return

    leftovers: list[tuple[str, int]] = []
    for digit in DIGITS:
        child_prefix = prefix + digit
        child_pop = population.lookup(child_prefix)
        if child_pop >= target_population:
            _build_chunks_recursive(population, target_population, child_prefix, chunk_id_for_prefix)
        else:
            leftovers.append((child_prefix, child_pop))

    # Zero-population children are grouped too, so codes issued after the
    # population snapshot still land in some chunk.
    chunk_idx = 0
    chunk_pop = 0
    for child_prefix, child_pop in leftovers:
        if child_pop >= target_population:
            raise err(
                "E902_LEFTOVER_OVERSIZE",
                f"leftover '{child_prefix}' has population {child_pop} >= target {target_population}",
            )
        if chunk_pop + child_pop > target_population:
            chunk_idx += 1
            chunk_pop = 0
        chunk_pop += child_pop
        _assign(chunk_id_for_prefix, child_prefix, group_chunk_id(prefix, chunk_idx), child_pop)


__all__ = ["DIGITS", "build_chunks", "ensure_target_population", "group_chunk_id"]
