from __future__ import annotations

import random
from pathlib import Path

import pytest

# Shaped like the 2010 census table around the 010xx and 077xx prefixes.
REFERENCE_ROWS = [
    ("01000", 100_000),
    ("01010", 200_000),
    ("07700", 150_000),
    ("07710", 90_000),
    ("07720", 60_000),
    ("10001", 120_000),
    ("20002", 80_000),
]


@pytest.fixture()
def reference_rows() -> list[tuple[str, int]]:
    return list(REFERENCE_ROWS)


@pytest.fixture()
def reference_csv(tmp_path: Path) -> Path:
    path = tmp_path / "zip2010.csv"
    lines = ["zip,pop"] + [f"{code},{pop}" for code, pop in REFERENCE_ROWS]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture(scope="session")
def synthetic_rows() -> list[tuple[str, int]]:
    rng = random.Random(2010)
    codes = sorted(rng.sample(range(100_000), 3_000))
    return [(f"{code:05d}", rng.randint(0, 30_000)) for code in codes]
