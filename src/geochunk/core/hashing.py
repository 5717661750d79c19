"""Digest helpers for chunk mappings."""

from __future__ import annotations

import hashlib
from typing import Iterable, Mapping


def sha256_concat(parts: Iterable[bytes]) -> bytes:
    h = hashlib.sha256()
    for part in parts:
        h.update(part)
    return h.digest()


def mapping_digest(mapping: Mapping[str, str]) -> str:
    """Return a hex SHA-256 over ``mapping`` sorted by key.

    Each entry contributes ``prefix\\tchunk_id\\n`` so the digest is independent
    of insertion order.
    """
    parts = (f"{prefix}\t{mapping[prefix]}\n".encode("utf-8") for prefix in sorted(mapping))
    return sha256_concat(parts).hex()
