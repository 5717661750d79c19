"""Chunk building, classification and reporting."""

from .builder import build_chunks, group_chunk_id
from .classifier import Classifier
from .report import mapping_frame, summarize_chunks, write_mapping

__all__ = [
    "Classifier",
    "build_chunks",
    "group_chunk_id",
    "mapping_frame",
    "summarize_chunks",
    "write_mapping",
]
