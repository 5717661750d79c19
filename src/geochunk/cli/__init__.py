"""Command-line helpers for geochunk."""

from .geochunk import main as run_geochunk

__all__ = ["run_geochunk"]
