"""Logging helpers for geochunk."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional


LOG_FORMAT = "%(asctime)s,%(msecs)03d [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_root_configured = False


def configure_logging(level: int = logging.INFO) -> None:
    """Install the console handler on first use; later calls only move the root level."""
    global _root_configured
    if not _root_configured:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        _root_configured = True
    logging.getLogger().setLevel(level)


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Return ``name``'s logger, setting up console output if nothing has yet."""
    if not _root_configured:
        configure_logging()
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


@contextmanager
def log_to_file(path: Path, level: int = logging.INFO) -> Iterator[logging.Handler]:
    """Mirror root log records into ``path`` while the block runs.

    The handler is detached and closed on exit so repeated runs in one
    process do not pile up open files.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root = logging.getLogger()
    root.addHandler(handler)
    try:
        yield handler
    finally:
        root.removeHandler(handler)
        handler.close()


def parse_level(name: str) -> int:
    """Translate a level name such as ``"debug"`` into a logging level."""
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level '{name}'")
    return level
