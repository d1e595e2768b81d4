"""Logging helpers with consistent formatting."""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


LEVEL_ENV = "REST_STORAGE_LOG_LEVEL"


def _resolve_level(level: Optional[int]) -> int:
    if level is not None:
        return level
    name = os.getenv(LEVEL_ENV, "INFO").strip().upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def get_logger(name: str, level: Optional[int] = None, *, rich: bool = True) -> logging.Logger:
    """Configure and return a logger writing to stderr.

    stdout stays free for command output (loaded values, listings).
    The level defaults to ``REST_STORAGE_LOG_LEVEL`` or INFO.
    """
    logger = logging.getLogger(f"reststorage.{name}")
    if logger.handlers:
        return logger

    level = _resolve_level(level)
    logger.setLevel(level)

    if rich:
        handler: logging.Handler = RichHandler(
            level=level,
            console=Console(stderr=True),
            markup=False,
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(name)s %(levelname)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    logger.addHandler(handler)
    logger.propagate = False
    return logger
