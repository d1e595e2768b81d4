"""Environment helper utilities."""

from __future__ import annotations

import os
from typing import Optional

from reststorage.core.errors import ConfigurationError


_FALSE_VALUES = {"0", "false", "no", "off"}


def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Return a stripped environment value, treating blank as unset."""
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip()
    return value or default


def get_bool_env(name: str, *, default: bool = False) -> bool:
    """Return True/False for an environment flag."""
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if not value:
        return default
    return value not in _FALSE_VALUES


def get_float_env(name: str, *, default: Optional[float] = None) -> Optional[float]:
    raw = get_env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
