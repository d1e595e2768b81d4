"""Abstract storage capability set consumed by certificate management."""

from __future__ import annotations

import abc
from typing import List, Optional

from .locks import AsyncLock, StorageLock
from .models import KeyInfo


class Storage(abc.ABC):
    """Key/value storage with distributed mutual exclusion.

    Missing keys are reported with :class:`~reststorage.core.errors.KeyNotFoundError`.
    ``exists`` is the exception: it only ever answers yes or no.
    """

    @abc.abstractmethod
    async def lock(self, key: str, *, timeout: Optional[float] = None) -> None:  # pragma: no cover - interface
        """Block until the lock for ``key`` is held by the caller."""
        raise NotImplementedError

    @abc.abstractmethod
    async def unlock(self, key: str, *, timeout: Optional[float] = None) -> None:  # pragma: no cover - interface
        """Release a lock previously obtained with :meth:`lock`."""
        raise NotImplementedError

    @abc.abstractmethod
    async def store(self, key: str, value: bytes, *, timeout: Optional[float] = None) -> None:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def load(self, key: str, *, timeout: Optional[float] = None) -> bytes:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def delete(self, key: str, *, timeout: Optional[float] = None) -> None:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def exists(self, key: str, *, timeout: Optional[float] = None) -> bool:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def list(
        self, prefix: str, recursive: bool, *, timeout: Optional[float] = None
    ) -> List[str]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def stat(self, key: str, *, timeout: Optional[float] = None) -> KeyInfo:  # pragma: no cover
        raise NotImplementedError

    def locked(self, key: str, *, timeout: Optional[float] = None) -> AsyncLock:
        """Return an async context manager holding the lock for ``key``."""
        return StorageLock(self, key, timeout=timeout)
