"""Async context manager around the storage lock/unlock pair."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from .storage import Storage


class AsyncLock(Protocol):
    async def __aenter__(self) -> str: ...
    async def __aexit__(self, exc_type, exc, tb) -> None: ...


class StorageLock:
    """Hold ``key`` for the duration of an ``async with`` block."""

    def __init__(self, storage: "Storage", key: str, *, timeout: Optional[float] = None) -> None:
        self._storage = storage
        self._key = key
        self._timeout = timeout
        self._acquired = False

    @property
    def acquired(self) -> bool:
        return self._acquired

    async def __aenter__(self) -> str:
        await self._storage.lock(self._key, timeout=self._timeout)
        self._acquired = True
        return self._key

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if not self._acquired:
            return
        try:
            await self._storage.unlock(self._key)
        finally:
            self._acquired = False
