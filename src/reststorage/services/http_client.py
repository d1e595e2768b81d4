"""HTTP client wrapper shared by every storage operation."""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx
from pydantic import BaseModel

from reststorage.core.errors import EncodingError, StorageTransportError
from reststorage.core.settings import RestStorageSettings


class HttpClient:
    """Owns one pooled ``httpx.AsyncClient`` and POSTs JSON bodies to the remote store."""

    def __init__(
        self,
        settings: RestStorageSettings,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings
        self._client = client
        self._owns_client = client is None
        self._lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._lock:
            if self._client is None:
                self._client = httpx.AsyncClient(timeout=self.settings.request_timeout)
            return self._client

    @staticmethod
    def encode(operation: str, payload: BaseModel) -> bytes:
        try:
            return payload.model_dump_json(by_alias=True).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncodingError(operation, f"cannot serialize request: {exc}") from exc

    async def post_json(self, operation: str, payload: BaseModel) -> httpx.Response:
        """POST ``payload`` to ``<endpoint><operation>`` and return the fully read response."""
        return await self.post(operation, self.encode(operation, payload))

    async def post(self, operation: str, body: bytes) -> httpx.Response:
        client = await self._ensure_client()
        try:
            response = await client.post(
                self.settings.url_for(operation),
                content=body,
                headers={"Content-Type": "application/json"},
            )
        except httpx.DecodingError as exc:
            raise EncodingError(operation, f"cannot decode response body: {exc}") from exc
        except httpx.RequestError as exc:
            raise StorageTransportError(operation, f"{type(exc).__name__}: {exc}") from exc
        except httpx.InvalidURL as exc:
            raise StorageTransportError(operation, f"invalid endpoint URL: {exc}") from exc
        return response

    async def close(self) -> None:
        async with self._lock:
            if self._client is not None and self._owns_client:
                await self._client.aclose()
                self._client = None

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
