"""Storage adapter backed by a remote key/value store spoken to over HTTP(S)."""

from __future__ import annotations

import asyncio
import base64
import binascii
from typing import Any, Awaitable, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from reststorage.core.errors import (
    EncodingError,
    KeyNotFoundError,
    OperationCancelledError,
    UnexpectedStatusError,
)
from reststorage.core.models import (
    DeleteRequest,
    ExistsRequest,
    ExistsResponse,
    KeyInfo,
    ListRequest,
    ListResponse,
    LoadRequest,
    LoadResponse,
    LockRequest,
    StatRequest,
    StatResponse,
    StoreRequest,
    UnlockRequest,
)
from reststorage.core.settings import RestStorageSettings
from reststorage.core.storage import Storage
from reststorage.services.http_client import HttpClient
from reststorage.utils.logging import get_logger
from reststorage.utils.timefmt import parse_rfc3339


T = TypeVar("T")
ResponseT = TypeVar("ResponseT", bound=BaseModel)

CREATED = 201
OK = 200
NO_CONTENT = 204
NOT_FOUND = 404
PRECONDITION_FAILED = 412


class RestStorage(Storage):
    """Implements the storage capability set as JSON POSTs to ``<endpoint><operation>``.

    Every call is a fresh round trip; nothing is cached locally. The only state
    shared between calls is the read-only settings and the pooled HTTP client,
    so one instance can serve any number of concurrent tasks.

    Each operation accepts ``timeout`` (seconds). When it expires the in-flight
    request is aborted and :class:`OperationCancelledError` is raised.
    """

    def __init__(
        self,
        settings: RestStorageSettings,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        settings.validate_credentials()
        self.settings = settings.model_copy()
        self.logger = get_logger("RestStorage")
        self._http = HttpClient(self.settings, client=client)

    @classmethod
    def from_config(
        cls,
        *,
        endpoint: str,
        token: str,
        client: Optional[httpx.AsyncClient] = None,
        **overrides: Any,
    ) -> "RestStorage":
        settings = RestStorageSettings.build(endpoint=endpoint, token=token, **overrides)
        return cls(settings, client=client)

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> "RestStorage":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # -- locking -----------------------------------------------------------

    async def lock(self, key: str, *, timeout: Optional[float] = None) -> None:
        body = self._http.encode("lock", LockRequest(key=key, token=self.settings.token))
        await self._deadline("lock", key, timeout, self._acquire(key, body))

    async def _acquire(self, key: str, body: bytes) -> None:
        delay = self.settings.lock_poll_initial
        attempts = 0
        while True:
            attempts += 1
            response = await self._http.post("lock", body)
            if response.status_code == CREATED:
                self.logger.info("Acquired lock %s after %d attempt(s)", key, attempts)
                return
            if response.status_code != PRECONDITION_FAILED:
                raise UnexpectedStatusError("lock", response.status_code, key)
            self.logger.debug("Lock %s is held elsewhere; polling again in %.3fs", key, delay)
            await asyncio.sleep(delay)
            delay = min(delay * self.settings.lock_poll_multiplier, self.settings.lock_poll_max)

    async def unlock(self, key: str, *, timeout: Optional[float] = None) -> None:
        request = UnlockRequest(key=key, token=self.settings.token)
        response = await self._deadline("unlock", key, timeout, self._http.post_json("unlock", request))
        self._expect("unlock", key, response, NO_CONTENT, not_found=True)
        self.logger.info("Released lock %s", key)

    # -- content -----------------------------------------------------------

    async def store(self, key: str, value: bytes, *, timeout: Optional[float] = None) -> None:
        request = StoreRequest(
            key=key,
            value=base64.b64encode(value).decode("ascii"),
            token=self.settings.token,
        )
        response = await self._deadline("store", key, timeout, self._http.post_json("store", request))
        self._expect("store", key, response, CREATED)

    async def load(self, key: str, *, timeout: Optional[float] = None) -> bytes:
        request = LoadRequest(key=key, token=self.settings.token)
        response = await self._deadline("load", key, timeout, self._http.post_json("load", request))
        self._expect("load", key, response, OK, not_found=True)
        decoded = self._decode("load", response, LoadResponse)
        try:
            # line-wrapped base64 is accepted; any other stray character is not
            return base64.b64decode(decoded.value.replace("\r", "").replace("\n", ""), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise EncodingError("load", f"value for {key!r} is not valid base64: {exc}") from exc

    async def delete(self, key: str, *, timeout: Optional[float] = None) -> None:
        request = DeleteRequest(key=key, token=self.settings.token)
        response = await self._deadline("delete", key, timeout, self._http.post_json("delete", request))
        self._expect("delete", key, response, NO_CONTENT, not_found=True)

    async def exists(self, key: str, *, timeout: Optional[float] = None) -> bool:
        """Return whether ``key`` exists.

        This call has no error channel. Transport, encoding, status and
        deadline failures all read as ``False``, so a negative answer does not
        prove the key is absent.
        """
        try:
            return await self._deadline("exists", key, timeout, self._exists(key))
        except Exception as exc:
            self.logger.debug("exists(%r) answered False after failure: %s", key, exc)
            return False

    async def _exists(self, key: str) -> bool:
        request = ExistsRequest(key=key, token=self.settings.token)
        response = await self._http.post_json("exists", request)
        if response.status_code != OK:
            self.logger.debug("exists(%r) got status %d", key, response.status_code)
            return False
        return self._decode("exists", response, ExistsResponse).exists

    async def list(self, prefix: str, recursive: bool, *, timeout: Optional[float] = None) -> List[str]:
        request = ListRequest(prefix=prefix, recursive=recursive, token=self.settings.token)
        response = await self._deadline("list", prefix, timeout, self._http.post_json("list", request))
        self._expect("list", prefix, response, OK, not_found=True)
        return list(self._decode("list", response, ListResponse).keys or [])

    async def stat(self, key: str, *, timeout: Optional[float] = None) -> KeyInfo:
        request = StatRequest(key=key, token=self.settings.token)
        response = await self._deadline("stat", key, timeout, self._http.post_json("stat", request))
        self._expect("stat", key, response, OK, not_found=True)
        decoded = self._decode("stat", response, StatResponse)
        return KeyInfo(
            key=decoded.key,
            modified=parse_rfc3339(decoded.modified, operation="stat"),
            size=decoded.size,
            is_terminal=decoded.is_terminal,
        )

    # -- plumbing ----------------------------------------------------------

    async def _deadline(
        self, operation: str, key: str, timeout: Optional[float], call: Awaitable[T]
    ) -> T:
        if timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout)
        except asyncio.TimeoutError as exc:
            raise OperationCancelledError(operation, timeout, key) from exc

    def _expect(
        self,
        operation: str,
        key: str,
        response: httpx.Response,
        success: int,
        *,
        not_found: bool = False,
    ) -> None:
        self.logger.debug("%s %r -> %d", operation, key, response.status_code)
        if response.status_code == success:
            return
        if not_found and response.status_code == NOT_FOUND:
            raise KeyNotFoundError(operation, key)
        raise UnexpectedStatusError(operation, response.status_code, key)

    @staticmethod
    def _decode(operation: str, response: httpx.Response, model: Type[ResponseT]) -> ResponseT:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as exc:
            raise EncodingError(operation, f"malformed response body: {exc}") from exc
