from __future__ import annotations

import base64
import datetime as dt
import json
from typing import Callable, Dict, List, Set

import httpx
import pytest

from reststorage import RestStorage, RestStorageSettings
from reststorage.utils.timefmt import format_rfc3339


ENDPOINT = "http://kv.test/api/"
TOKEN = "secret-token"


class FakeRemoteStore:
    """In-memory remote store speaking the JSON protocol with single-holder locks."""

    def __init__(self, token: str = TOKEN) -> None:
        self.token = token
        self.values: Dict[str, bytes] = {}
        self.modified: Dict[str, dt.datetime] = {}
        self.locks: Set[str] = set()
        self.calls: List[str] = []
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        operation = request.url.path.rsplit("/", 1)[-1]
        self.calls.append(operation)
        self.requests.append(request)
        body = json.loads(request.content)
        if body.get("token") != self.token:
            return httpx.Response(401)
        return getattr(self, f"_op_{operation}")(body)

    def _op_lock(self, body: dict) -> httpx.Response:
        if body["key"] in self.locks:
            return httpx.Response(412)
        self.locks.add(body["key"])
        return httpx.Response(201)

    def _op_unlock(self, body: dict) -> httpx.Response:
        if body["key"] not in self.locks:
            return httpx.Response(404)
        self.locks.discard(body["key"])
        return httpx.Response(204)

    def _op_store(self, body: dict) -> httpx.Response:
        self.values[body["key"]] = base64.b64decode(body["value"])
        self.modified[body["key"]] = dt.datetime(2023, 5, 1, 12, 0, tzinfo=dt.timezone.utc)
        return httpx.Response(201)

    def _op_load(self, body: dict) -> httpx.Response:
        if body["key"] not in self.values:
            return httpx.Response(404)
        return httpx.Response(200, json={"value": base64.b64encode(self.values[body["key"]]).decode()})

    def _op_delete(self, body: dict) -> httpx.Response:
        if self.values.pop(body["key"], None) is None:
            return httpx.Response(404)
        return httpx.Response(204)

    def _op_exists(self, body: dict) -> httpx.Response:
        return httpx.Response(200, json={"exists": body["key"] in self.values})

    def _op_list(self, body: dict) -> httpx.Response:
        prefix = body["prefix"]
        keys: List[str] = []
        for key in sorted(self.values):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if not body["recursive"] and "/" in rest:
                key = prefix + rest.split("/", 1)[0]
            if key not in keys:
                keys.append(key)
        if not keys:
            return httpx.Response(404)
        return httpx.Response(200, json={"keys": keys})

    def _op_stat(self, body: dict) -> httpx.Response:
        key = body["key"]
        if key in self.values:
            return httpx.Response(
                200,
                json={
                    "key": key,
                    "modified": format_rfc3339(self.modified[key]),
                    "size": len(self.values[key]),
                    "isTerminal": True,
                },
            )
        if any(stored.startswith(key.rstrip("/") + "/") for stored in self.values):
            return httpx.Response(
                200,
                json={"key": key, "modified": "2023-05-01T12:00:00Z", "size": 0, "isTerminal": False},
            )
        return httpx.Response(404)


def make_storage(handler: Callable, **overrides) -> RestStorage:
    settings = RestStorageSettings(
        endpoint=ENDPOINT,
        token=TOKEN,
        lock_poll_initial=overrides.pop("lock_poll_initial", 0.01),
        lock_poll_max=overrides.pop("lock_poll_max", 0.05),
        **overrides,
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RestStorage(settings, client=client)


@pytest.fixture
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def storage(remote: FakeRemoteStore) -> RestStorage:
    return make_storage(remote.handler)


@pytest.fixture
def storage_factory() -> Callable[..., RestStorage]:
    return make_storage
