"""Wire records exchanged with the remote store, plus typed results."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class KeyRequest(BaseModel):
    """Body shared by lock, unlock, load, delete, exists and stat."""

    key: str
    token: str


class LockRequest(KeyRequest):
    pass


class UnlockRequest(KeyRequest):
    pass


class LoadRequest(KeyRequest):
    pass


class DeleteRequest(KeyRequest):
    pass


class ExistsRequest(KeyRequest):
    pass


class StatRequest(KeyRequest):
    pass


class StoreRequest(BaseModel):
    key: str
    value: str  # base64, standard alphabet
    token: str


class ListRequest(BaseModel):
    prefix: str
    recursive: bool
    token: str


class _Response(BaseModel):
    """Responses are decoded strictly; absent fields take zero values."""

    model_config = ConfigDict(strict=True, extra="ignore")


class LoadResponse(_Response):
    value: str = ""


class ExistsResponse(_Response):
    exists: bool = False


class ListResponse(_Response):
    keys: Optional[List[str]] = None


class StatResponse(_Response):
    key: str = ""
    modified: str = ""
    size: int = 0
    is_terminal: bool = Field(default=False, alias="isTerminal")


class KeyInfo(BaseModel):
    """Metadata about a stored key."""

    model_config = ConfigDict(frozen=True)

    key: str
    modified: dt.datetime
    size: int
    is_terminal: bool
