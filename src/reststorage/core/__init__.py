"""Core contract of the REST storage adapter."""

from .errors import (
    ConfigurationError,
    EncodingError,
    KeyNotFoundError,
    OperationCancelledError,
    StorageError,
    StorageTransportError,
    UnexpectedStatusError,
)
from .locks import AsyncLock, StorageLock
from .models import KeyInfo
from .settings import RestStorageSettings
from .storage import Storage

__all__ = [
    "AsyncLock",
    "ConfigurationError",
    "EncodingError",
    "KeyInfo",
    "KeyNotFoundError",
    "OperationCancelledError",
    "RestStorageSettings",
    "Storage",
    "StorageError",
    "StorageLock",
    "StorageTransportError",
    "UnexpectedStatusError",
]
