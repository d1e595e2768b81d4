"""Storage backend for certificate management on top of a remote HTTP key/value store."""

from .core import (
    ConfigurationError,
    EncodingError,
    KeyInfo,
    KeyNotFoundError,
    OperationCancelledError,
    RestStorageSettings,
    Storage,
    StorageError,
    StorageLock,
    StorageTransportError,
    UnexpectedStatusError,
)
from .services import RestStorage

__all__ = [
    "ConfigurationError",
    "EncodingError",
    "KeyInfo",
    "KeyNotFoundError",
    "OperationCancelledError",
    "RestStorage",
    "RestStorageSettings",
    "Storage",
    "StorageError",
    "StorageLock",
    "StorageTransportError",
    "UnexpectedStatusError",
    "__version__",
]

__version__ = "0.1.0"
