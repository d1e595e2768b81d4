"""Error taxonomy for the REST storage adapter."""

from __future__ import annotations

from typing import Optional


class StorageError(Exception):
    """Base class for every error raised by the storage adapter."""


class ConfigurationError(StorageError, ValueError):
    """Endpoint or token missing/invalid; raised once at construction."""


class StorageTransportError(StorageError):
    """Network, DNS or TLS failure talking to the remote store."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class EncodingError(StorageError):
    """Request serialization or response decoding failed."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class KeyNotFoundError(StorageError, FileNotFoundError):
    """The remote store reported that the key (or lock) does not exist."""

    def __init__(self, operation: str, key: str) -> None:
        super().__init__(f"{operation}: key does not exist: {key!r}")
        self.operation = operation
        self.key = key


class UnexpectedStatusError(StorageError):
    """The remote store answered with a status code outside the documented set."""

    def __init__(self, operation: str, status_code: int, key: Optional[str] = None) -> None:
        target = f" (key={key!r})" if key is not None else ""
        super().__init__(f"{operation}: unexpected status code received: {status_code}{target}")
        self.operation = operation
        self.status_code = status_code
        self.key = key


class OperationCancelledError(StorageError):
    """The caller's deadline expired before the operation completed."""

    def __init__(self, operation: str, timeout: float, key: Optional[str] = None) -> None:
        target = f" for key {key!r}" if key is not None else ""
        super().__init__(f"{operation}: gave up after {timeout:g}s{target}")
        self.operation = operation
        self.timeout = timeout
        self.key = key
