"""HTTP-backed storage services."""

from .http_client import HttpClient
from .rest_storage import RestStorage

__all__ = [
    "HttpClient",
    "RestStorage",
]
