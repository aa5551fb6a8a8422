"""
Collaborator protocols and default implementations.

The request pipeline depends only on the protocols in :mod:`.base`. The HTTPX
client and the cachetools-backed cache engine are the defaults used when a
caller does not supply its own.
"""

from .base import AdapterError, CacheEngine, Collection, ConfigurationError, HTTPClient, RestError
from .cache import MemoryCacheEngine
from .http import RestClient, create_client

__all__ = [
    "AdapterError",
    "CacheEngine",
    "Collection",
    "ConfigurationError",
    "HTTPClient",
    "MemoryCacheEngine",
    "RestClient",
    "RestError",
    "create_client",
]
