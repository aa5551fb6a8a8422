"""
rest-resource: a CRUD-to-REST translation adapter.

:class:`Resource` turns ``find``/``create``/``update``/``destroy`` calls into
HTTP requests against a remote REST API and normalizes the responses for an
ORM-style data layer.
"""

from .adapters import AdapterError, ConfigurationError, MemoryCacheEngine, RestClient, RestError, create_client
from .config import BasicAuthSettings, ResourceConfig, default_pathname, load_config
from .core import CollectionRegistry, Pluralizer, configure_logging, get_logger
from .resource import Resource

__all__ = [
    "AdapterError",
    "BasicAuthSettings",
    "CollectionRegistry",
    "ConfigurationError",
    "MemoryCacheEngine",
    "Pluralizer",
    "Resource",
    "ResourceConfig",
    "RestClient",
    "RestError",
    "configure_logging",
    "create_client",
    "default_pathname",
    "get_logger",
    "load_config",
]
