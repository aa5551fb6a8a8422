"""
Infrastructure shared across the adapter: logging, pluralization and the
collection registry.
"""

from .logging import configure_logging, get_logger, log_progress
from .pluralization import Pluralizer
from .registry import CollectionRegistry

__all__ = [
    "CollectionRegistry",
    "Pluralizer",
    "configure_logging",
    "get_logger",
    "log_progress",
]
