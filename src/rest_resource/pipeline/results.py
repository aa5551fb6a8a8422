"""
Normalization of response bodies into collection records.

Hooks configured on :class:`~rest_resource.config.ResourceConfig` run at fixed
points: ``before_format_result``/``after_format_result`` around each record's
unserialize and cast, ``before_format_results``/``after_format_results``
around the list returned by a ``find``.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from ..adapters.base import Collection
from ..config import ResourceConfig

ENVELOPE_KEYS = ("objects", "results")


def format_result(result: Any, collection: Optional[Collection], config: ResourceConfig) -> Any:
    """Format a single raw record."""

    if config.before_format_result is not None:
        result = config.before_format_result(result)

    if collection is not None:
        result = collection.unserialize(result)
        collection.cast(result)

    if config.after_format_result is not None:
        result = config.after_format_result(result)

    return result


def format_results(results: Sequence[Any], collection: Optional[Collection], config: ResourceConfig) -> List[Any]:
    """Format a list of raw records."""

    if config.before_format_results is not None:
        results = config.before_format_results(results)

    formatted = [format_result(result, collection, config) for result in results]

    if config.after_format_results is not None:
        formatted = config.after_format_results(formatted)

    return formatted


def extract_results(data: Any) -> List[Any]:
    """
    Return the records contained in a response body.

    APIs wrap lists differently; ``objects`` wins over ``results``, and a body
    without either envelope is treated as the record list itself.
    """

    if data is None:
        return []
    payload = data
    if isinstance(data, Mapping):
        for key in ENVELOPE_KEYS:
            if data.get(key) is not None:
                payload = data[key]
                break
    if isinstance(payload, list):
        return payload
    if isinstance(payload, tuple):
        return list(payload)
    return [payload]


def results_as_collection(data: Any, collection: Optional[Collection], config: ResourceConfig) -> List[Any]:
    """Extract and format the record list of a ``find`` response."""

    return format_results(extract_results(data), collection, config)
