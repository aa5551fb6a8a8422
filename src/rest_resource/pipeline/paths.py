"""
Resource and path resolution for outgoing requests.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx

from ..config import ResourceConfig
from ..core.pluralization import Pluralizer

_SCALAR_TYPES = (str, int, float, bool)


def resolve_resource(config: ResourceConfig, collection_name: str, pluralizer: Pluralizer) -> str:
    """Return the configured resource or the pluralized collection name."""

    return config.resource or pluralizer.pluralize(collection_name)


def append_id(pathname: str, where: Optional[Mapping[str, Any]]) -> Tuple[str, Dict[str, Any]]:
    """
    Move a selector ``id`` into the path.

    Returns the (possibly extended) pathname and a copy of the selector without
    ``id``. A selector without an ``id`` is returned unchanged.
    """

    remaining = dict(where or {})
    record_id = remaining.pop("id", None)
    if record_id is None:
        return pathname, remaining
    return f"{pathname}/{record_id}", remaining


def _query_value(value: Any) -> Any:
    if value is None or isinstance(value, _SCALAR_TYPES):
        return value
    if isinstance(value, (list, tuple)) and all(isinstance(item, _SCALAR_TYPES) for item in value):
        return list(value)
    return json.dumps(value, default=str, sort_keys=True)


def format_uri(config: ResourceConfig, pathname: str, query: Optional[Mapping[str, Any]] = None) -> httpx.URL:
    """Format the full request URI from the connection target, ``pathname`` and ``query``."""

    path = pathname if pathname.startswith("/") else f"/{pathname}"
    params = {key: _query_value(value) for key, value in (query or {}).items()}
    return httpx.URL(f"{config.base_url}{path}", params=params or None)


def relative_path(uri: httpx.URL, base_url: str) -> str:
    """
    Return ``uri`` relative to the client's ``base_url``.

    URIs outside the base URL are returned absolute.
    """

    text = str(uri)
    base = str(httpx.URL(base_url)).rstrip("/")
    if text.startswith(base):
        remainder = text[len(base) :]
        return remainder if remainder.startswith("/") else f"/{remainder}"
    return text
