"""
Placement of selector criteria on outgoing requests.

Depending on the HTTP verb the caller's ``where`` selector ends up in the
path (``id``), the query string (reads) or the request body (writes). Bulk
updates and destroys without an ``id`` are flagged for fan-out instead of
being sent as a single request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .paths import append_id

PAGINATION_KEYS = ("skip", "limit", "offset")
BULK_METHODS = frozenset({"update", "destroy"})
READ_VERB = "get"


@dataclass(slots=True)
class RoutedRequest:
    """Outcome of parameter routing for one request."""

    pathname: str
    query: Dict[str, Any] = field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None
    fan_out: bool = False


def route_parameters(
    method_name: str,
    verb: str,
    pathname: str,
    query: Optional[Mapping[str, Any]],
    options: Optional[Mapping[str, Any]],
    values: Optional[Mapping[str, Any]] = None,
) -> RoutedRequest:
    """
    Decide where selector fields travel for a single request.

    Parameters
    ----------
    method_name:
        Logical CRUD method (``find``, ``create``, ``update``, ``destroy``).
    verb:
        Resolved HTTP verb, lower case.
    pathname:
        Base pathname computed for the resource.
    query:
        Default query parameters from configuration. Never mutated.
    options:
        Caller options carrying ``where`` and pagination hints. Never mutated.
    values:
        Explicit payload for create/update.
    """

    routed = RoutedRequest(pathname=pathname, query=dict(query or {}))
    options = options if isinstance(options, Mapping) else {}
    selector: Dict[str, Any] = {}

    where = options.get("where")
    if where is not None:
        if where.get("id") is None and method_name in BULK_METHODS and verb != READ_VERB:
            routed.fan_out = True
            return routed

        routed.pathname, selector = append_id(pathname, where)

        if verb == READ_VERB:
            routed.query.update(selector)
            selector = {}

    if verb == READ_VERB:
        for key in PAGINATION_KEYS:
            if options.get(key) is not None:
                routed.query[key] = options[key]

    if values or selector:
        body = dict(values or {})
        body.update(selector)
        routed.body = body
    return routed
