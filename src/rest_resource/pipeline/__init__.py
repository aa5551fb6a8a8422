"""
Request-translation pipeline stages used by :class:`~rest_resource.resource.Resource`.
"""

from .cache_gate import CacheGate
from .errors import classify_failure
from .params import RoutedRequest, route_parameters
from .paths import append_id, format_uri, relative_path, resolve_resource
from .results import extract_results, format_result, format_results, results_as_collection

__all__ = [
    "CacheGate",
    "RoutedRequest",
    "append_id",
    "classify_failure",
    "extract_results",
    "format_result",
    "format_results",
    "format_uri",
    "relative_path",
    "resolve_resource",
    "results_as_collection",
    "route_parameters",
]
