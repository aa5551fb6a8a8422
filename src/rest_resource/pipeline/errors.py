"""
Classification of HTTP client failures into :class:`RestError`.
"""

from __future__ import annotations

from typing import Any, Optional

from ..adapters.base import RestError


def is_error_status(status_code: Any) -> bool:
    """Return ``True`` for 4xx and 5xx status codes."""

    try:
        return 400 <= int(status_code) < 600
    except (TypeError, ValueError):
        return False


def classify_failure(error: Optional[BaseException], request: Any, response: Any, data: Any) -> Optional[RestError]:
    """
    Wrap a failed HTTP call as :class:`RestError`.

    A call failed when the client reported an error and either no response
    arrived or the response carries a 4xx/5xx status. An error accompanied by a
    2xx/3xx response is not a failure and yields ``None``.
    """

    if error is None:
        return None
    if response is not None and not is_error_status(getattr(response, "status_code", None)):
        return None
    if isinstance(error, RestError):
        return error
    return RestError(str(error), request=request, response=response, data=data)
