"""
Error types and collaborator protocols for the resource adapter.

The request pipeline never talks to concrete HTTP, cache or collection
implementations. It relies on the narrow protocols declared here so callers
can plug in their own transport, cache store or ORM collection objects.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol

ResponseCallback = Callable[[Optional[BaseException], Any, Any, Any], None]
"""Completion handler of an HTTP call: ``(error, request, response, data)``."""

ResultCallback = Callable[..., None]
"""Completion handler of a CRUD call: ``(error)`` or ``(None, result)``."""


class AdapterError(RuntimeError):
    """Base class for errors raised by the resource adapter."""


class ConfigurationError(AdapterError):
    """Raised when adapter configuration cannot be loaded or is inconsistent."""


class RestError(AdapterError):
    """
    Normalized error delivered to CRUD callbacks.

    Parameters
    ----------
    message:
        Human-readable description, usually the transport error message.
    request:
        The originating HTTP request, when one was issued.
    response:
        The HTTP response, when the server answered.
    data:
        The decoded response body, when available.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        request: Any = None,
        response: Any = None,
        data: Any = None,
    ) -> None:
        self.message = message or "REST Error Message"
        self.meta: dict[str, Any] = {"request": request, "response": response, "data": data}
        super().__init__(self.message)

    @property
    def request(self) -> Any:
        return self.meta["request"]

    @property
    def response(self) -> Any:
        return self.meta["response"]

    @property
    def data(self) -> Any:
        return self.meta["data"]

    @property
    def status_code(self) -> Optional[int]:
        return getattr(self.response, "status_code", None)


class HTTPClient(Protocol):
    """Verb-named HTTP operations with a completion callback."""

    base_url: str

    def supports(self, method: str) -> bool:
        """Return ``True`` when ``method`` is a verb this client can issue."""

    def get(self, path: str, body: Optional[Mapping[str, Any]] = None, *, callback: ResponseCallback) -> None: ...

    def post(self, path: str, body: Optional[Mapping[str, Any]] = None, *, callback: ResponseCallback) -> None: ...

    def put(self, path: str, body: Optional[Mapping[str, Any]] = None, *, callback: ResponseCallback) -> None: ...

    def delete(self, path: str, body: Optional[Mapping[str, Any]] = None, *, callback: ResponseCallback) -> None: ...


class CacheEngine(Protocol):
    """Key/value store consulted by the cache gate."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class Collection(Protocol):
    """ORM-side description of a resource type."""

    def unserialize(self, raw: Any) -> Any:
        """Convert a raw API record into the collection's record shape."""

    def cast(self, record: Any) -> None:
        """Cast attribute values of ``record`` in place."""
