"""
Default HTTP client for the resource adapter.

:class:`RestClient` is a thin HTTPX wrapper exposing verb-named operations that
report completion through a callback ``(error, request, response, data)``.
Transport errors are retried with exponential backoff; HTTP status errors are
not retried and are handed to the callback together with the decoded body so
the request pipeline can classify them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import TYPE_CHECKING, Any, Mapping, MutableMapping, Optional, Tuple

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.logging import get_logger
from .base import ConfigurationError, ResponseCallback

if TYPE_CHECKING:
    from ..config import ResourceConfig

DEFAULT_TIMEOUT = 15.0
SUPPORTED_METHODS = frozenset({"get", "head", "post", "put", "patch", "delete"})
CLIENT_TYPES = frozenset({"json", "string"})


@dataclass(slots=True)
class RestClient:
    """
    Synchronous REST client with retry support.

    Parameters
    ----------
    base_url:
        Root URL of the upstream API.
    client_type:
        ``json`` sends JSON bodies and decodes JSON responses; ``string`` sends
        form-encoded bodies and returns response text.
    timeout:
        Request timeout in seconds.
    default_headers:
        Headers attached to every request.
    auth:
        Optional ``(username, password)`` pair for HTTP basic authentication.
    retries:
        Attempts made before a transport error is reported.
    transport:
        Optional HTTPX transport, mainly for tests (``httpx.MockTransport``).
    """

    base_url: str
    client_type: str = "json"
    timeout: float = DEFAULT_TIMEOUT
    default_headers: MutableMapping[str, str] = field(default_factory=dict)
    auth: Optional[Tuple[str, str]] = None
    retries: int = 3
    transport: Optional[httpx.BaseTransport] = field(default=None, repr=False)
    logger: LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.client_type not in CLIENT_TYPES:
            raise ConfigurationError(f"Invalid type provided: {self.client_type}")
        self.logger = get_logger(
            f"{self.__class__.__module__}.{self.__class__.__name__}",
            extra={"base_url": self.base_url},
        )

    def supports(self, method: Optional[str]) -> bool:
        return method in SUPPORTED_METHODS

    def get(self, path: str, body: Optional[Mapping[str, Any]] = None, *, callback: ResponseCallback) -> None:
        self._dispatch("GET", path, body, callback)

    def head(self, path: str, body: Optional[Mapping[str, Any]] = None, *, callback: ResponseCallback) -> None:
        self._dispatch("HEAD", path, body, callback)

    def post(self, path: str, body: Optional[Mapping[str, Any]] = None, *, callback: ResponseCallback) -> None:
        self._dispatch("POST", path, body, callback)

    def put(self, path: str, body: Optional[Mapping[str, Any]] = None, *, callback: ResponseCallback) -> None:
        self._dispatch("PUT", path, body, callback)

    def patch(self, path: str, body: Optional[Mapping[str, Any]] = None, *, callback: ResponseCallback) -> None:
        self._dispatch("PATCH", path, body, callback)

    def delete(self, path: str, body: Optional[Mapping[str, Any]] = None, *, callback: ResponseCallback) -> None:
        self._dispatch("DELETE", path, body, callback)

    def _build_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=dict(self.default_headers),
            auth=self.auth,
            transport=self.transport,
            follow_redirects=True,
        )

    def _encode_body(self, body: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        if body is None:
            return {}
        if self.client_type == "json":
            return {"json": dict(body)}
        return {"data": {key: str(value) for key, value in body.items()}}

    def _decode_body(self, response: httpx.Response) -> Any:
        if self.client_type == "string":
            return response.text
        if not response.content:
            return None
        return response.json()

    def _send(self, method: str, path: str, body: Optional[Mapping[str, Any]]) -> httpx.Response:
        @retry(
            retry=retry_if_exception_type(httpx.TransportError),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            stop=stop_after_attempt(max(1, self.retries)),
            reraise=True,
        )
        def _attempt() -> httpx.Response:
            with self._build_client() as client:
                return client.request(method, path, **self._encode_body(body))

        return _attempt()

    def _dispatch(self, method: str, path: str, body: Optional[Mapping[str, Any]], callback: ResponseCallback) -> None:
        self.logger.debug("HTTP request", extra={"method": method, "url": path})

        try:
            response = self._send(method, path, body)
        except httpx.HTTPError as exc:
            self.logger.error("HTTP transport failure", extra={"method": method, "url": path, "error": str(exc)})
            callback(exc, _request_of(exc), None, None)
            return
        except (TypeError, ValueError) as exc:
            self.logger.error("Request body could not be encoded", extra={"method": method, "url": path, "error": str(exc)})
            callback(exc, None, None, None)
            return

        error: Optional[Exception] = None
        data: Any = None
        try:
            data = self._decode_body(response)
        except ValueError as exc:
            error = exc

        if response.status_code >= 400:
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                error = exc

        self.logger.debug(
            "HTTP response",
            extra={"method": method, "status_code": response.status_code, "url": str(response.url)},
        )
        callback(error, response.request, response, data)


def _request_of(exc: httpx.HTTPError) -> Optional[httpx.Request]:
    try:
        return exc.request
    except RuntimeError:
        return None


def create_client(config: "ResourceConfig", *, transport: Optional[httpx.BaseTransport] = None) -> RestClient:
    """Build a :class:`RestClient` from a :class:`~rest_resource.config.ResourceConfig`."""

    auth = (config.basic_auth.username, config.basic_auth.password) if config.basic_auth else None
    return RestClient(
        base_url=config.base_url,
        client_type=config.client_type,
        timeout=config.timeout,
        default_headers=dict(config.headers),
        auth=auth,
        retries=config.retries,
        transport=transport,
    )
