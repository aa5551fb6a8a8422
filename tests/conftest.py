from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from rest_resource.config import ResourceConfig

BASE_URL = "http://api.example.com"


class FakeHTTPClient:
    """Scripted stand-in for the HTTP client collaborator."""

    base_url = BASE_URL
    verbs = frozenset({"get", "post", "put", "delete"})

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, Optional[Dict[str, Any]]]] = []
        self._routes: Dict[Tuple[str, str], Tuple[Optional[BaseException], Any, Any]] = {}

    def respond(self, verb: str, path: str, *, data: Any = None, status: Optional[int] = 200, error: Optional[BaseException] = None) -> None:
        response = None if status is None else SimpleNamespace(status_code=status)
        self._routes[(verb, path)] = (error, response, data)

    def supports(self, method: Optional[str]) -> bool:
        return method in self.verbs

    def _handle(self, verb: str, path: str, body: Optional[Dict[str, Any]], callback) -> None:
        self.calls.append((verb, path, body))
        error, response, data = self._routes.get((verb, path), (None, SimpleNamespace(status_code=200), {}))
        callback(error, SimpleNamespace(method=verb.upper(), path=path), response, data)

    def get(self, path, body=None, *, callback):
        self._handle("get", path, body, callback)

    def post(self, path, body=None, *, callback):
        self._handle("post", path, body, callback)

    def put(self, path, body=None, *, callback):
        self._handle("put", path, body, callback)

    def delete(self, path, body=None, *, callback):
        self._handle("delete", path, body, callback)


class DeferredHTTPClient(FakeHTTPClient):
    """Queues write completions so tests decide when and in which order they finish."""

    def __init__(self) -> None:
        super().__init__()
        self.pending: List[Callable[[], None]] = []

    def _handle(self, verb: str, path: str, body: Optional[Dict[str, Any]], callback) -> None:
        if verb == "get":
            super()._handle(verb, path, body, callback)
            return
        self.calls.append((verb, path, body))
        error, response, data = self._routes.get((verb, path), (None, SimpleNamespace(status_code=200), {}))
        request = SimpleNamespace(method=verb.upper(), path=path)
        self.pending.append(lambda: callback(error, request, response, data))

    def release_reversed(self, on_each: Optional[Callable[[], None]] = None) -> None:
        while self.pending:
            self.pending.pop()()
            if on_each is not None:
                on_each()


class FakeCollection:
    """Collection collaborator that records unserialize/cast calls."""

    def __init__(self) -> None:
        self.unserialized: List[Any] = []
        self.cast_records: List[Any] = []

    def unserialize(self, raw: Any) -> Any:
        self.unserialized.append(raw)
        return dict(raw) if isinstance(raw, dict) else raw

    def cast(self, record: Any) -> None:
        self.cast_records.append(record)


class CallbackRecorder:
    """Callable capturing every invocation of a CRUD callback."""

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []

    def __call__(self, *args: Any) -> None:
        self.calls.append(args)

    @property
    def error(self) -> Any:
        return self.calls[-1][0]

    @property
    def result(self) -> Any:
        return self.calls[-1][1]


@pytest.fixture()
def config() -> ResourceConfig:
    return ResourceConfig(hostname="api.example.com")


@pytest.fixture()
def http_client() -> FakeHTTPClient:
    return FakeHTTPClient()


@pytest.fixture()
def deferred_client() -> DeferredHTTPClient:
    return DeferredHTTPClient()


@pytest.fixture()
def widgets() -> FakeCollection:
    return FakeCollection()


@pytest.fixture()
def recorder() -> CallbackRecorder:
    return CallbackRecorder()
