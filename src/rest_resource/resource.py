"""
CRUD facade translating ORM-style calls into REST requests.

:class:`Resource` exposes ``find``, ``create``, ``update`` and ``destroy``.
Each call runs through :meth:`Resource.request`, which resolves the HTTP verb
and path, routes selector criteria, consults the cache gate, issues the HTTP
call and normalizes the outcome. Results and errors are delivered through a
single callback invoked as ``callback(error)`` or ``callback(None, result)``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Mapping, Optional

from .adapters.base import CacheEngine, Collection, HTTPClient, RestError, ResultCallback
from .adapters.http import create_client
from .config import ResourceConfig
from .core.logging import get_logger, log_progress
from .core.pluralization import Pluralizer
from .core.registry import CollectionRegistry
from .pipeline.cache_gate import CacheGate
from .pipeline.errors import classify_failure
from .pipeline.params import PAGINATION_KEYS, route_parameters
from .pipeline.paths import format_uri, relative_path, resolve_resource
from .pipeline.results import format_result, results_as_collection

_SELECTOR_KEYS = frozenset({"where", *PAGINATION_KEYS})


def _record_id(record: Any) -> Any:
    if isinstance(record, Mapping):
        return record.get("id")
    return getattr(record, "id", None)


class _FanOutCompletion:
    """
    Fires the caller's callback once every per-record task has reported back.

    Tasks may complete in any order. The callback receives the first error
    reported, otherwise the result of the last task issued (the last matched
    record), independent of which task finished last.
    """

    def __init__(self, callback: ResultCallback, total: int) -> None:
        self.callback = callback
        self.total = total
        self.remaining = total
        self.error: Optional[BaseException] = None
        self.results: Dict[int, Any] = {}

    def task(self, index: int) -> ResultCallback:
        """Return the completion handler for the task at ``index``."""

        def task_done(error: Optional[BaseException] = None, result: Any = None) -> None:
            if error is not None:
                self.error = self.error or error
            else:
                self.results[index] = result
            self.remaining -= 1
            if self.remaining == 0:
                if self.error is not None:
                    self.callback(self.error)
                else:
                    self.callback(None, self.results.get(self.total - 1))

        return task_done


class Resource:
    """
    Remote REST resource data store.

    Parameters
    ----------
    config:
        Base configuration. Never mutated; each request works on an overlay.
    collections:
        Collections used to unserialize and cast records, by name.
    cache:
        Optional cache engine enabling read-through caching of ``find`` calls.
    client:
        HTTP client. Defaults to :func:`~rest_resource.adapters.http.create_client`.
    pluralizer:
        Derives resource names from collection names when ``resource`` is unset.
    """

    def __init__(
        self,
        config: ResourceConfig,
        collections: Optional[Mapping[str, Collection]] = None,
        *,
        cache: Optional[CacheEngine] = None,
        client: Optional[HTTPClient] = None,
        pluralizer: Optional[Pluralizer] = None,
    ) -> None:
        self.config = config
        self.client = client if client is not None else create_client(config)
        self.collections = CollectionRegistry.from_mapping(collections)
        self.pluralizer = pluralizer or Pluralizer()
        self.logger = get_logger(__name__, extra={"base_url": config.base_url})
        self.cache = CacheGate(cache, logger=self.logger)

    def request(
        self,
        collection_name: str,
        method_name: str,
        callback: ResultCallback,
        options: Optional[Mapping[str, Any]] = None,
        values: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Translate one CRUD call into HTTP and report the outcome to ``callback``.

        Parameters
        ----------
        collection_name:
            Name of the collection the records belong to.
        method_name:
            Logical method: ``find``, ``create``, ``update`` or ``destroy``.
        callback:
            Invoked exactly once with ``(error)`` or ``(None, result)``.
        options:
            Configuration overrides plus ``where`` and pagination hints.
        values:
            Record payload for ``create`` and ``update``.
        """

        verb = self.config.methods.get(method_name)
        if not self.client.supports(verb):
            self.logger.error("Invalid REST method", extra={"collection": collection_name, "operation": method_name, "method": verb})
            callback(RestError(f"Invalid REST method: {verb}"))
            return

        config = self.config.overlay(options)
        config = replace(config, resource=resolve_resource(config, collection_name, self.pluralizer))
        pathname = config.get_pathname(config, verb, values, options)

        routed = route_parameters(method_name, verb, pathname, config.query, options, values)
        if routed.fan_out:
            self._fan_out(collection_name, method_name, callback, options or {}, values)
            return

        uri = format_uri(config, routed.pathname, routed.query)
        cache_key = str(uri)

        cached = self.cache.lookup(method_name, cache_key)
        if cached is not None:
            callback(None, cached)
            return

        collection = self.collections.get(collection_name)

        def on_response(error: Optional[BaseException], request: Any, response: Any, data: Any) -> None:
            failure = classify_failure(error, request, response, data)
            if failure is not None:
                self.logger.warning(
                    "REST request failed",
                    extra={
                        "collection": collection_name,
                        "operation": method_name,
                        "method": verb,
                        "url": cache_key,
                        "status_code": failure.status_code,
                        "error": failure.message,
                    },
                )
                callback(failure)
                return

            if method_name == "find":
                result = results_as_collection(data, collection, config)
            else:
                result = format_result(data, collection, config)
            self.cache.record(method_name, cache_key, result)
            callback(None, result)

        send = getattr(self.client, verb)
        send(relative_path(uri, self.client.base_url), routed.body, callback=on_response)

    def _fan_out(
        self,
        collection_name: str,
        method_name: str,
        callback: ResultCallback,
        options: Mapping[str, Any],
        values: Optional[Mapping[str, Any]],
    ) -> None:
        """Run a bulk update/destroy as one request per record matched by ``find``."""

        overrides: Dict[str, Any] = {key: value for key, value in options.items() if key not in _SELECTOR_KEYS}
        logger = get_logger(__name__, extra={"collection": collection_name, "operation": method_name})

        def on_enumerated(error: Optional[BaseException], results: Any = None) -> None:
            if error is not None:
                callback(error)
                return

            record_ids = []
            for record in results or []:
                record_id = _record_id(record)
                if record_id is None:
                    logger.warning("Skipping matched record without id")
                    continue
                record_ids.append(record_id)

            log_progress(logger, "Fanning out bulk request", step="fan-out", status="started", extra={"records": len(record_ids)})
            if not record_ids:
                callback(None, [])
                return

            completion = _FanOutCompletion(callback, len(record_ids))
            for index, record_id in enumerate(record_ids):
                task_options = {**overrides, "where": {"id": record_id}}
                self.request(collection_name, method_name, completion.task(index), task_options, values)

        self.find(collection_name, options, on_enumerated)

    def find(self, collection: str, options: Optional[Mapping[str, Any]], callback: ResultCallback) -> None:
        """Select records matching ``options``."""

        self.request(collection, "find", callback, options)

    def create(self, collection: str, values: Mapping[str, Any], callback: ResultCallback) -> None:
        """Insert a record."""

        self.request(collection, "create", callback, None, values)

    def update(self, collection: str, options: Optional[Mapping[str, Any]], values: Mapping[str, Any], callback: ResultCallback) -> None:
        """Update records matching ``options``."""

        self.request(collection, "update", callback, options, values)

    def destroy(self, collection: str, options: Optional[Mapping[str, Any]], callback: ResultCallback) -> None:
        """Destroy records matching ``options``."""

        self.request(collection, "destroy", callback, options)
