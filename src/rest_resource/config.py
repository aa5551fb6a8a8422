"""
Adapter configuration.

:class:`ResourceConfig` is an immutable description of one REST backend: where
it lives, how logical CRUD methods map onto HTTP verbs, how resource paths are
built and which hooks reshape results. Requests never mutate it; every call
derives a private copy with :meth:`ResourceConfig.overlay`.

Configurations can be declared in YAML and loaded with :func:`load_config`.
The lookup order is:

1. Explicit ``path`` argument.
2. ``REST_RESOURCE_CONFIG`` environment variable.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import yaml

from .adapters.base import ConfigurationError

DEFAULT_TIMEOUT = 15.0
DEFAULT_RETRIES = 3
DEFAULT_METHODS: Mapping[str, str] = {
    "find": "get",
    "create": "post",
    "update": "put",
    "destroy": "delete",
}
_ENV_CONFIG = "REST_RESOURCE_CONFIG"

Hook = Callable[[Any], Any]
PathnameStrategy = Callable[..., str]


def default_pathname(config: "ResourceConfig", method: str, values: Optional[Mapping[str, Any]] = None, options: Optional[Mapping[str, Any]] = None) -> str:
    """Return ``<pathname-root>/<resource>[/<action>]``."""

    pathname = f"{config.pathname}/{config.resource}"
    if config.action:
        pathname = f"{pathname}/{config.action}"
    return pathname


@dataclass(slots=True, frozen=True)
class BasicAuthSettings:
    """Credentials for HTTP basic authentication."""

    username: str
    password: str = ""


@dataclass(slots=True, frozen=True)
class ResourceConfig:
    """
    Connection and translation settings for a REST backend.

    Parameters
    ----------
    protocol, hostname, port:
        Connection target used for both the HTTP client base URL and the
        formatted request URIs.
    pathname:
        Root path prepended to every resource path (e.g. ``/api/v1``).
    resource:
        Resource segment. When empty it is derived from the collection name.
    action:
        Optional trailing path segment appended after the resource.
    query:
        Default query parameters sent with every request.
    methods:
        Logical CRUD method name to HTTP verb.
    client_type:
        ``json`` or ``string``; selects body encoding and response decoding.
    get_pathname:
        Strategy computing the base pathname, see :func:`default_pathname`.
    before_format_result, after_format_result:
        Per-record hooks applied around unserialize and cast.
    before_format_results, after_format_results:
        Hooks applied to the whole result list of a ``find``.
    """

    protocol: str = "http"
    hostname: str = "localhost"
    port: Optional[int] = None
    pathname: str = ""
    resource: Optional[str] = None
    action: Optional[str] = None
    query: Mapping[str, Any] = field(default_factory=dict)
    methods: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_METHODS))
    client_type: str = "json"
    headers: Mapping[str, str] = field(default_factory=dict)
    basic_auth: Optional[BasicAuthSettings] = None
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    get_pathname: PathnameStrategy = default_pathname
    before_format_result: Optional[Hook] = None
    after_format_result: Optional[Hook] = None
    before_format_results: Optional[Hook] = None
    after_format_results: Optional[Hook] = None

    @property
    def base_url(self) -> str:
        netloc = f"{self.hostname}:{self.port}" if self.port else self.hostname
        return f"{self.protocol}://{netloc}"

    def overlay(self, options: Optional[Mapping[str, Any]] = None) -> "ResourceConfig":
        """
        Return a fresh configuration with ``options`` applied.

        Only keys naming a configuration field are taken from ``options``;
        selector keys such as ``where`` or ``limit`` are ignored. Mutable
        members are deep-copied so the result shares no state with ``self``.
        """

        overrides: Dict[str, Any] = {}
        if isinstance(options, Mapping):
            overrides = {key: value for key, value in options.items() if key in _FIELD_NAMES}
        overrides.setdefault("query", self.query)
        overrides.setdefault("headers", self.headers)
        overrides.setdefault("methods", self.methods)
        for key in ("query", "headers", "methods"):
            overrides[key] = copy.deepcopy(dict(overrides[key] or {}))
        return replace(self, **overrides)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "ResourceConfig":
        """Build a configuration from plain data such as a parsed YAML document."""

        if not isinstance(payload, Mapping):
            raise ConfigurationError(f"Configuration must be a mapping, got {type(payload)!r}.")
        unknown = sorted(set(payload) - _FIELD_NAMES)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}.")

        values = dict(payload)
        auth = values.get("basic_auth")
        if isinstance(auth, Mapping):
            try:
                values["basic_auth"] = BasicAuthSettings(username=str(auth["username"]), password=str(auth.get("password", "")))
            except KeyError as exc:
                raise ConfigurationError(f"basic_auth is missing required key {exc!s}.") from exc
        if "methods" in values:
            values["methods"] = {**DEFAULT_METHODS, **dict(values["methods"] or {})}
        if values.get("port") is not None:
            try:
                values["port"] = int(values["port"])
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"Invalid port: {values['port']!r}.") from exc
        return cls(**values)


_FIELD_NAMES = frozenset(item.name for item in fields(ResourceConfig))


def _resolve_config_path(path: Optional[Path | str]) -> Path:
    if path:
        return Path(path).expanduser()
    env_override = os.getenv(_ENV_CONFIG)
    if env_override:
        return Path(env_override).expanduser()
    raise ConfigurationError(f"No configuration path given. Pass one explicitly or set {_ENV_CONFIG}.")


def load_config(path: Optional[Path | str] = None) -> ResourceConfig:
    """
    Load a :class:`ResourceConfig` from a YAML document.

    Parameters
    ----------
    path:
        Location of the YAML file. Falls back to ``REST_RESOURCE_CONFIG``.
    """

    location = _resolve_config_path(path)
    if not location.is_file():
        raise ConfigurationError(f"Configuration file '{location}' does not exist.")

    try:
        with location.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except yaml.YAMLError as exc:  # pragma: no cover - depends on PyYAML
        raise ConfigurationError(f"Failed to parse '{location}': {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Configuration file '{location}' must contain a mapping.")
    return ResourceConfig.from_mapping(payload)
