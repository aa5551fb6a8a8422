"""
Logging helpers shared by the resource adapter.

The helpers wrap :mod:`logging` so every module emits records through the same
structured formatter. Request metadata (method, URL, cache outcome, collection)
travels in ``extra`` and is rendered as ``key=value`` pairs after the message.
Obtain loggers through :func:`get_logger` rather than creating handlers.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from copy import copy
from logging import Logger, LoggerAdapter
from typing import Any, Iterable, Mapping, MutableMapping, Optional, Sequence

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LEVEL = "INFO"
_ENV_LEVEL = "REST_RESOURCE_LOG_LEVEL"
_ENV_COLOR = "REST_RESOURCE_LOG_COLOR"
_EXTRA_FOCUS_ORDER: Sequence[str] = (
    "collection",
    "operation",
    "step",
    "status",
    "method",
    "url",
    "status_code",
    "cache",
    "attempt",
    "records",
)

_LEVEL_STYLES = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[95m",
}
_RESET = "\033[0m"

_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
    "asctime",
}

_configured = False


def _resolve_level(level: Optional[int | str]) -> int:
    if isinstance(level, int):
        return level
    candidate = (level or os.getenv(_ENV_LEVEL) or DEFAULT_LEVEL).upper()
    resolved = logging.getLevelName(candidate)
    return resolved if isinstance(resolved, int) else logging.INFO


def _supports_color(stream: Any) -> bool:
    preference = (os.getenv(_ENV_COLOR) or "").strip().lower()
    if preference in {"1", "true", "yes", "on"}:
        return True
    if preference in {"0", "false", "no", "off"}:
        return False
    return hasattr(stream, "isatty") and bool(stream.isatty())


def _iter_extras(record: logging.LogRecord) -> Iterable[tuple[str, Any]]:
    payload = {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS and not key.startswith("_") and value is not None}

    for key in _EXTRA_FOCUS_ORDER:
        if key in payload:
            yield key, payload.pop(key)

    for key in sorted(payload):
        yield key, payload[key]


def _format_extra_value(value: Any) -> str:
    if isinstance(value, (list, tuple, set)):
        return "[" + ", ".join(_format_extra_value(item) for item in value) + "]"
    if isinstance(value, Mapping):
        try:
            return json.dumps(value, ensure_ascii=False, default=str)
        except TypeError:
            return repr(dict(value))
    if isinstance(value, float):
        return f"{value:.4g}"
    return str(value)


class StructuredLogFormatter(logging.Formatter):
    """Formatter that appends structured extras and supports optional colour output."""

    def __init__(self, *, use_color: bool = False) -> None:
        super().__init__(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        working = copy(record)
        if self.use_color:
            style = _LEVEL_STYLES.get(working.levelname.strip().upper())
            if style:
                working.levelname = f"{style}{working.levelname}{_RESET}"
        base = super().format(working)
        extras = " ".join(f"{key}={_format_extra_value(value)}" for key, value in _iter_extras(record))
        if extras:
            return f"{base} | {extras}"
        return base


class StructuredLoggerAdapter(LoggerAdapter):
    """Adapter merging per-call ``extra`` over the bound extras instead of replacing it."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        merged = dict(self.extra or {})
        merged.update(kwargs.get("extra") or {})
        kwargs["extra"] = merged
        return msg, kwargs


def _build_handler(level: Optional[int | str]) -> logging.Handler:
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(_resolve_level(level))
    handler.setFormatter(StructuredLogFormatter(use_color=_supports_color(handler.stream)))
    return handler


def configure_logging(level: Optional[int | str] = None, *, force: bool = False) -> None:
    """
    Configure root logging handlers unless already initialised.

    Parameters
    ----------
    level:
        Optional logging level override. Falls back to ``REST_RESOURCE_LOG_LEVEL`` or ``INFO``.
    force:
        When ``True`` the configuration is reapplied even if previously initialised.
    """

    global _configured
    if _configured and not force:
        return
    logging.basicConfig(level=_resolve_level(level), handlers=[_build_handler(level)], force=force)
    _configured = True


def get_logger(
    name: str,
    *,
    level: Optional[int | str] = None,
    extra: Optional[Mapping[str, object]] = None,
) -> LoggerAdapter:
    """
    Return a :class:`StructuredLoggerAdapter` carrying ``extra`` on every record.

    Per-call ``extra`` passed to the adapter is merged over the bound mapping.

    Parameters
    ----------
    name:
        Logger namespace, typically ``__name__``.
    level:
        Optional per-logger level override.
    extra:
        Structured metadata recorded with each log entry.
    """

    configure_logging(level)
    base: Logger = logging.getLogger(name)
    if level is not None:
        base.setLevel(_resolve_level(level))
    payload = {key: value for key, value in (extra or {}).items() if value is not None}
    return StructuredLoggerAdapter(base, payload)


def log_progress(
    logger: LoggerAdapter | Logger,
    message: str,
    *,
    step: Optional[str] = None,
    status: Optional[str] = None,
    level: int = logging.INFO,
    extra: Optional[Mapping[str, object]] = None,
) -> None:
    """
    Emit a progress record for multi-request operations such as bulk fan-outs.

    Adapter extras and ``extra`` are merged so the record keeps the bound
    context of the calling logger.
    """

    payload: MutableMapping[str, object] = {}
    if isinstance(logger, LoggerAdapter) and isinstance(logger.extra, Mapping):
        payload.update({key: value for key, value in logger.extra.items() if value is not None})
    if extra:
        payload.update(extra)
    if step:
        payload["step"] = step
    if status:
        payload["status"] = status
    target = logger.logger if isinstance(logger, LoggerAdapter) else logger
    if payload:
        target.log(level, message, extra=dict(payload))
    else:
        target.log(level, message)
