from __future__ import annotations

"""Structured event logging for the enum behavior package.

Events are logged by name, with their fields passed as keyword arguments::

    log = get_logger(__name__, component="engine").bind(model="Article")
    log.info("enum_model_registered", fields=["state"], replaced=False)

Each record renders as one JSON line holding the event name, the bound
context, the call fields and the request correlation id when one is bound.
"""

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, MutableMapping
from uuid import uuid4

__all__ = [
    "JsonFormatter",
    "EventLogger",
    "configure_logging",
    "get_logger",
    "get_correlation_id",
    "correlation_context",
]

PACKAGE_LOGGER = "enum_behavior"

# Keyword arguments understood by ``Logger.log`` itself; anything else is an event field.
_LOGGING_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})
_CONTEXT_ATTR = "enum_context"

_correlation_id: ContextVar[str | None] = ContextVar("enum_behavior_correlation_id", default=None)


class JsonFormatter(logging.Formatter):
    """Render a record and its event context as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - override
        payload: Dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        context = getattr(record, _CONTEXT_ATTR, None)
        if context:
            payload.update(context)
        cid = _correlation_id.get()
        if cid is not None:
            payload.setdefault("correlation_id", cid)
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


class EventLogger(logging.LoggerAdapter):
    """Adapter turning keyword arguments into event fields.

    ``bind`` returns a child adapter whose fields are attached to every
    event it logs; call-site fields win over bound ones.
    """

    def bind(self, **fields: Any) -> EventLogger:
        return EventLogger(self.logger, {**self.extra, **fields})

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        context = dict(self.extra)
        for name in [key for key in kwargs if key not in _LOGGING_KWARGS]:
            context[name] = kwargs.pop(name)
        extra = dict(kwargs.get("extra") or {})
        extra[_CONTEXT_ATTR] = context
        kwargs["extra"] = extra
        return msg, kwargs


def configure_logging(level: int | str = logging.INFO, *, environment: str = "dev") -> logging.Logger:
    """Attach a JSON handler to the package logger.

    Only the ``enum_behavior`` logger is configured; the host keeps its root
    logger. Repeated calls adjust the level without adding handlers. In
    ``prod`` the level never drops below INFO.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        level = resolved if isinstance(resolved, int) else logging.INFO
    if environment == "prod":
        level = max(level, logging.INFO)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(handler.formatter, JsonFormatter) for handler in package_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return package_logger


def get_logger(name: str, **context: Any) -> EventLogger:
    return EventLogger(logging.getLogger(name), context)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Bind a correlation id (a fresh uuid4 when none is given) for the block."""

    cid = correlation_id or uuid4().hex
    token = _correlation_id.set(cid)
    try:
        yield cid
    finally:
        _correlation_id.reset(token)
