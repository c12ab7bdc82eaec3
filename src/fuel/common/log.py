"""Flush context for cookie log records.

Modules log through ``logging.getLogger(__name__)``; handlers and levels
belong to the application. What this module adds is the context a
``CookieJar.flush`` runs in: the jar and the cookie being sent are bound
with :class:`LogContext`, and :class:`FlushContextFilter` copies them onto
each record as attributes::

    record.jar          # "0x7f..." of the flushing jar, or None
    record.cookie       # name of the cookie being sent, or None
    record.flush_context  # every bound pair, as a dict

so a handler can use ``"%(levelname)s %(jar)s %(cookie)s %(message)s"``.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

_flush_context: ContextVar[dict[str, Any] | None] = ContextVar(
    "_fuel_flush_context", default=None
)


def current_context() -> dict[str, Any]:
    """Return a copy of the pairs bound by the enclosing :class:`LogContext` blocks."""
    ctx = _flush_context.get()
    return dict(ctx) if ctx else {}


class LogContext:
    """Bind key/value pairs to records logged inside the ``with`` block.

    Nested contexts merge with the enclosing one; inner keys win, so a child
    jar flushed from its parent reports its own ``jar``.
    """

    def __init__(self, **kwargs: Any) -> None:
        self._bindings = kwargs
        self._token: Any = None

    def __enter__(self) -> LogContext:
        merged = current_context()
        merged.update(self._bindings)
        self._token = _flush_context.set(merged)
        return self

    def __exit__(self, *_: object) -> None:
        if self._token is not None:
            _flush_context.reset(self._token)
            self._token = None


class FlushContextFilter(logging.Filter):
    """Attach ``jar``, ``cookie`` and ``flush_context`` to every record. Never drops one."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = current_context()
        record.jar = ctx.get("jar")
        record.cookie = ctx.get("cookie")
        record.flush_context = ctx
        return True


def add_flush_context(logger: logging.Logger) -> logging.Logger:
    """Install a :class:`FlushContextFilter` on *logger* once and return it."""
    if not any(isinstance(f, FlushContextFilter) for f in logger.filters):
        logger.addFilter(FlushContextFilter())
    return logger
