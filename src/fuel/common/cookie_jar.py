"""Cookie jar: a collection of named cookies with parent delegation.

Lookups follow the same parent chain as :class:`~fuel.common.container.DataContainer`.
A jar registers itself as a child of its parent, so flushing the parent
also flushes every jar beneath it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from fuel.common import arr
from fuel.common.config import CookieConfig, make_cookie_config
from fuel.common.container import DataContainer, NotFoundError
from fuel.common.cookie import Cookie
from fuel.common.log import LogContext, add_flush_context
from fuel.common.transport import CookieTransport, HeaderTransport, parse_cookie_header
from fuel.common.types import InvalidArgumentError

logger = add_flush_context(logging.getLogger(__name__))


class CookieJar:
    """Named cookies with parent fallback and cascading flush.

    Args:
        config: Settings applied to cookies the jar creates.
        data: Cookies that came in with the request, as ``{name: value}``.
            They are loaded as received and are not re-sent unless changed.
        transport: Shared by every cookie the jar creates. Defaults to a
            :class:`~fuel.common.transport.HeaderTransport`.
    """

    __slots__ = ("_children", "_config", "_entries", "_parent", "_parent_enabled", "_transport")

    def __init__(
        self,
        config: CookieConfig | dict[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        transport: CookieTransport | None = None,
    ) -> None:
        self._config = config if isinstance(config, CookieConfig) else make_cookie_config(config)
        self._transport: CookieTransport = transport if transport is not None else HeaderTransport()
        self._entries: dict[str, Cookie] = {}
        self._parent: CookieJar | None = None
        self._parent_enabled = False
        self._children: list[CookieJar] = []

        for name, value in (data or {}).items():
            self._entries[name] = Cookie(
                name, self._config, value, transport=self._transport, received=True
            )

    @classmethod
    def from_header(
        cls,
        header: str,
        config: CookieConfig | dict[str, Any] | None = None,
        transport: CookieTransport | None = None,
    ) -> CookieJar:
        """Build a jar from a raw ``Cookie:`` request header."""
        return cls(config, parse_cookie_header(header), transport)

    @property
    def config(self) -> CookieConfig:
        return self._config

    @property
    def transport(self) -> CookieTransport:
        return self._transport

    # ── Parent / children ────────────────────────────────────────────

    @property
    def parent(self) -> CookieJar | None:
        return self._parent

    @property
    def children(self) -> list[CookieJar]:
        return list(self._children)

    def set_parent(self, parent: CookieJar | None) -> CookieJar:
        """Set (or clear) the parent jar and register with it as a child.

        A jar moving to a new parent is unregistered from the old one.
        """
        if self._parent is not None and self._parent is not parent:
            self._parent._remove_child(self)
        self._parent = parent
        if parent is not None:
            self.enable_parent()
            parent._add_child(self)
        else:
            self.disable_parent()
        return self

    def enable_parent(self) -> CookieJar:
        """Turn delegation on. Does nothing while no parent is set."""
        if self._parent is not None:
            self._parent_enabled = True
        return self

    def disable_parent(self) -> CookieJar:
        self._parent_enabled = False
        return self

    @property
    def has_parent(self) -> bool:
        return self._parent_enabled

    def _add_child(self, child: CookieJar) -> None:
        if not any(existing is child for existing in self._children):
            self._children.append(child)

    def _remove_child(self, child: CookieJar) -> None:
        self._children = [existing for existing in self._children if existing is not child]

    def _delegate(self) -> CookieJar | None:
        return self._parent if self._parent_enabled else None

    def _own(self, name: str) -> Cookie | None:
        """The local, not deleted cookie called *name*."""
        cookie = self._entries.get(name)
        if cookie is None or cookie.is_deleted:
            return None
        return cookie

    # ── Read ─────────────────────────────────────────────────────────

    def has(self, name: str) -> bool:
        """Whether a live (not deleted) cookie called *name* is reachable."""
        if self._own(name) is not None:
            return True
        parent = self._delegate()
        return parent is not None and parent.has(name)

    def get(self, name: str, default: Any = None) -> Any:
        """Return the value of cookie *name*, or the (lazily resolved) default."""
        cookie = self._own(name)
        if cookie is not None:
            return cookie.value
        parent = self._delegate()
        if parent is not None and parent.has(name):
            return parent.get(name, default)
        return arr.resolve(default)

    # ── Write ────────────────────────────────────────────────────────

    def set(self, name: str, value: Any) -> CookieJar:
        """Set cookie *name* to *value*.

        A live local cookie is updated in place; one only reachable through
        the parent is updated there; otherwise a new cookie is created. A
        :class:`Cookie` value replaces the entry instead.

        Raises:
            StateError: The cookie being updated was already sent.
        """
        own = self._own(name)
        parent = self._delegate()
        if own is not None:
            if isinstance(value, Cookie):
                self._entries[name] = value
            else:
                own.set_value(value)
        elif parent is not None and parent.has(name):
            parent.set(name, value)
        elif isinstance(value, Cookie):
            self._entries[name] = value
        else:
            self._entries[name] = Cookie(name, self._config, value, transport=self._transport)
        return self

    def update(self, values: Mapping[str, Any]) -> CookieJar:
        """Call :meth:`set` for every ``name: value`` pair."""
        for name, value in values.items():
            self.set(name, value)
        return self

    def delete(self, name: str) -> bool:
        """Mark cookie *name* deleted, locally or through the parent chain."""
        own = self._own(name)
        if own is not None:
            return own.delete()
        parent = self._delegate()
        if parent is not None and parent.has(name):
            logger.debug("delete cookie %r not held locally, delegating to parent", name)
            return parent.delete(name)
        return False

    def merge(self, *sources: Mapping[str, Any] | DataContainer | CookieJar) -> CookieJar:
        """Merge values from mappings, containers or other jars into this jar.

        Another jar contributes the values of its live cookies, so no
        :class:`Cookie` object ends up shared between two jars.

        Raises:
            InvalidArgumentError: A source is of an unsupported type.
        """
        mappings: list[Mapping[str, Any]] = []
        for source in sources:
            if isinstance(source, CookieJar):
                mappings.append(
                    {name: cookie.value for name, cookie in source.items() if not cookie.is_deleted}
                )
            elif isinstance(source, DataContainer):
                mappings.append(source.get_contents())
            elif isinstance(source, Mapping):
                mappings.append(source)
            else:
                msg = f"Cannot merge a {type(source).__name__} into a cookie jar"
                raise InvalidArgumentError(msg)
        if mappings:
            self.update(arr.merge(*mappings))
        return self

    # ── Flush ────────────────────────────────────────────────────────

    def flush(self) -> bool:
        """Send every pending cookie of this jar, then of each child jar.

        Every cookie is attempted even after a failure.

        Returns:
            ``True`` only if every send succeeded.
        """
        result = True
        with LogContext(jar=hex(id(self))):
            for name, cookie in self._entries.items():
                with LogContext(cookie=name):
                    if not cookie.send():
                        result = False
            for child in self._children:
                if not child.flush():
                    result = False
            logger.debug(
                "flushed %d cookies and %d child jars ok=%s",
                len(self._entries),
                len(self._children),
                result,
            )
        return result

    # ── Subscript access ─────────────────────────────────────────────

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __getitem__(self, name: str) -> Cookie:
        own = self._own(name)
        if own is not None:
            return own
        parent = self._delegate()
        if parent is not None and parent.has(name):
            return parent[name]
        raise NotFoundError(f"Access to undefined cookie: {name}")

    def __setitem__(self, name: str, value: Any) -> None:
        if isinstance(value, Cookie):
            self._entries[name] = value
        else:
            self.set(name, value)

    def __delitem__(self, name: str) -> None:
        if name in self._entries:
            self._entries[name].delete()
            return
        parent = self._delegate()
        if parent is not None:
            parent.delete(name)

    # ── Iteration ────────────────────────────────────────────────────

    def _merged_entries(self) -> dict[str, Cookie]:
        parent = self._delegate()
        if parent is not None:
            return {**parent._merged_entries(), **self._entries}
        return dict(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._merged_entries()))

    def items(self) -> Iterator[tuple[str, Cookie]]:
        """Iterate ``(name, Cookie)`` pairs, parent entries first, own entries winning."""
        yield from self._merged_entries().items()

    def __len__(self) -> int:
        return len(self._merged_entries())

    def __repr__(self) -> str:
        inherited = f", inherits={len(self) - len(self._entries)}" if self._parent_enabled else ""
        return f"CookieJar(local={len(self._entries)}{inherited}, children={len(self._children)})"
