"""Nested key-value container with dot-path access and parent delegation.

DataContainer supports:
- Dot-path reads and writes (``c.set("db.host", "x")``, ``c.get("db.host")``).
- Parent delegation: a miss in the local data falls back to the parent
  container while delegation is enabled.
- Read-only mode: every mutator raises :class:`WriteDeniedError`.
- Modification tracking through :attr:`DataContainer.is_modified`.

Parent chains are not checked for cycles; a container must never end up
as its own ancestor.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from fuel.common import arr
from fuel.common.types import MISSING, FuelError, InvalidArgumentError, Key

logger = logging.getLogger(__name__)


class WriteDeniedError(FuelError, RuntimeError):
    """Raised when a read-only container is asked to change."""


class NotFoundError(FuelError, KeyError):
    """Raised by subscript access when the key does not exist."""


class DataContainer:
    """Generic data container with parent chain lookup.

    Reads search the local data first, then the parent chain. Writes always
    target the local data, except :meth:`delete`, which follows the chain
    when the key is not held locally.

    Args:
        data: Initial contents. The mapping is copied.
        read_only: Start out read-only.
    """

    __slots__ = ("_data", "_is_modified", "_parent", "_parent_enabled", "_read_only")

    def __init__(self, data: Mapping[Key, Any] | None = None, read_only: bool = False) -> None:
        self._data: dict[Key, Any] = arr.copy_tree(data) if data else {}
        self._read_only = bool(read_only)
        self._parent: DataContainer | None = None
        self._parent_enabled = False
        self._is_modified = False

    # ── Parent ───────────────────────────────────────────────────────

    @property
    def parent(self) -> DataContainer | None:
        """The parent container, whether or not delegation is enabled."""
        return self._parent

    def set_parent(self, parent: DataContainer | None) -> DataContainer:
        """Set (or clear, with ``None``) the parent; delegation follows suit."""
        self._parent = parent
        if parent is not None:
            self.enable_parent()
        else:
            self.disable_parent()
        return self

    def enable_parent(self) -> DataContainer:
        """Turn delegation on. Does nothing while no parent is set."""
        if self._parent is not None:
            self._parent_enabled = True
        return self

    def disable_parent(self) -> DataContainer:
        self._parent_enabled = False
        return self

    @property
    def has_parent(self) -> bool:
        """Whether lookups currently fall back to the parent."""
        return self._parent_enabled

    # ── State ────────────────────────────────────────────────────────

    @property
    def is_modified(self) -> bool:
        return self._is_modified

    @property
    def is_read_only(self) -> bool:
        return self._read_only

    def set_read_only(self, read_only: bool = True) -> DataContainer:
        self._read_only = bool(read_only)
        return self

    def _guard_write(self, operation: str) -> None:
        if self._read_only:
            logger.debug("write denied: %s on read-only container", operation)
            msg = "Changing values on this Data Container is not allowed."
            raise WriteDeniedError(msg)

    # ── Read ─────────────────────────────────────────────────────────

    def get(self, key: Key | None, default: Any = None) -> Any:
        """Return the value at *key*, searching the parent chain on a miss.

        A callable *default* is only invoked when nothing was found. A
        ``None`` key returns the whole of :meth:`get_contents`.
        """
        if key is None or key == "":
            return self.get_contents()
        result = arr.get_path(self._data, key, MISSING)
        if result is not MISSING:
            return result
        if self._parent_enabled and self._parent is not None:
            return self._parent.get(key, default)
        return arr.resolve(default)

    def has(self, key: Key | None) -> bool:
        if arr.has_path(self._data, key):
            return True
        return self._parent_enabled and self._parent is not None and self._parent.has(key)

    def get_contents(self) -> dict[Key, Any]:
        """Return the data, merged over the parent's contents when delegating.

        Local values win; integer keys of both sides are kept side by side
        (see :func:`fuel.common.arr.merge`). The result is a copy.
        """
        if self._parent_enabled and self._parent is not None:
            return arr.merge(self._parent.get_contents(), self._data)
        return arr.copy_tree(self._data)

    def local_contents(self) -> dict[Key, Any]:
        """Return a copy of the local data only, ignoring the parent."""
        return arr.copy_tree(self._data)

    # ── Write ────────────────────────────────────────────────────────

    def set(self, key: Key | None, value: Any) -> DataContainer:
        """Store *value* at *key*; a ``None`` key appends it positionally.

        A dotted key always writes the nested path. A literal ``"a.b"`` entry
        already in the data is left alone and still wins in :meth:`get`.
        """
        self._guard_write("set")
        arr.set_path(self._data, key, value)
        self._is_modified = True
        return self

    def delete(self, key: Key) -> bool:
        """Remove *key*, reaching into the parent when it is not held locally.

        Deleting an inherited key changes the parent container itself.
        """
        self._guard_write("delete")
        if arr.delete_path(self._data, key):
            self._is_modified = True
            return True
        if self._parent_enabled and self._parent is not None:
            logger.debug("delete %r not found locally, delegating to parent", key)
            return self._parent.delete(key)
        return False

    def set_contents(self, data: Mapping[Key, Any]) -> DataContainer:
        """Replace the local data wholesale."""
        self._guard_write("set_contents")
        if not isinstance(data, Mapping):
            msg = f"set_contents() expects a mapping, got {type(data).__name__}"
            raise InvalidArgumentError(msg)
        self._data = arr.copy_tree(data)
        self._is_modified = True
        return self

    def merge(self, *sources: Mapping[Key, Any] | DataContainer) -> DataContainer:
        """Merge mappings or other containers into the local data.

        Containers contribute their :meth:`get_contents`. Sources are
        validated before anything changes.

        Raises:
            WriteDeniedError: The container is read-only.
            InvalidArgumentError: A source is neither a mapping nor a container.
        """
        self._guard_write("merge")
        mappings: list[Mapping[Key, Any]] = []
        for source in sources:
            if isinstance(source, DataContainer):
                mappings.append(source.get_contents())
            elif isinstance(source, Mapping):
                mappings.append(source)
            else:
                msg = f"Cannot merge a {type(source).__name__} into a Data Container"
                raise InvalidArgumentError(msg)
        self._data = arr.merge(self._data, *mappings)
        self._is_modified = True
        return self

    # ── Subscript access ─────────────────────────────────────────────

    def __contains__(self, key: object) -> bool:
        return self.has(key)  # type: ignore[arg-type]

    def __getitem__(self, key: Key) -> Any:
        def _not_found() -> Any:
            raise NotFoundError(f"Access to undefined index: {key}")

        return self.get(key, _not_found)

    def __setitem__(self, key: Key | None, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: Key) -> None:
        self.delete(key)

    # ── Iteration ────────────────────────────────────────────────────

    def __iter__(self) -> Iterator[Key]:
        return iter(list(self.get_contents()))

    def items(self) -> Iterator[tuple[Key, Any]]:
        """Iterate ``(key, value)`` pairs of a fresh :meth:`get_contents` snapshot."""
        yield from self.get_contents().items()

    def keys(self) -> list[Key]:
        return list(self.get_contents())

    def __len__(self) -> int:
        return len(self.get_contents())

    # ── Representation ───────────────────────────────────────────────

    def __repr__(self) -> str:
        flags = []
        if self._read_only:
            flags.append("read_only")
        if self._parent_enabled:
            flags.append("inherits")
        flag_str = f", {', '.join(flags)}" if flags else ""
        return f"DataContainer(local={len(self._data)}{flag_str})"
