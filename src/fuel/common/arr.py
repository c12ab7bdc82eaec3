"""Array helpers: dot-path access over nested mappings, merging and filtering.

A *path* is a key that may address nested levels with ``.`` separators,
e.g. ``"db.default.host"``. A literal top-level key that contains dots
always wins over path interpretation. Decimal path segments such as ``"0"``
also match the integer key ``0``, so positional entries created by
:func:`set_path` with a ``None`` path stay reachable.

Usage::

    data: dict = {}
    set_path(data, "db.default.host", "localhost")
    get_path(data, "db.default.host")        # "localhost"
    get_path(data, "db.replica.host", "n/a")  # "n/a"
    merge({"a": {"b": 1}}, {"a": {"c": 2}})   # {"a": {"b": 1, "c": 2}}
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Iterable, Iterator, Mapping, MutableMapping, Sequence
from typing import Any

from fuel.common.types import MISSING, InvalidArgumentError, Key

PATH_SEPARATOR = "."

_INT_SEGMENT = re.compile(r"-?(0|[1-9][0-9]*)")
_SCALAR_SEQUENCES = (str, bytes, bytearray)

# ---------------------------------------------------------------------------
# Internal node helpers
# ---------------------------------------------------------------------------


def resolve(value: Any) -> Any:
    """Return *value*, calling it first when it is callable (lazy defaults)."""
    return value() if callable(value) else value


def _is_int_key(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


def _as_int(segment: Key) -> int | None:
    if _is_int_key(segment):
        return segment  # type: ignore[return-value]
    if isinstance(segment, str) and _INT_SEGMENT.fullmatch(segment):
        return int(segment)
    return None


def _is_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, _SCALAR_SEQUENCES)


def _segments(path: Key) -> list[Key]:
    if _is_int_key(path):
        return [path]
    return str(path).split(PATH_SEPARATOR)


def _existing_key(node: Mapping[Any, Any], segment: Key) -> Key:
    """Return the key under which *segment* is stored in *node* (str or int form)."""
    if segment in node:
        return segment
    index = _as_int(segment)
    if index is not None and index in node:
        return index
    return segment


def _child(node: Any, segment: Key) -> Any:
    """Descend one level, or return ``MISSING``."""
    if isinstance(node, Mapping):
        key = _existing_key(node, segment)
        return node[key] if key in node else MISSING
    if isinstance(node, _SCALAR_SEQUENCES):
        return MISSING
    if _is_list(node):
        index = _as_int(segment)
        if index is not None and 0 <= index < len(node):
            return node[index]
        return MISSING
    # Index-access objects such as DataContainer.
    if hasattr(node, "__contains__") and hasattr(node, "__getitem__"):
        if segment in node:
            return node[segment]
    return MISSING


def next_index(data: Mapping[Any, Any]) -> int:
    """Return the integer key an append to *data* would use."""
    ints = [key for key in data if _is_int_key(key)]
    return max(max(ints) + 1, 0) if ints else 0


def copy_tree(value: Any) -> Any:
    """Copy nested mappings and lists; other values are shared, not copied."""
    if isinstance(value, Mapping):
        return {key: copy_tree(item) for key, item in value.items()}
    if isinstance(value, list):
        return [copy_tree(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# Path access
# ---------------------------------------------------------------------------


def get_path(data: Any, path: Key | None = None, default: Any = None) -> Any:
    """Return the value at *path*, or *default* when any segment is missing.

    Args:
        data: Mapping (or index-access object) to read from.
        path: Dot-path or literal key. ``None`` or ``""`` returns *data* itself.
        default: Value for a miss. Callables are invoked and their result
            returned, so expensive defaults are only built when needed.

    Returns:
        The stored value (which may be ``None``) or the resolved default.
    """
    if path is None or path == "":
        return data
    if isinstance(data, Mapping) and path in data:
        return data[path]

    node = data
    for segment in _segments(path):
        node = _child(node, segment)
        if node is MISSING:
            return resolve(default)
    return node


def has_path(data: Any, path: Key | None) -> bool:
    """Whether *path* exists in *data*; keys holding ``None`` count as present."""
    if path is None or path == "":
        return True
    if isinstance(data, Mapping) and path in data:
        return True

    node = data
    for segment in _segments(path):
        node = _child(node, segment)
        if node is MISSING:
            return False
    return True


def set_path(data: MutableMapping[Any, Any], path: Key | None, value: Any) -> None:
    """Store *value* at *path*, creating intermediate mappings as needed.

    A ``None`` path appends *value* under the next integer key. Intermediate
    segments holding anything other than a mapping are replaced by an empty
    mapping, discarding the old value.

    Unlike :func:`get_path`, a dotted *path* is always split: an existing
    literal key such as ``"a.b"`` is never written, and keeps shadowing the
    nested value on later reads.
    """
    if path is None:
        data[next_index(data)] = value
        return

    segments = _segments(path)
    node = data
    for segment in segments[:-1]:
        key = _existing_key(node, segment)
        child = node.get(key)
        if not isinstance(child, MutableMapping):
            child = {}
            node[key] = child
        node = child
    node[_existing_key(node, segments[-1])] = value


def delete_path(data: MutableMapping[Any, Any], path: Key | None) -> bool:
    """Remove the key at *path*. Returns ``False`` when nothing was there."""
    if path is None:
        return False
    if path in data:
        del data[path]
        return True

    segments = _segments(path)
    node: Any = data
    for segment in segments[:-1]:
        node = _child(node, segment)
        if node is MISSING:
            return False
    if not isinstance(node, MutableMapping):
        return False
    key = _existing_key(node, segments[-1])
    if key not in node:
        return False
    del node[key]
    return True


def get_multiple(data: Any, paths: Iterable[Key], default: Any = None) -> dict[Key, Any]:
    """Fetch several paths at once; the result is keyed by path."""
    return {path: get_path(data, path, default) for path in paths}


def set_multiple(data: MutableMapping[Any, Any], values: Mapping[Key, Any]) -> None:
    for path, value in values.items():
        set_path(data, path, value)


def delete_multiple(data: MutableMapping[Any, Any], paths: Iterable[Key]) -> dict[Key, bool]:
    """Delete several paths; the result maps each path to its delete outcome."""
    return {path: delete_path(data, path) for path in paths}


def subset(data: Any, paths: Iterable[Key], default: Any = None) -> dict[Key, Any]:
    """Build a new nested mapping holding only *paths* (missing ones get *default*)."""
    result: dict[Key, Any] = {}
    for path in paths:
        set_path(result, path, get_path(data, path, default))
    return result


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------


def _ensure_mappings(name: str, mappings: tuple[Any, ...]) -> None:
    if not mappings:
        raise InvalidArgumentError(f"{name}() needs at least one mapping")
    for position, value in enumerate(mappings):
        if not isinstance(value, Mapping):
            msg = f"{name}() argument {position} is {type(value).__name__}, expected a mapping"
            raise InvalidArgumentError(msg)


def _merge_into(target: dict[Any, Any], overlay: Mapping[Any, Any]) -> None:
    for key, value in overlay.items():
        current = target.get(key, MISSING)
        if _is_int_key(key):
            target[next_index(target) if current is not MISSING else key] = copy_tree(value)
        elif isinstance(value, Mapping) and isinstance(current, dict):
            _merge_into(current, value)
        elif isinstance(value, list) and isinstance(current, list):
            # Lists are integer-keyed too: incoming items are appended.
            current.extend(copy_tree(value))
        else:
            target[key] = copy_tree(value)


def merge(*mappings: Mapping[Any, Any]) -> dict[Any, Any]:
    """Recursively merge mappings left to right into a new dict.

    Integer keys are appended rather than overwritten: when the key is
    already taken, the value goes under the next free integer key. For
    string keys, two mappings merge recursively and anything else is
    replaced by the right-hand value. Inputs are left untouched.

    Raises:
        InvalidArgumentError: No arguments, or an argument is not a mapping.
    """
    _ensure_mappings("merge", mappings)
    result: dict[Any, Any] = copy_tree(mappings[0])
    for overlay in mappings[1:]:
        _merge_into(result, overlay)
    return result


def _merge_assoc_value(current: Any, value: Any) -> Any:
    if isinstance(value, Mapping) and isinstance(current, Mapping):
        return merge_assoc(current, value)
    if isinstance(value, list) and isinstance(current, list):
        merged = copy_tree(current)
        for index, item in enumerate(value):
            if index < len(merged):
                merged[index] = _merge_assoc_value(merged[index], item)
            else:
                merged.append(copy_tree(item))
        return merged
    return copy_tree(value)


def merge_assoc(*mappings: Mapping[Any, Any]) -> dict[Any, Any]:
    """Like :func:`merge`, but integer keys overwrite by key instead of appending."""
    _ensure_mappings("merge_assoc", mappings)
    result: dict[Any, Any] = copy_tree(mappings[0])
    for overlay in mappings[1:]:
        for key, value in overlay.items():
            result[key] = _merge_assoc_value(result.get(key, MISSING), value)
    return result


# ---------------------------------------------------------------------------
# Shape inspection and conversion
# ---------------------------------------------------------------------------


def _items(data: Any) -> Iterator[tuple[Any, Any]]:
    if isinstance(data, Mapping):
        return iter(data.items())
    return enumerate(data)


def is_assoc(data: Any) -> bool:
    """True unless the keys are exactly ``0..n-1`` in order."""
    if not isinstance(data, Mapping):
        return False
    return any(key != position for position, key in enumerate(data))


def is_multi(data: Any, all_keys: bool = False) -> bool:
    nested = [value for _, value in _items(data) if isinstance(value, Mapping) or _is_list(value)]
    if all_keys:
        return len(nested) == len(data)
    return bool(nested)


def to_assoc(flat: Sequence[Any]) -> dict[Any, Any]:
    """Turn ``[k1, v1, k2, v2]`` into ``{k1: v1, k2: v2}``."""
    if len(flat) % 2:
        raise InvalidArgumentError("to_assoc() requires an even number of values")
    return {flat[i]: flat[i + 1] for i in range(0, len(flat), 2)}


def assoc_to_keyval(rows: Any, key_field: Key, val_field: Key) -> dict[Any, Any]:
    """Build ``{row[key_field]: row[val_field]}``, skipping rows where either is unset."""
    result: dict[Any, Any] = {}
    for _, row in _items(rows):
        key = get_path(row, key_field)
        value = get_path(row, val_field)
        if key is not None and value is not None:
            result[key] = value
    return result


def _pluck_one(row: Any, path: Key) -> Any:
    if isinstance(row, Mapping) or _is_list(row) or hasattr(row, "__contains__"):
        return get_path(row, path)
    return operator.attrgetter(str(path))(row)


def pluck(rows: Any, path: Key, index: Key | bool | None = None) -> Any:
    """Collect *path* from every row.

    Args:
        rows: Mapping or sequence of rows (mappings or plain objects).
        path: Dot-path for mapping rows, attribute name for objects.
        index: ``None`` returns a list; a field name returns a dict keyed by
            that field; ``True`` keeps the original row keys.
    """
    if index is None:
        return [_pluck_one(row, path) for _, row in _items(rows)]

    result: dict[Any, Any] = {}
    for key, row in _items(rows):
        if index is not True:
            key = _pluck_one(row, index)  # type: ignore[arg-type]
        result[key] = _pluck_one(row, path)
    return result


def flatten(
    data: Mapping[Any, Any] | Sequence[Any], glue: str = ":", indexed: bool = True
) -> dict[str, Any]:
    """Flatten nested structures into ``{"a:b:c": value}``.

    With ``indexed=False`` only associative levels are flattened; plain
    lists are kept as values.
    """
    result: dict[str, Any] = {}

    def _walk(node: Any, prefix: list[str]) -> None:
        for key, value in _items(node):
            path = [*prefix, str(key)]
            nested = isinstance(value, Mapping) or _is_list(value)
            if nested and (indexed or is_assoc(value)):
                _walk(value, path)
            else:
                result[glue.join(path)] = value

    _walk(data, [])
    return result


def flatten_assoc(data: Mapping[Any, Any], glue: str = ":") -> dict[str, Any]:
    return flatten(data, glue, indexed=False)


def reverse_flatten(flat: Mapping[str, Any], glue: str = ":") -> dict[Any, Any]:
    """Inverse of :func:`flatten`; numeric key parts become integers."""
    result: dict[Any, Any] = {}
    for flat_key, value in flat.items():
        parts: list[Any] = []
        for part in str(flat_key).split(glue):
            index = _as_int(part)
            parts.append(part if index is None else index)
        node = result
        for part in parts[:-1]:
            if not isinstance(node.get(part), dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
    return result


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


def filter_prefixed(
    data: Mapping[Any, Any], prefix: str, remove_prefix: bool = True
) -> dict[Any, Any]:
    result: dict[Any, Any] = {}
    for key, value in data.items():
        if isinstance(key, str) and key.startswith(prefix):
            result[key[len(prefix) :] if remove_prefix else key] = value
    return result


def remove_prefixed(data: Mapping[Any, Any], prefix: str) -> dict[Any, Any]:
    return {k: v for k, v in data.items() if not (isinstance(k, str) and k.startswith(prefix))}


def filter_suffixed(
    data: Mapping[Any, Any], suffix: str, remove_suffix: bool = True
) -> dict[Any, Any]:
    result: dict[Any, Any] = {}
    for key, value in data.items():
        if isinstance(key, str) and key.endswith(suffix):
            result[key[: len(key) - len(suffix)] if remove_suffix else key] = value
    return result


def remove_suffixed(data: Mapping[Any, Any], suffix: str) -> dict[Any, Any]:
    return {k: v for k, v in data.items() if not (isinstance(k, str) and k.endswith(suffix))}


def filter_keys(
    data: Mapping[Any, Any], keys: Iterable[Key], remove: bool = False
) -> dict[Any, Any]:
    """Keep only *keys* (or, with ``remove=True``, everything but *keys*)."""
    wanted = list(keys)
    if remove:
        return {k: v for k, v in data.items() if k not in wanted}
    return {k: data[k] for k in wanted if k in data}


def filter_recursive(data: Any, callback: Callable[[Any, Any], bool] | None = None) -> Any:
    """Filter every level of *data*.

    *callback* receives ``(value, key)``; without one, falsy values are
    dropped. Nested levels are filtered before their parent decides on them.
    """
    keep = callback if callback is not None else (lambda value, _key: bool(value))

    def _filtered(value: Any) -> Any:
        if isinstance(value, Mapping) or _is_list(value):
            return filter_recursive(value, callback)
        return value

    if isinstance(data, Mapping):
        result = {}
        for key, value in data.items():
            value = _filtered(value)
            if keep(value, key):
                result[key] = value
        return result
    return [value for key, value in enumerate(map(_filtered, data)) if keep(value, key)]


# ---------------------------------------------------------------------------
# Ordered inserts
# ---------------------------------------------------------------------------


def _check_position(size: int, pos: int) -> None:
    if size < abs(pos):
        raise InvalidArgumentError("Position is larger than the number of elements to insert into")


def insert(items: list[Any], values: Any, pos: int) -> None:
    """Insert *values* (a list, or a single value) into *items* at *pos*, in place."""
    _check_position(len(items), pos)
    items[pos:pos] = list(values) if isinstance(values, (list, tuple)) else [values]


def insert_assoc(mapping: dict[Any, Any], values: Mapping[Any, Any], pos: int) -> None:
    """Insert the entries of *values* into *mapping* at position *pos*, in place.

    Keys already present before *pos* keep their current value.
    """
    _check_position(len(mapping), pos)
    entries = list(mapping.items())
    result = dict(entries[:pos])
    for key, value in [*values.items(), *entries[pos:]]:
        result.setdefault(key, value)
    mapping.clear()
    mapping.update(result)


def _position_of_key(original: list[Any] | dict[Any, Any], key: Key) -> int:
    keys = range(len(original)) if isinstance(original, list) else list(original)
    try:
        return list(keys).index(key)
    except ValueError:
        raise InvalidArgumentError(f"Unknown key {key!r}") from None


def _key_of_value(original: list[Any] | dict[Any, Any], search: Any) -> Key:
    for key, value in _items(original):
        if value == search:
            return key
    raise InvalidArgumentError(f"Unknown value {search!r}")


def _insert_at(original: list[Any] | dict[Any, Any], values: Any, pos: int) -> None:
    if isinstance(original, list):
        insert(original, values, pos)
    else:
        insert_assoc(original, values, pos)


def insert_before_key(original: list[Any] | dict[Any, Any], values: Any, key: Key) -> None:
    _insert_at(original, values, _position_of_key(original, key))


def insert_after_key(original: list[Any] | dict[Any, Any], values: Any, key: Key) -> None:
    _insert_at(original, values, _position_of_key(original, key) + 1)


def insert_before_value(original: list[Any] | dict[Any, Any], values: Any, search: Any) -> None:
    insert_before_key(original, values, _key_of_value(original, search))


def insert_after_value(original: list[Any] | dict[Any, Any], values: Any, search: Any) -> None:
    insert_after_key(original, values, _key_of_value(original, search))


# ---------------------------------------------------------------------------
# Misc
# ---------------------------------------------------------------------------


def sort(rows: Any, path: Key, order: str = "asc") -> list[Any]:
    """Return the rows ordered by the value at *path* (``"asc"`` or ``"desc"``)."""
    direction = order.lower()
    if direction not in ("asc", "desc"):
        raise InvalidArgumentError(f'Invalid value [{order}]. Valid values are "asc" or "desc".')
    values = [row for _, row in _items(rows)]
    return sorted(values, key=lambda row: get_path(row, path), reverse=direction == "desc")


def replace_keys(data: Mapping[Any, Any], replace: Mapping[Any, Any]) -> dict[Any, Any]:
    """Rename keys per *replace* (``{old: new}``), keeping order."""
    return {replace.get(key, key): value for key, value in data.items()}


def prepend(mapping: dict[Any, Any], key: Key, value: Any = None) -> None:
    """Put *key* first in *mapping*, in place."""
    rest = {k: v for k, v in mapping.items() if k != key}
    mapping.clear()
    mapping[key] = value
    mapping.update(rest)


def _same(a: Any, b: Any, strict: bool) -> bool:
    if strict:
        return type(a) is type(b) and a == b
    return a == b


def in_recursive(needle: Any, data: Any, strict: bool = False) -> bool:
    """Whether *needle* occurs at any depth of *data*."""
    for _, value in _items(data):
        if _same(needle, value, strict):
            return True
        if (isinstance(value, Mapping) or _is_list(value)) and in_recursive(needle, value, strict):
            return True
    return False


def search(
    data: Any,
    value: Any,
    default: Any = None,
    recursive: bool = True,
    delimiter: str = PATH_SEPARATOR,
    strict: bool = False,
) -> Any:
    """Return the key (or dot-path when found deeper) holding *value*."""
    for key, item in _items(data):
        if _same(value, item, strict):
            return key
    if recursive:
        for key, item in _items(data):
            if isinstance(item, Mapping) or _is_list(item):
                found = search(item, value, MISSING, True, delimiter, strict)
                if found is not MISSING:
                    return f"{key}{delimiter}{found}"
    return default


def unique(data: Any) -> Any:
    """Drop repeated values, keeping the first occurrence (and its key)."""
    seen: list[Any] = []
    if isinstance(data, Mapping):
        result: dict[Any, Any] = {}
        for key, value in data.items():
            if not any(_same(value, s, True) for s in seen):
                seen.append(value)
                result[key] = value
        return result
    for value in data:
        if not any(_same(value, s, True) for s in seen):
            seen.append(value)
    return seen


def sum_by(rows: Any, path: Key) -> Any:
    return sum(pluck(rows, path))


def average(values: Any) -> float:
    items = [value for _, value in _items(values)]
    if not items:
        return 0.0
    return sum(items) / len(items)


def _neighbour_key(data: Mapping[Any, Any], key: Key, step: int) -> Any:
    keys = list(data)
    if key not in keys:
        raise InvalidArgumentError(f"Unknown key {key!r}")
    index = keys.index(key) + step
    if index < 0 or index >= len(keys):
        return MISSING
    return keys[index]


def previous_by_key(data: Mapping[Any, Any], key: Key, get_value: bool = False) -> Any:
    """Key (or value) of the entry before *key*; ``None`` when *key* is first."""
    found = _neighbour_key(data, key, -1)
    if found is MISSING:
        return None
    return data[found] if get_value else found


def next_by_key(data: Mapping[Any, Any], key: Key, get_value: bool = False) -> Any:
    """Key (or value) of the entry after *key*; ``None`` when *key* is last."""
    found = _neighbour_key(data, key, 1)
    if found is MISSING:
        return None
    return data[found] if get_value else found


def previous_by_value(data: Mapping[Any, Any], value: Any, get_value: bool = True) -> Any:
    return previous_by_key(data, _key_of_value(dict(data), value), get_value)


def next_by_value(data: Mapping[Any, Any], value: Any, get_value: bool = True) -> Any:
    return next_by_key(data, _key_of_value(dict(data), value), get_value)
