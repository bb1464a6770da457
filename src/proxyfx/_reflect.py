"""Structural accessors, one set per target shape.

The handlers never touch a target directly. They go through these so the
same trap logic serves dicts, lists and attribute objects, whether the
target is a raw value or, for readonly-over-reactive, another proxy.

Every accessor returns MISSING for an absent key instead of raising, so the
handler can track the read before the proxy surface raises.
"""

from __future__ import annotations

import sys
from collections.abc import MutableMapping, MutableSequence
from functools import partial
from inspect import getattr_static
from types import FunctionType, MethodType
from weakref import WeakKeyDictionary, WeakValueDictionary

from proxyfx._shared import MISSING
from proxyfx.operations import LENGTH_KEY

ARRAY = "array"
RECORD = "record"
OBJECT = "object"


def shape_of(target: object) -> str:
    if isinstance(target, MutableSequence):
        return ARRAY
    if isinstance(target, MutableMapping):
        return RECORD
    return OBJECT


def is_map_collection(target: object) -> bool:
    return isinstance(target, (WeakKeyDictionary, WeakValueDictionary))


def is_builtin_key(key: object, shape: str) -> bool:
    """Protocol names that never take part in dependency tracking.

    Dunder attributes on objects and method names on arrays. Record keys
    are always data.
    """
    if shape is OBJECT:
        return isinstance(key, str) and key.startswith("__") and key.endswith("__")
    if shape is ARRAY:
        return isinstance(key, str) and key in ARRAY_METHODS
    return False


class RecordOps:
    @staticmethod
    def get(target, key, receiver):
        return target.get(key, MISSING)

    @staticmethod
    def set(target, key, value, receiver) -> bool:
        target[key] = value
        return True

    @staticmethod
    def has(target, key) -> bool:
        return key in target

    has_own = has

    @staticmethod
    def delete(target, key) -> bool:
        if key not in target:
            return False
        del target[key]
        return True

    @staticmethod
    def own_keys(target) -> list:
        return list(target)


class ArrayOps:
    @staticmethod
    def get(target, key, receiver):
        if type(key) is int:
            return target[key] if 0 <= key < len(target) else MISSING
        if key == LENGTH_KEY:
            return len(target)
        method = ARRAY_METHODS.get(key)
        if method is not None:
            return partial(method, receiver)
        return MISSING

    @staticmethod
    def set(target, key, value, receiver) -> bool:
        if type(key) is int:
            if key == len(target):
                target.append(value)
            else:
                target[key] = value
            return True
        if key == LENGTH_KEY:
            if value < len(target):
                del target[value:]
            else:
                target.extend([None] * (value - len(target)))
            return True
        raise TypeError(f"list indices must be integers, not {type(key).__name__}")

    @staticmethod
    def has(target, key) -> bool:
        if type(key) is int:
            return 0 <= key < len(target)
        return key == LENGTH_KEY or key in ARRAY_METHODS

    @staticmethod
    def has_own(target, key) -> bool:
        if type(key) is int:
            return 0 <= key < len(target)
        return key == LENGTH_KEY

    @staticmethod
    def delete(target, key) -> bool:
        if type(key) is int and 0 <= key < len(target):
            del target[key]
            return True
        return False

    @staticmethod
    def own_keys(target) -> list:
        return list(range(len(target)))


class ObjectOps:
    """Attribute access. Methods and properties bind to the receiver, so
    their own reads and writes go back through the proxy."""

    @staticmethod
    def get(target, key, receiver):
        cls_attr = getattr_static(target.__class__, key, MISSING)
        if isinstance(cls_attr, property) and cls_attr.fget is not None:
            return cls_attr.fget(receiver)
        if isinstance(cls_attr, FunctionType) and key not in vars(target):
            return MethodType(cls_attr, receiver)
        return getattr(target, key, MISSING)

    @staticmethod
    def set(target, key, value, receiver) -> bool:
        cls_attr = getattr_static(target.__class__, key, MISSING)
        if isinstance(cls_attr, property):
            if cls_attr.fset is None:
                raise AttributeError(f"property {key!r} of {target.__class__.__name__!r} has no setter")
            cls_attr.fset(receiver, value)
            return True
        setattr(target, key, value)
        return True

    @staticmethod
    def has(target, key) -> bool:
        return hasattr(target, key)

    @staticmethod
    def has_own(target, key) -> bool:
        return key in vars(target)

    @staticmethod
    def delete(target, key) -> bool:
        if key not in vars(target):
            return False
        delattr(target, key)
        return True

    @staticmethod
    def own_keys(target) -> list:
        return list(vars(target))


_OPS = {RECORD: RecordOps, ARRAY: ArrayOps, OBJECT: ObjectOps}


def ops_for(shape: str):
    return _OPS[shape]


# ─── Array methods ──────────────────────────────────────────────────────────
# The plain list algorithms, written against a receiving ArrayProxy so every
# element read and write goes through its traps.


def _items(receiver):
    return [receiver[i] for i in range(len(receiver))]


def _clamp(index: int, length: int) -> int:
    if index < 0:
        return max(length + index, 0)
    return min(index, length)


def array_contains(receiver, value) -> bool:
    return any(item is value or item == value for item in _items(receiver))


def array_index(receiver, value, start: int = 0, stop: int = sys.maxsize) -> int:
    items = _items(receiver)
    for i in range(*slice(start, stop).indices(len(items))):
        if items[i] is value or items[i] == value:
            return i
    raise ValueError(f"{value!r} is not in list")


def array_count(receiver, value) -> int:
    return sum(1 for item in _items(receiver) if item is value or item == value)


def array_splice(receiver, start: int, delete_count: int | None = None, *items) -> list:
    """Remove delete_count elements at start and insert items there.

    Indices whose value moves are rewritten one by one, then the length is
    cut if the array shrank. Returns the removed elements.
    """
    current = _items(receiver)
    length = len(current)
    start = _clamp(start, length)
    if delete_count is None:
        delete_count = length - start
    delete_count = max(0, min(delete_count, length - start))

    removed = current[start:start + delete_count]
    updated = current[:start] + list(items) + current[start + delete_count:]
    for i, value in enumerate(updated):
        receiver._set_key(i, value)
    if len(updated) < length:
        receiver._set_key(LENGTH_KEY, len(updated))
    return removed


def array_append(receiver, value) -> None:
    array_splice(receiver, len(receiver), 0, value)


def array_extend(receiver, values) -> None:
    array_splice(receiver, len(receiver), 0, *list(values))


def array_insert(receiver, index: int, value) -> None:
    array_splice(receiver, index, 0, value)


def array_pop(receiver, index: int = -1):
    length = len(receiver)
    if length == 0:
        raise IndexError("pop from empty list")
    if index < 0:
        index += length
    if not 0 <= index < length:
        raise IndexError("pop index out of range")
    return array_splice(receiver, index, 1)[0]


def array_remove(receiver, value) -> None:
    array_splice(receiver, receiver.index(value), 1)


def array_clear(receiver) -> None:
    array_splice(receiver, 0)


def array_reverse(receiver) -> None:
    for i, value in enumerate(reversed(_items(receiver))):
        receiver._set_key(i, value)


def array_sort(receiver, *, key=None, reverse: bool = False) -> None:
    for i, value in enumerate(sorted(_items(receiver), key=key, reverse=reverse)):
        receiver._set_key(i, value)


ARRAY_METHODS = {
    "__contains__": array_contains,
    "index": array_index,
    "count": array_count,
    "splice": array_splice,
    "append": array_append,
    "extend": array_extend,
    "insert": array_insert,
    "pop": array_pop,
    "remove": array_remove,
    "clear": array_clear,
    "reverse": array_reverse,
    "sort": array_sort,
}
