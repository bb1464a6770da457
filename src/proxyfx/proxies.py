"""Proxy classes: the wrapped instances handed out by the factory.

A proxy holds only its target and its handler. It implements the Python
protocol of the value it stands for (mapping, sequence, attributes, set)
and forwards every operation to the handler, which does the tracking and
notifying. Internal state is always read with object.__getattribute__ so
it can never collide with, or be shadowed by, the target's own keys.
"""

from __future__ import annotations

import operator
import sys
from collections.abc import Mapping, MutableMapping, MutableSequence, MutableSet

from proxyfx import factory
from proxyfx._reflect import ARRAY, RECORD, is_map_collection, shape_of
from proxyfx._shared import MISSING
from proxyfx.operations import LENGTH_KEY

_getattribute = object.__getattribute__


def _target(proxy):
    return _getattribute(proxy, "_proxy_target")


def _handler(proxy):
    return _getattribute(proxy, "_proxy_handler")


def _rejected(key) -> TypeError:
    return TypeError(f"cannot assign {key!r}: a readonly ref cannot be replaced by a plain value")


class ReactiveProxy:
    """Base of every proxy. Answers the reserved flag keys as attributes."""

    __slots__ = ("_proxy_target", "_proxy_handler", "__weakref__")

    def __init__(self, target, handler) -> None:
        object.__setattr__(self, "_proxy_target", target)
        object.__setattr__(self, "_proxy_handler", handler)

    def __getattr__(self, name: str):
        if name in factory.FLAG_KEYS:
            flag = _handler(self).read_flag(_target(self), name, self)
            if flag is not MISSING:
                return flag
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({_target(self)!r})"


class RecordProxy(ReactiveProxy, MutableMapping):
    """Proxy for a dict."""

    __slots__ = ()

    def __getitem__(self, key):
        res = _handler(self).read(_target(self), key, self)
        if res is MISSING:
            raise KeyError(key)
        return res

    def __setitem__(self, key, value) -> None:
        if not _handler(self).write(_target(self), key, value, self):
            raise _rejected(key)

    def __delitem__(self, key) -> None:
        if not _handler(self).delete(_target(self), key):
            raise KeyError(key)

    def __contains__(self, key) -> bool:
        return _handler(self).has(_target(self), key)

    def __iter__(self):
        return iter(_handler(self).enumerate(_target(self)))

    def __len__(self) -> int:
        return len(_handler(self).enumerate(_target(self)))

    def popitem(self):
        keys = list(self)
        if not keys:
            raise KeyError("popitem(): dictionary is empty")
        key = keys[-1]
        value = self[key]
        del self[key]
        return key, value

    def setdefault(self, key, default=None):
        if key not in self:
            self[key] = default
        return self[key]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        mine = {key: factory.to_raw(value) for key, value in self.items()}
        return mine == {key: factory.to_raw(value) for key, value in other.items()}

    __hash__ = None


class ArrayProxy(ReactiveProxy, MutableSequence):
    """Proxy for a list.

    Methods are resolved through the handler, so a mutable proxy gets the
    instrumented lookups and untracked mutators, and a readonly one gets
    the plain algorithms whose writes it then rejects.
    """

    __slots__ = ()

    def _method(self, name: str):
        return _handler(self).read(_target(self), name, self)

    def _set_key(self, key, value) -> None:
        if not _handler(self).write(_target(self), key, value, self):
            raise _rejected(key)

    def __len__(self) -> int:
        return _handler(self).read(_target(self), LENGTH_KEY, self)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]
        index = int(operator.index(index))
        if index < 0:
            index += len(self)
        res = _handler(self).read(_target(self), index, self)
        if res is MISSING:
            raise IndexError("list index out of range")
        return res

    def __setitem__(self, index, value) -> None:
        length = len(_target(self))
        if isinstance(index, slice):
            start, stop, step = index.indices(length)
            if step == 1:
                self._method("splice")(start, max(stop - start, 0), *list(value))
                return
            indices = range(start, stop, step)
            values = list(value)
            if len(values) != len(indices):
                raise ValueError(
                    f"attempt to assign sequence of size {len(values)} "
                    f"to extended slice of size {len(indices)}"
                )
            for i, item in zip(indices, values):
                self._set_key(i, item)
            return
        index = int(operator.index(index))
        if index < 0:
            index += length
        if not 0 <= index < length:
            raise IndexError("list assignment index out of range")
        self._set_key(index, value)

    def __delitem__(self, index) -> None:
        length = len(_target(self))
        splice = self._method("splice")
        if isinstance(index, slice):
            start, stop, step = index.indices(length)
            if step == 1:
                splice(start, max(stop - start, 0))
                return
            for i in sorted(range(start, stop, step), reverse=True):
                splice(i, 1)
            return
        index = int(operator.index(index))
        if index < 0:
            index += length
        if not 0 <= index < length:
            raise IndexError("list assignment index out of range")
        splice(index, 1)

    def __iter__(self):
        handler, target = _handler(self), _target(self)
        return iter([handler.read(target, i, self) for i in handler.enumerate(target)])

    def __reversed__(self):
        return reversed(list(self))

    def __contains__(self, value) -> bool:
        return self._method("__contains__")(value)

    def index(self, value, start: int = 0, stop: int = sys.maxsize) -> int:
        return self._method("index")(value, start, stop)

    def count(self, value) -> int:
        return self._method("count")(value)

    def splice(self, start: int, delete_count: int | None = None, *items) -> list:
        """Remove delete_count elements at start, insert items, return the removed ones."""
        return self._method("splice")(start, delete_count, *items)

    def append(self, value) -> None:
        self._method("append")(value)

    def extend(self, values) -> None:
        self._method("extend")(values)

    def insert(self, index: int, value) -> None:
        self._method("insert")(index, value)

    def pop(self, index: int = -1):
        return self._method("pop")(index)

    def remove(self, value) -> None:
        self._method("remove")(value)

    def clear(self) -> None:
        self._method("clear")()

    def reverse(self) -> None:
        self._method("reverse")()

    def sort(self, *, key=None, reverse: bool = False) -> None:
        self._method("sort")(key=key, reverse=reverse)

    def __eq__(self, other) -> bool:
        if not isinstance(other, (list, ArrayProxy)):
            return NotImplemented
        return [factory.to_raw(v) for v in self] == [factory.to_raw(v) for v in other]

    __hash__ = None


class ObjectProxy(ReactiveProxy):
    """Proxy for a plain attribute object (user class instance, SimpleNamespace).

    Every attribute read goes through the handler, including method and
    property lookups, which are bound to the proxy.
    """

    __slots__ = ()

    def __getattribute__(self, name: str):
        target = _target(self)
        res = _handler(self).read(target, name, self)
        if res is MISSING:
            raise AttributeError(f"{type(target).__name__!r} object has no attribute {name!r}")
        return res

    def __setattr__(self, name: str, value) -> None:
        if not _handler(self).write(_target(self), name, value, self):
            raise _rejected(name)

    def __delattr__(self, name: str) -> None:
        target = _target(self)
        if not _handler(self).delete(target, name):
            raise AttributeError(f"{type(target).__name__!r} object has no attribute {name!r}")

    def __dir__(self):
        target = _target(self)
        return sorted(set(_handler(self).enumerate(target)) | set(dir(type(target))))


class SetProxy(ReactiveProxy, MutableSet):
    """Proxy for a set or WeakSet."""

    __slots__ = ()

    @classmethod
    def _from_iterable(cls, iterable):
        return set(iterable)

    def __contains__(self, value) -> bool:
        return _handler(self).has(_target(self), value)

    def __iter__(self):
        return iter(_handler(self).iterate(_target(self)))

    def __len__(self) -> int:
        return _handler(self).size(_target(self))

    def add(self, value) -> None:
        _handler(self).add(_target(self), value)

    def discard(self, value) -> None:
        _handler(self).delete(_target(self), value)

    def clear(self) -> None:
        _handler(self).clear(_target(self))

    __hash__ = None


class MapProxy(ReactiveProxy, MutableMapping):
    """Proxy for a WeakKeyDictionary or WeakValueDictionary."""

    __slots__ = ()

    def __getitem__(self, key):
        res = _handler(self).get(_target(self), key)
        if res is MISSING:
            raise KeyError(key)
        return res

    def __setitem__(self, key, value) -> None:
        _handler(self).set(_target(self), key, value)

    def __delitem__(self, key) -> None:
        if not _handler(self).delete(_target(self), key):
            raise KeyError(key)

    def __contains__(self, key) -> bool:
        return _handler(self).has(_target(self), key)

    def __iter__(self):
        return iter(_handler(self).iterate(_target(self), "keys"))

    def __len__(self) -> int:
        return _handler(self).size(_target(self))

    def values(self) -> list:
        return _handler(self).iterate(_target(self), "values")

    def items(self) -> list:
        return _handler(self).iterate(_target(self), "items")

    def clear(self) -> None:
        _handler(self).clear(_target(self))

    __hash__ = None


def proxy_class_for(target, target_type) -> type[ReactiveProxy]:
    if target_type is factory.TargetType.COLLECTION:
        return MapProxy if is_map_collection(factory.to_raw(target)) else SetProxy
    shape = shape_of(target)
    if shape is ARRAY:
        return ArrayProxy
    if shape is RECORD:
        return RecordProxy
    return ObjectProxy
