"""Trap handlers for set-like and weak map-like collections.

Same four-variant contract and reserved flags as the base handlers, but
the operations are the collection's own: get, has, size, add, set,
delete, clear and iteration. Keys and values are unwrapped to raw before
they are stored, and wrapped again (unless shallow) when they come out.
"""

from __future__ import annotations

from proxyfx import factory
from proxyfx._reflect import is_map_collection
from proxyfx._shared import MISSING, has_changed
from proxyfx._tracking import track, trigger
from proxyfx._warning import warn
from proxyfx.base_handlers import ProxyHandler
from proxyfx.operations import ITERATE_KEY, MAP_KEY_ITERATE_KEY, TrackOpTypes, TriggerOpTypes


class CollectionHandler(ProxyHandler):
    def _wrap(self, value):
        if self._shallow:
            return value
        return factory.to_readonly(value) if self._readonly else factory.to_reactive(value)

    def _track_key(self, raw_target, key, raw_key, kind: TrackOpTypes) -> None:
        if self._readonly:
            return
        if key is not raw_key:
            track(raw_target, kind, key)
        track(raw_target, kind, raw_key)

    def get(self, target, key):
        raw_target = factory.to_raw(target)
        raw_key = factory.to_raw(key)
        self._track_key(raw_target, key, raw_key, TrackOpTypes.GET)
        if key in raw_target:
            return self._wrap(target[key])
        if raw_key in raw_target:
            return self._wrap(target[raw_key])
        if target is not raw_target:
            # Readonly over reactive: let the inner proxy track the miss.
            return target.get(key, MISSING)
        return MISSING

    def has(self, target, key) -> bool:
        raw_key = factory.to_raw(key)
        self._track_key(factory.to_raw(target), key, raw_key, TrackOpTypes.HAS)
        return key in target or (key is not raw_key and raw_key in target)

    def size(self, target) -> int:
        if not self._readonly:
            track(factory.to_raw(target), TrackOpTypes.ITERATE, ITERATE_KEY)
        return len(target)

    def iterate(self, target, method: str = "values") -> list:
        """Snapshot of the collection's keys, values or items, wrapped."""
        raw_target = factory.to_raw(target)
        is_map = is_map_collection(raw_target)
        if not self._readonly:
            key_only = is_map and method == "keys"
            track(raw_target, TrackOpTypes.ITERATE, MAP_KEY_ITERATE_KEY if key_only else ITERATE_KEY)
        wrap = self._wrap
        if not is_map:
            return [wrap(value) for value in list(target)]
        if method == "keys":
            return [wrap(key) for key in list(target.keys())]
        if method == "values":
            return [wrap(value) for value in list(target.values())]
        return [(wrap(key), wrap(value)) for key, value in list(target.items())]


class MutableCollectionHandler(CollectionHandler):
    def __init__(self, shallow: bool = False) -> None:
        super().__init__(False, shallow)

    def _normalize(self, value):
        if not self._shallow and not factory.is_shallow(value) and not factory.is_readonly(value):
            return factory.to_raw(value)
        return value

    def _find_key(self, target, key):
        """The stored form of key and whether it is present."""
        if key in target:
            return key, True
        raw_key = factory.to_raw(key)
        return raw_key, raw_key in target

    def add(self, target, value) -> None:
        value = self._normalize(value)
        if value not in target:
            target.add(value)
            trigger(target, TriggerOpTypes.ADD, value, value)

    def set(self, target, key, value) -> None:
        value = self._normalize(value)
        key, had_key = self._find_key(target, key)
        old_value = target.get(key) if had_key else None
        target[key] = value
        if not had_key:
            trigger(target, TriggerOpTypes.ADD, key, value)
        elif has_changed(value, old_value):
            trigger(target, TriggerOpTypes.SET, key, value, old_value)

    def delete(self, target, key) -> bool:
        key, had_key = self._find_key(target, key)
        if not had_key:
            return False
        if is_map_collection(target):
            old_value = target.get(key)
            del target[key]
        else:
            old_value = None
            target.discard(key)
        trigger(target, TriggerOpTypes.DELETE, key, None, old_value)
        return True

    def clear(self, target) -> None:
        had_items = len(target) != 0
        target.clear()
        if had_items:
            trigger(target, TriggerOpTypes.CLEAR)


class ReadonlyCollectionHandler(CollectionHandler):
    def __init__(self, shallow: bool = False) -> None:
        super().__init__(True, shallow)

    def _reject(self, op: str, target, key=None) -> None:
        suffix = f' on key "{key!r}"' if key is not None else ""
        warn("%s operation%s failed: target is readonly. %r", op, suffix, target)

    def add(self, target, value) -> None:
        self._reject("Add", target, value)

    def set(self, target, key, value) -> None:
        self._reject("Set", target, key)

    def delete(self, target, key) -> bool:
        self._reject("Delete", target, key)
        return True

    def clear(self, target) -> None:
        self._reject("Clear", target)


mutable_collection_handlers = MutableCollectionHandler()
shallow_collection_handlers = MutableCollectionHandler(shallow=True)
readonly_collection_handlers = ReadonlyCollectionHandler()
shallow_readonly_collection_handlers = ReadonlyCollectionHandler(shallow=True)
