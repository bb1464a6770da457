"""Trap handlers for dict, list and attribute-object proxies.

Four handler instances cover the variants: mutable_handlers,
shallow_reactive_handlers, readonly_handlers and shallow_readonly_handlers.
A proxy stores its handler and forwards every structural operation to one
of read / write / has / delete / enumerate, always passing the raw target
and itself as receiver.
"""

from __future__ import annotations

from functools import partial

from proxyfx import _anchor, factory
from proxyfx._reflect import ARRAY, ARRAY_METHODS, is_builtin_key, ops_for, shape_of
from proxyfx._shared import IS_REF, MISSING, has_changed, is_integer_key, is_object, is_ref
from proxyfx._tracking import paused_tracking, track, trigger
from proxyfx._warning import warn
from proxyfx.factory import ReactiveFlags
from proxyfx.operations import ITERATE_KEY, LENGTH_KEY, TrackOpTypes, TriggerOpTypes

# __class__ is the prototype-chain key; the other two are internal markers.
NON_TRACKABLE_KEYS = frozenset({"__class__", IS_REF, ReactiveFlags.SKIP})


def _create_array_instrumentations() -> dict:
    instrumentations = {}

    # Identity-sensitive lookups. The result depends on every element, and
    # the argument may be a proxy of a raw element or the other way round.
    def _lookup(name, not_found):
        def method(receiver, *args):
            arr = factory.to_raw(receiver)
            for i in range(len(receiver)):
                track(arr, TrackOpTypes.GET, i)
            native = getattr(arr, name)
            if not_found is ValueError:
                try:
                    return native(*args)
                except ValueError:
                    return native(*map(factory.to_raw, args))
            res = native(*args)
            if res == not_found:
                return native(*map(factory.to_raw, args))
            return res

        return method

    instrumentations["__contains__"] = _lookup("__contains__", False)
    instrumentations["index"] = _lookup("index", ValueError)
    instrumentations["count"] = _lookup("count", 0)

    # Length-altering mutations read the length they are about to change.
    # Tracking it would make two reactions pushing to one array re-run each
    # other forever.
    def _untracked(name):
        def method(receiver, *args, **kwargs):
            with paused_tracking():
                return ARRAY_METHODS[name](receiver, *args, **kwargs)

        return method

    for name in ("append", "extend", "insert", "pop", "remove", "clear", "splice"):
        instrumentations[name] = _untracked(name)
    return instrumentations


array_instrumentations = _create_array_instrumentations()


class ProxyHandler:
    """Behavior shared by every handler family: the reserved flag keys."""

    def __init__(self, readonly: bool = False, shallow: bool = False) -> None:
        self._readonly = readonly
        self._shallow = shallow

    def proxy_map(self) -> _anchor.ProxyMap:
        if self._readonly:
            return _anchor.shallow_readonly_map if self._shallow else _anchor.readonly_map
        return _anchor.shallow_reactive_map if self._shallow else _anchor.reactive_map

    def read_flag(self, target, key, receiver):
        if key == ReactiveFlags.IS_REACTIVE:
            return not self._readonly
        if key == ReactiveFlags.IS_READONLY:
            return self._readonly
        if key == ReactiveFlags.IS_SHALLOW:
            return self._shallow
        if key == ReactiveFlags.RAW and receiver is self.proxy_map().get(target):
            return target
        return MISSING

    def __repr__(self) -> str:
        return f"{type(self).__name__}(readonly={self._readonly}, shallow={self._shallow})"


class BaseReactiveHandler(ProxyHandler):
    def read(self, target, key, receiver):
        if isinstance(key, str) and key in factory.FLAG_KEYS:
            flag = self.read_flag(target, key, receiver)
            if flag is not MISSING:
                return flag

        shape = shape_of(target)
        if not self._readonly and shape is ARRAY and isinstance(key, str) and key in array_instrumentations:
            return partial(array_instrumentations[key], receiver)

        res = ops_for(shape).get(target, key, receiver)

        if is_builtin_key(key, shape) or (isinstance(key, str) and key in NON_TRACKABLE_KEYS):
            return res

        if not self._readonly:
            track(target, TrackOpTypes.GET, key)

        if self._shallow or res is MISSING:
            return res

        if is_ref(res):
            # Refs at list indices stay boxed.
            return res if shape is ARRAY and is_integer_key(key) else res.value

        if is_object(res):
            # Wrapped here, on access, rather than when the parent was wrapped.
            return factory.readonly(res) if self._readonly else factory.reactive(res)

        return res

    def has(self, target, key) -> bool:
        shape = shape_of(target)
        result = ops_for(shape).has(target, key)
        if not self._readonly and not is_builtin_key(key, shape):
            track(target, TrackOpTypes.HAS, key)
        return result

    def enumerate(self, target) -> list:
        shape = shape_of(target)
        if not self._readonly:
            track(target, TrackOpTypes.ITERATE, LENGTH_KEY if shape is ARRAY else ITERATE_KEY)
        return ops_for(shape).own_keys(target)


class MutableReactiveHandler(BaseReactiveHandler):
    def __init__(self, shallow: bool = False) -> None:
        super().__init__(False, shallow)

    def write(self, target, key, value, receiver) -> bool:
        shape = shape_of(target)
        ops = ops_for(shape)
        old_value = ops.get(target, key, target)
        if factory.is_readonly(old_value) and is_ref(old_value) and not is_ref(value):
            return False
        if not self._shallow:
            if not factory.is_shallow(value) and not factory.is_readonly(value):
                old_value = factory.to_raw(old_value)
                value = factory.to_raw(value)
            if shape is not ARRAY and is_ref(old_value) and not is_ref(value):
                old_value.value = value
                return True
        # In shallow mode values are stored as-is, proxy or not.

        if shape is ARRAY and is_integer_key(key):
            had_key = key < len(target)
        else:
            had_key = ops.has_own(target, key)
        result = ops.set(target, key, value, receiver)
        # Only notify for writes made through this target's own proxy.
        if target is factory.to_raw(receiver):
            if not had_key:
                trigger(target, TriggerOpTypes.ADD, key, value)
            elif has_changed(value, old_value):
                trigger(target, TriggerOpTypes.SET, key, value, old_value)
        return result

    def delete(self, target, key) -> bool:
        ops = ops_for(shape_of(target))
        had_key = ops.has_own(target, key)
        old_value = ops.get(target, key, target) if had_key else None
        result = ops.delete(target, key)
        if result and had_key:
            trigger(target, TriggerOpTypes.DELETE, key, None, old_value)
        return result


class ReadonlyReactiveHandler(BaseReactiveHandler):
    def __init__(self, shallow: bool = False) -> None:
        super().__init__(True, shallow)

    def write(self, target, key, value, receiver) -> bool:
        warn("Set operation on key %r failed: target is readonly. %r", key, target)
        return True

    def delete(self, target, key) -> bool:
        warn("Delete operation on key %r failed: target is readonly. %r", key, target)
        return True


mutable_handlers = MutableReactiveHandler()
shallow_reactive_handlers = MutableReactiveHandler(shallow=True)
readonly_handlers = ReadonlyReactiveHandler()
# Does not unwrap refs, so refs can be passed down explicitly.
shallow_readonly_handlers = ReadonlyReactiveHandler(shallow=True)
