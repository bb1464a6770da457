"""Wrap factory: one proxy per (raw value, variant), created lazily.

    state = reactive({"count": 0, "items": []})
    view = readonly(state)

reactive() and readonly() are deep: nested dicts, lists and objects are
wrapped on access, not up front. shallow_reactive() and shallow_readonly()
only intercept the root.

Proxies answer four reserved flag keys without tracking: whether they are
reactive, readonly or shallow, and which raw value they stand for. The
flags are readable with getattr() on any value, so the predicates below
work on raw values and proxies alike.
"""

from __future__ import annotations

import weakref
from dataclasses import is_dataclass
from enum import Enum
from typing import TypeVar

from proxyfx import _anchor
from proxyfx._shared import is_object
from proxyfx._warning import warn

T = TypeVar("T")


class ReactiveFlags:
    SKIP = "__v_skip__"
    IS_REACTIVE = "__v_is_reactive__"
    IS_READONLY = "__v_is_readonly__"
    IS_SHALLOW = "__v_is_shallow__"
    RAW = "__v_raw__"


FLAG_KEYS = frozenset(
    {ReactiveFlags.IS_REACTIVE, ReactiveFlags.IS_READONLY, ReactiveFlags.IS_SHALLOW, ReactiveFlags.RAW}
)


class TargetType(Enum):
    INVALID = 0
    COMMON = 1
    COLLECTION = 2


_COMMON_TYPES = (dict, list)
_COLLECTION_TYPES = (set, weakref.WeakSet, weakref.WeakKeyDictionary, weakref.WeakValueDictionary)


def _is_sealed(value: object) -> bool:
    """True if value cannot take new keys or attributes."""
    if isinstance(value, _COMMON_TYPES + _COLLECTION_TYPES):
        return False
    if is_dataclass(value) and value.__dataclass_params__.frozen:
        return True
    return not hasattr(value, "__dict__")


def _target_type_map(value: object) -> TargetType:
    if isinstance(value, _COMMON_TYPES):
        return TargetType.COMMON
    if isinstance(value, _COLLECTION_TYPES):
        return TargetType.COLLECTION
    cls = type(value)
    if isinstance(value, type) or callable(value) or cls.__module__ == "builtins":
        return TargetType.INVALID
    return TargetType.COMMON


def get_target_type(value: object) -> TargetType:
    """Classify value: INVALID, COMMON (dict/list/object) or COLLECTION (set/weak map)."""
    raw = to_raw(value)
    if is_marked_raw(value) or is_marked_raw(raw) or _is_sealed(raw):
        return TargetType.INVALID
    return _target_type_map(raw)


def create_reactive_object(target, is_readonly: bool, base_handlers, collection_handlers, proxy_map):
    if not is_object(target):
        warn("value cannot be made reactive: %r", target)
        return target
    # Already a proxy. Only readonly() may layer over a reactive proxy.
    if getattr(target, ReactiveFlags.RAW, None) is not None and not (
        is_readonly and getattr(target, ReactiveFlags.IS_REACTIVE, False) is True
    ):
        return target
    existing = proxy_map.get(target)
    if existing is not None:
        return existing
    target_type = get_target_type(target)
    if target_type is TargetType.INVALID:
        return target

    handlers = collection_handlers if target_type is TargetType.COLLECTION else base_handlers
    proxy = proxy_class_for(target, target_type)(target, handlers)
    proxy_map.set(target, proxy)
    return proxy


def reactive(target: T) -> T:
    """Return the deep mutable proxy for target.

    Reads inside a reaction are tracked, writes notify. Refs stored in
    the object are unwrapped on read, except at list indices.
    """
    # Mutability is never granted over a readonly proxy.
    if is_readonly(target):
        return target
    return create_reactive_object(
        target, False, base_handlers.mutable_handlers,
        collection_handlers.mutable_collection_handlers, _anchor.reactive_map,
    )


def shallow_reactive(target: T) -> T:
    """Only the root level is reactive. Nested values and refs are returned as-is."""
    return create_reactive_object(
        target, False, base_handlers.shallow_reactive_handlers,
        collection_handlers.shallow_collection_handlers, _anchor.shallow_reactive_map,
    )


def readonly(target: T) -> T:
    """Return a deep readonly proxy. Writes are rejected with a warning.

    May be called on a reactive proxy; the result then still reflects
    changes made through the reactive one.
    """
    return create_reactive_object(
        target, True, base_handlers.readonly_handlers,
        collection_handlers.readonly_collection_handlers, _anchor.readonly_map,
    )


def shallow_readonly(target: T) -> T:
    return create_reactive_object(
        target, True, base_handlers.shallow_readonly_handlers,
        collection_handlers.shallow_readonly_collection_handlers, _anchor.shallow_readonly_map,
    )


def is_reactive(value: object) -> bool:
    if is_readonly(value):
        return is_reactive(getattr(value, ReactiveFlags.RAW, None))
    return getattr(value, ReactiveFlags.IS_REACTIVE, False) is True


def is_readonly(value: object) -> bool:
    return getattr(value, ReactiveFlags.IS_READONLY, False) is True


def is_shallow(value: object) -> bool:
    return getattr(value, ReactiveFlags.IS_SHALLOW, False) is True


def is_proxy(value: object) -> bool:
    return getattr(value, ReactiveFlags.RAW, None) is not None


def to_raw(observed: T) -> T:
    """Follow raw pointers until reaching a value that is not a proxy."""
    raw = getattr(observed, ReactiveFlags.RAW, None)
    return to_raw(raw) if raw is not None else observed


def mark_raw(value: T) -> T:
    """Permanently exclude value from being wrapped. Returns value.

    The mark lasts as long as value does. dicts and lists cannot be weakly
    referenced, so marking one keeps it alive for the rest of the process.
    """
    key = id(value)
    if key in _anchor.skip_marked:
        return value
    try:
        weakref.finalize(value, _anchor.skip_marked.pop, key, None)
    except TypeError:
        # dicts and lists are not weak-referenceable; pin them instead.
        _anchor.skip_marked[key] = value
    else:
        _anchor.skip_marked[key] = None
    return value


def is_marked_raw(value: object) -> bool:
    if id(value) in _anchor.skip_marked:
        return True
    return getattr(value, ReactiveFlags.SKIP, False) is True


def to_reactive(value: T) -> T:
    return reactive(value) if is_object(value) else value


def to_readonly(value: T) -> T:
    return readonly(value) if is_object(value) else value


# Handlers look the factory functions up at call time.
from proxyfx import base_handlers, collection_handlers  # noqa: E402
from proxyfx.proxies import proxy_class_for  # noqa: E402
