"""Small predicates used across the factory, handlers and refs."""

from __future__ import annotations

import math
from numbers import Number

# Returned by the structural accessors for a key that is not present.
MISSING = object()

_VALUE_TYPES = (Number, str, bytes, tuple, frozenset, type(None))


def is_object(value: object) -> bool:
    """True for values that could in principle be wrapped.

    Scalars, strings and callables are not objects in this sense. The
    classifier makes the finer decision.
    """
    if value is None or value is MISSING:
        return False
    if isinstance(value, (Number, str, bytes)):
        return False
    return not callable(value)


def is_integer_key(key: object) -> bool:
    return type(key) is int


def _is_nan(value: object) -> bool:
    return isinstance(value, float) and math.isnan(value)


def has_changed(value: object, old_value: object) -> bool:
    """Whether a write of value over old_value is a real change.

    Immutable scalars of the same type compare by equality, so 1, 1.0
    and True are all distinct. Everything else compares by identity, and
    NaN is equal to itself.
    """
    if value is old_value:
        return False
    if _is_nan(value) and _is_nan(old_value):
        return False
    if isinstance(value, _VALUE_TYPES) and isinstance(old_value, _VALUE_TYPES):
        return type(value) is not type(old_value) or value != old_value
    return True


# Class attribute carried by boxed references (and read through proxies of them).
IS_REF = "__v_is_ref__"


def is_ref(value: object) -> bool:
    return getattr(value, IS_REF, False) is True
