"""Refs: a single boxed value that tracks its readers.

When a Ref's value is read inside a Computed or Reaction evaluation, the
dependency is automatically registered. When it changes, all dependents
are scheduled for re-evaluation.

A deep ref makes its content reactive; a shallow ref stores it as given.
Refs stored in a reactive dict or object are unwrapped on read and
written through on assignment, so the ref itself keeps its identity for
everyone else holding it.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from proxyfx._shared import IS_REF, has_changed, is_ref
from proxyfx._tracking import Dep, track_dep, trigger_dep
from proxyfx.factory import is_readonly, is_shallow, to_raw, to_reactive
from proxyfx.operations import DebuggerEvent, TrackOpTypes, TriggerOpTypes

T = TypeVar("T")

__all__ = ["Ref", "ref", "shallow_ref", "is_ref", "unref", "trigger_ref", "IS_REF"]


class Ref(Generic[T]):
    """A boxed value with automatic dependency tracking."""

    __v_is_ref__ = True

    def __init__(self, value: T, shallow: bool = False) -> None:
        self._dep = Dep()
        self._shallow = shallow
        self._raw_value = value if shallow else to_raw(value)
        self._value = value if shallow else to_reactive(value)

    @property
    def value(self) -> T:
        track_dep(self._dep, DebuggerEvent(None, self, TrackOpTypes.GET, "value"))
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        as_is = self._shallow or is_shallow(new_value) or is_readonly(new_value)
        new_raw = new_value if as_is else to_raw(new_value)
        if has_changed(new_raw, self._raw_value):
            old_value = self._raw_value
            self._raw_value = new_raw
            self._value = new_value if as_is else to_reactive(new_raw)
            trigger_dep(
                self._dep,
                DebuggerEvent(None, self, TriggerOpTypes.SET, "value", new_value, old_value),
            )

    def get(self) -> T:
        """Read the value. If inside a derivation, registers the dependency."""
        return self.value

    def set(self, value: T) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Ref({self._value!r})"


def ref(value: T) -> Ref[T]:
    """Usage:
        count = ref(0)
        autorun(lambda: print(count.value))
        count.value += 1
    """
    return value if is_ref(value) else Ref(value)


def shallow_ref(value: T) -> Ref[T]:
    return value if is_ref(value) else Ref(value, shallow=True)


def unref(value):
    return value.value if is_ref(value) else value


def trigger_ref(r: Ref) -> None:
    """Notify a shallow ref's readers after mutating its content in place."""
    trigger_dep(r._dep, DebuggerEvent(None, r, TriggerOpTypes.SET, "value", r._value))
