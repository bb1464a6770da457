"""Computed values: derived state with automatic dependency tracking.

A Computed wraps a function. When evaluated, it tracks which refs and
proxy keys the function reads and caches the result. When any of them
changes, the cached value is invalidated. On next read, it re-evaluates.

Computed values are lazy: they only recompute when read.

All state lives in _anchor; instances are thin handles holding an _id.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from proxyfx import _anchor
from proxyfx._tracking import Dep, cleanup, schedule, track_dep, tracked
from proxyfx.operations import DebuggerEvent, TrackOpTypes

T = TypeVar("T")

_UNSET = object()


class Computed(Generic[T]):
    """A derived value that auto-tracks dependencies and caches the result."""

    __slots__ = ("_id",)

    __v_is_ref__ = True
    # No setter, so a reactive container never writes through it.
    __v_is_readonly__ = True

    def __init__(self, fn: Callable[[], T]) -> None:
        self._id = _anchor.new_id()
        _anchor.derivation_fns[self._id] = fn
        _anchor.cached_values[self._id] = _UNSET
        _anchor.dirty_flags[self._id] = True
        _anchor.dependencies[self._id] = set()
        _anchor.observers[self._id] = Dep()

    @property
    def _fn(self) -> Callable[[], T]:
        return _anchor.derivation_fns[self._id]

    @property
    def value(self) -> T:
        """Read the computed value. Recomputes if dirty."""
        track_dep(_anchor.observers[self._id], DebuggerEvent(None, self, TrackOpTypes.GET, "value"))
        if _anchor.dirty_flags[self._id]:
            self._recompute()
        return _anchor.cached_values[self._id]

    def get(self) -> T:
        return self.value

    def _recompute(self) -> None:
        """Re-evaluate the function, tracking dependencies."""
        cleanup(self)
        with tracked(self):
            _anchor.cached_values[self._id] = self._fn()
        _anchor.dirty_flags[self._id] = False

    def _run(self) -> None:
        """Called by the scheduler when a dependency changed.

        For Computed, we mark dirty and propagate to our own observers.
        We don't recompute eagerly; that happens on next read.
        """
        if not _anchor.dirty_flags[self._id]:
            _anchor.dirty_flags[self._id] = True
            for observer in list(_anchor.observers[self._id].observers):
                schedule(observer)

    def dispose(self) -> None:
        """Disconnect from all dependencies. The computed becomes inert."""
        cleanup(self)
        _anchor.observers[self._id].observers.clear()
        _anchor.dirty_flags[self._id] = True
        _anchor.cached_values[self._id] = _UNSET

    def __repr__(self) -> str:
        dirty = _anchor.dirty_flags[self._id]
        val = _anchor.cached_values[self._id]
        state = "dirty" if dirty else f"cached={val!r}"
        return f"Computed({self._fn.__name__}, {state})"


def computed(fn: Callable[[], T]) -> Computed[T]:
    """Decorator/factory to create a Computed from a function.

    Usage:
        state = reactive({"count": 0})

        @computed
        def doubled():
            return state["count"] * 2

        doubled.value  # 0
        state["count"] = 5
        doubled.value  # 10
    """
    return Computed(fn)
