"""Reactions: side effects triggered by reactive state changes.

Unlike Computed (which is lazy and only evaluates on read), a Reaction
eagerly re-runs its side effect whenever its tracked dependencies change.

Two flavors:
- autorun(fn): runs fn immediately, re-runs when anything it read changes.
- reaction(data_fn, effect_fn): tracks data_fn, calls effect_fn with the new value
  only when data_fn's result changes.

All state lives in _anchor; instances are thin handles holding an _id.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from proxyfx import _anchor
from proxyfx._tracking import cleanup, tracked
from proxyfx.operations import DebuggerEvent

T = TypeVar("T")

DebuggerHook = Callable[[DebuggerEvent], None]


class Reaction:
    """A reactive side effect that re-runs when its dependencies change.

    Reactions run eagerly (unlike Computed which is lazy).
    """

    __slots__ = ("_id",)

    def __init__(
        self,
        fn: Callable[[], None],
        *,
        on_track: DebuggerHook | None = None,
        on_trigger: DebuggerHook | None = None,
    ) -> None:
        self._id = _anchor.new_id()
        _anchor.derivation_fns[self._id] = fn
        _anchor.dependencies[self._id] = set()
        _anchor.disposed[self._id] = False
        if on_track is not None:
            _anchor.track_hooks[self._id] = on_track
        if on_trigger is not None:
            _anchor.trigger_hooks[self._id] = on_trigger

    @property
    def _fn(self) -> Callable[[], None]:
        return _anchor.derivation_fns[self._id]

    @property
    def dependency_count(self) -> int:
        """Number of distinct keys, refs and computeds read on the last run."""
        return len(_anchor.dependencies[self._id])

    def _run(self) -> None:
        """Re-evaluate the reaction function, re-tracking dependencies."""
        if _anchor.disposed[self._id]:
            return
        cleanup(self)
        with tracked(self):
            self._fn()

    def dispose(self) -> None:
        """Stop this reaction. Disconnects from all dependencies."""
        _anchor.disposed[self._id] = True
        cleanup(self)
        _anchor.track_hooks.pop(self._id, None)
        _anchor.trigger_hooks.pop(self._id, None)

    def __repr__(self) -> str:
        state = "disposed" if _anchor.disposed[self._id] else "active"
        return f"Reaction({self._fn.__name__}, {state})"


class _DataReaction:
    """Internal: reaction(data_fn, effect_fn) implementation.

    Tracks data_fn's dependencies. When they change, re-runs data_fn.
    If the result differs from last time, calls effect_fn with the new value.
    """

    __slots__ = ("_id", "_effect_fn", "_last_value", "_initialized")

    def __init__(self, data_fn: Callable, effect_fn: Callable) -> None:
        self._id = _anchor.new_id()
        _anchor.derivation_fns[self._id] = data_fn
        _anchor.dependencies[self._id] = set()
        _anchor.disposed[self._id] = False
        self._effect_fn = effect_fn
        self._last_value = None
        self._initialized = False

    @property
    def _data_fn(self) -> Callable:
        return _anchor.derivation_fns[self._id]

    def _evaluate(self):
        cleanup(self)
        with tracked(self):
            return self._data_fn()

    def _run(self) -> None:
        if _anchor.disposed[self._id]:
            return
        new_value = self._evaluate()
        if not self._initialized or new_value != self._last_value:
            self._last_value = new_value
            self._initialized = True
            self._effect_fn(new_value)

    def dispose(self) -> None:
        _anchor.disposed[self._id] = True
        cleanup(self)

    def __repr__(self) -> str:
        state = "disposed" if _anchor.disposed[self._id] else "active"
        return f"_DataReaction({self._data_fn.__name__}, {state})"


def autorun(
    fn: Callable[[], None],
    *,
    on_track: DebuggerHook | None = None,
    on_trigger: DebuggerHook | None = None,
) -> Reaction:
    """Run fn immediately, then re-run whenever anything it reads changes.

    Returns the Reaction (call .dispose() to stop). on_track and on_trigger
    receive a DebuggerEvent for every dependency recorded and every change
    that schedules this reaction.

    Usage:
        state = reactive({"count": 0})
        log = []

        r = autorun(lambda: log.append(state["count"]))
        # log == [0], ran immediately

        state["count"] = 1
        # log == [0, 1], re-ran because count changed

        r.dispose()
        state["count"] = 2
        # log == [0, 1], stopped
    """
    r = Reaction(fn, on_track=on_track, on_trigger=on_trigger)
    r._run()  # Initial run to establish dependencies
    return r


def reaction(
    data_fn: Callable[[], T],
    effect_fn: Callable[[T], None],
    *,
    fire_immediately: bool = False,
) -> _DataReaction:
    """Track data_fn's reads; call effect_fn when the result changes.

    Unlike autorun, effect_fn only fires when data_fn's *return value* changes,
    not on every dependency notification.

    Returns the reaction (call .dispose() to stop).

    Usage:
        user = reactive({"first": "Alice", "last": "Smith"})

        effects = []
        r = reaction(
            lambda: f"{user['first']} {user['last']}",
            lambda name: effects.append(name),
        )
        # effects == [], data_fn ran to establish deps, but effect doesn't fire yet

        user["first"] = "Bob"
        # effects == ["Bob Smith"]

        r.dispose()
    """
    r = _DataReaction(data_fn, effect_fn)
    if fire_immediately:
        r._run()
    else:
        # Run data_fn to establish deps, but suppress the initial effect
        r._last_value = r._evaluate()
        r._initialized = True
    return r
