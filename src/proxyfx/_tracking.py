"""Dependency tracking engine: the heart of proxyfx.

Uses contextvars to track which keys are read during a computed/reaction
evaluation, building the dependency graph automatically. Proxies report
reads with track() and writes with trigger(); refs and computeds own a
Dep directly.

Batching: mutations inside an @action or `with transaction()` accumulate
invalidations and flush them once at the end, ensuring glitch-free updates.

Suppression: pause_tracking() / reset_tracking() form a stack, so a nested
suppressed call restores its caller's state instead of re-enabling tracking.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

from proxyfx import _anchor
from proxyfx._reflect import is_map_collection
from proxyfx.operations import (
    ITERATE_KEY,
    LENGTH_KEY,
    MAP_KEY_ITERATE_KEY,
    DebuggerEvent,
    TrackOpTypes,
    TriggerOpTypes,
)

if TYPE_CHECKING:
    from proxyfx.computed import Computed
    from proxyfx.reaction import Reaction

    Derivation = Computed | Reaction

# The currently-evaluating derivation (computed or reaction).
# When set, any tracked read registers itself as a dependency.
current_derivation: contextvars.ContextVar[Derivation | None] = contextvars.ContextVar(
    "current_derivation", default=None
)

# Batch depth counter. When > 0, invalidations are deferred.
_batch_depth: int = 0

# Derivations that were invalidated during a batch, awaiting flush.
_pending: set[Derivation] = set()

_should_track: bool = True
_track_stack: list[bool] = []


# ─── Suppression stack ──────────────────────────────────────────────────────


def pause_tracking() -> None:
    global _should_track
    _track_stack.append(_should_track)
    _should_track = False


def enable_tracking() -> None:
    global _should_track
    _track_stack.append(_should_track)
    _should_track = True


def reset_tracking() -> None:
    """Restore the state saved by the matching pause/enable call."""
    global _should_track
    _should_track = _track_stack.pop() if _track_stack else True


def is_tracking() -> bool:
    return _should_track and current_derivation.get() is not None


@contextmanager
def paused_tracking() -> Iterator[None]:
    pause_tracking()
    try:
        yield
    finally:
        reset_tracking()


@contextmanager
def enabled_tracking() -> Iterator[None]:
    enable_tracking()
    try:
        yield
    finally:
        reset_tracking()


@contextmanager
def tracked(derivation: Derivation) -> Iterator[None]:
    """Run the body with derivation as the active reader, tracking enabled."""
    token = current_derivation.set(derivation)
    enable_tracking()
    try:
        yield
    finally:
        reset_tracking()
        current_derivation.reset(token)


# ─── Deps ───────────────────────────────────────────────────────────────────


class Dep:
    """The set of derivations that read one (target, key) pair, a ref or a computed."""

    __slots__ = ("observers", "_owner")

    def __init__(self, owner: tuple[int, object] | None = None) -> None:
        self.observers: set[Derivation] = set()
        self._owner = owner

    def _remove_observer(self, observer) -> None:
        """Remove an observer. Called during dependency cleanup."""
        self.observers.discard(observer)
        if not self.observers and self._owner is not None:
            target_id, key = self._owner
            deps_map = _anchor.target_deps.get(target_id)
            if deps_map is not None and deps_map.get(key) is self:
                del deps_map[key]
                if not deps_map:
                    del _anchor.target_deps[target_id]
                    _anchor.targets.pop(target_id, None)

    def __repr__(self) -> str:
        return f"Dep({len(self.observers)} observers)"


def cleanup(derivation: Derivation) -> None:
    """Disconnect derivation from everything it read last run."""
    deps = _anchor.dependencies[derivation._id]
    for dep in deps:
        dep._remove_observer(derivation)
    deps.clear()


def track_dep(dep: Dep, event: DebuggerEvent | None = None) -> None:
    """Register the current derivation as an observer of dep."""
    if not _should_track:
        return
    derivation = current_derivation.get()
    if derivation is None or derivation in dep.observers:
        return
    dep.observers.add(derivation)
    _anchor.dependencies[derivation._id].add(dep)
    hook = _anchor.track_hooks.get(derivation._id)
    if hook is not None and event is not None:
        hook(event._replace(effect=derivation))


def trigger_dep(dep: Dep, event: DebuggerEvent | None = None) -> None:
    _trigger_effects([dep], event)


def track(target: object, kind: TrackOpTypes, key: object) -> None:
    """Record that the active derivation reads key on target."""
    if not _should_track:
        return
    derivation = current_derivation.get()
    if derivation is None:
        return
    target_id = id(target)
    deps_map = _anchor.target_deps.get(target_id)
    if deps_map is None:
        deps_map = _anchor.target_deps[target_id] = {}
        _anchor.targets[target_id] = target
    dep = deps_map.get(key)
    if dep is None:
        dep = deps_map[key] = Dep((target_id, key))
    track_dep(dep, DebuggerEvent(derivation, target, kind, key))


def trigger(
    target: object,
    kind: TriggerOpTypes,
    key: object = None,
    new_value: object = None,
    old_value: object = None,
) -> None:
    """Schedule every derivation that read something this write invalidates."""
    deps_map = _anchor.target_deps.get(id(target))
    if not deps_map:
        return

    is_list = isinstance(target, list)
    deps: list[Dep | None] = []
    if kind is TriggerOpTypes.CLEAR:
        deps.extend(deps_map.values())
    elif is_list and key == LENGTH_KEY:
        for dep_key, dep in deps_map.items():
            if dep_key == LENGTH_KEY or (type(dep_key) is int and dep_key >= new_value):
                deps.append(dep)
    else:
        deps.append(deps_map.get(key))
        if kind is TriggerOpTypes.ADD or kind is TriggerOpTypes.DELETE:
            if not is_list:
                deps.append(deps_map.get(ITERATE_KEY))
                if is_map_collection(target):
                    deps.append(deps_map.get(MAP_KEY_ITERATE_KEY))
            elif type(key) is int:
                deps.append(deps_map.get(LENGTH_KEY))
        elif kind is TriggerOpTypes.SET and is_map_collection(target):
            deps.append(deps_map.get(ITERATE_KEY))

    _trigger_effects(
        [dep for dep in deps if dep is not None],
        DebuggerEvent(None, target, kind, key, new_value, old_value),
    )


def _trigger_effects(deps: list[Dep], event: DebuggerEvent | None) -> None:
    running = current_derivation.get()
    effects: dict[Derivation, None] = {}
    for dep in deps:
        for observer in dep.observers:
            effects[observer] = None
    for derivation in effects:
        # A derivation never re-schedules itself by writing what it reads.
        if derivation is running:
            continue
        hook = _anchor.trigger_hooks.get(derivation._id)
        if hook is not None and event is not None:
            hook(event._replace(effect=derivation))
        schedule(derivation)


# ─── Batching ───────────────────────────────────────────────────────────────


def begin_batch() -> None:
    """Enter a batching scope. Nested batches are supported."""
    global _batch_depth
    _batch_depth += 1


def end_batch() -> None:
    """Exit a batching scope. When the outermost scope exits, flush pending derivations."""
    global _batch_depth
    _batch_depth -= 1
    if _batch_depth == 0:
        _flush_pending()


def schedule(derivation: Derivation) -> None:
    """Schedule a derivation for re-evaluation.

    If inside a batch, defers. Otherwise, runs immediately.
    """
    if _batch_depth > 0:
        _pending.add(derivation)
    else:
        derivation._run()


def _flush_pending() -> None:
    """Run all pending derivations. Handles derivations scheduled during flush."""
    while _pending:
        # Snapshot and clear, derivations may schedule new ones during run.
        batch = list(_pending)
        _pending.clear()
        for derivation in batch:
            derivation._run()


def get_pending_count() -> int:
    """Number of derivations waiting to run. Useful for testing."""
    return len(_pending)
