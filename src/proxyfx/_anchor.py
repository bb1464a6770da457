"""Data anchor: plain Python structures that hold all reactive state.

This module stores the proxy registries, the skip markers, the per-target
dependency maps and the state of every Computed and Reaction. Separating
data from behavior means the behavior modules can be replaced while the
data persists.

Raw dicts and lists cannot be weakly referenced, so everything here is
keyed by id(). Each table documents what keeps its ids stable.
"""

from __future__ import annotations

import itertools
import weakref


class ProxyMap:
    """Identity-keyed map from a raw value to its proxy, holding the proxy weakly.

    A live proxy holds its raw value, so id(raw) cannot be reused while the
    entry can still be read. The weakref callback drops the entry once the
    proxy is collected.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[int, weakref.ref] = {}

    def get(self, raw: object):
        ref = self._entries.get(id(raw))
        return ref() if ref is not None else None

    def set(self, raw: object, proxy: object) -> None:
        key = id(raw)
        entries = self._entries

        def _drop(ref: weakref.ref) -> None:
            if entries.get(key) is ref:
                del entries[key]

        entries[key] = weakref.ref(proxy, _drop)

    def __len__(self) -> int:
        return sum(1 for ref in self._entries.values() if ref() is not None)


# Variant registries: {deep, shallow} x {mutable, readonly}
reactive_map = ProxyMap()
shallow_reactive_map = ProxyMap()
readonly_map = ProxyMap()
shallow_readonly_map = ProxyMap()

# id(value) -> value (pinned) or None (dropped by weakref.finalize)
skip_marked: dict[int, object] = {}

# Target dependency state: id(target) -> {key: Dep}.
# targets pins each target while it has deps, keeping its id stable.
target_deps: dict[int, dict] = {}
targets: dict[int, object] = {}

# Derivation state (Computed + Reaction)
dependencies: dict[int, set] = {}  # deriv_id -> set of Dep
observers: dict[int, object] = {}  # computed_id -> Dep of its readers
dirty_flags: dict[int, bool] = {}
cached_values: dict[int, object] = {}
derivation_fns: dict[int, object] = {}  # deriv_id -> callable
disposed: dict[int, bool] = {}
track_hooks: dict[int, object] = {}
trigger_hooks: dict[int, object] = {}

# ID generation. itertools.count is thread-safe (C-level GIL atomic)
_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)
