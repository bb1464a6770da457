"""Operation kinds and sentinel keys shared by the handlers and the tracker."""

from __future__ import annotations

from enum import Enum
from typing import Any, NamedTuple


class TrackOpTypes(str, Enum):
    GET = "get"
    HAS = "has"
    ITERATE = "iterate"


class TriggerOpTypes(str, Enum):
    SET = "set"
    ADD = "add"
    DELETE = "delete"
    CLEAR = "clear"


class _SentinelKey:
    """A dependency key that can never collide with user data."""

    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return f"<{self._name}>"


# "The key set changed" for records, sets and maps.
ITERATE_KEY = _SentinelKey("iterate")
# "The key set changed" for map-like collections iterated by key only.
MAP_KEY_ITERATE_KEY = _SentinelKey("map_key_iterate")
# Array length. List keys are ints, so a string cannot collide.
LENGTH_KEY = "length"


class DebuggerEvent(NamedTuple):
    """Passed to on_track / on_trigger hooks."""

    effect: Any
    target: Any
    type: TrackOpTypes | TriggerOpTypes
    key: Any
    new_value: Any = None
    old_value: Any = None
