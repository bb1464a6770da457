"""proxyfx: transparent reactive proxies over plain Python data."""

from importlib.metadata import version as _version

__version__ = _version("proxyfx")

# factory first: the handler and proxy modules import it back.
from proxyfx.factory import (
    ReactiveFlags,
    TargetType,
    get_target_type,
    is_marked_raw,
    is_proxy,
    is_reactive,
    is_readonly,
    is_shallow,
    mark_raw,
    reactive,
    readonly,
    shallow_reactive,
    shallow_readonly,
    to_raw,
    to_reactive,
    to_readonly,
)
from proxyfx._tracking import (
    enable_tracking,
    get_pending_count,
    pause_tracking,
    paused_tracking,
    reset_tracking,
)
from proxyfx.operations import ITERATE_KEY, DebuggerEvent, TrackOpTypes, TriggerOpTypes
from proxyfx.ref import Ref, is_ref, ref, shallow_ref, trigger_ref, unref
from proxyfx.computed import Computed, computed
from proxyfx.reaction import Reaction, autorun, reaction
from proxyfx.action import action, transaction, untracked
# textual NOT auto-imported, opt-in only

__all__ = [
    "reactive",
    "shallow_reactive",
    "readonly",
    "shallow_readonly",
    "is_reactive",
    "is_readonly",
    "is_shallow",
    "is_proxy",
    "to_raw",
    "mark_raw",
    "is_marked_raw",
    "to_reactive",
    "to_readonly",
    "get_target_type",
    "TargetType",
    "ReactiveFlags",
    "Ref",
    "ref",
    "shallow_ref",
    "is_ref",
    "unref",
    "trigger_ref",
    "Computed",
    "computed",
    "Reaction",
    "autorun",
    "reaction",
    "action",
    "transaction",
    "untracked",
    "pause_tracking",
    "enable_tracking",
    "reset_tracking",
    "paused_tracking",
    "get_pending_count",
    "DebuggerEvent",
    "TrackOpTypes",
    "TriggerOpTypes",
    "ITERATE_KEY",
]
