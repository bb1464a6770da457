"""Actions and transactions: batched state mutations.

Wrapping mutations in an @action or `with transaction()` defers all
reaction/computed invalidation until the outermost scope exits.
This prevents glitchy intermediate states where some dependents have
updated but others haven't yet.

untracked() runs a function without recording its reads, so a reaction
can look at state it should not re-run for.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, ParamSpec, TypeVar

from proxyfx._tracking import begin_batch, end_batch, paused_tracking

P = ParamSpec("P")
R = TypeVar("R")


def action(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator: batch all proxy and ref mutations inside fn.

    Reactions only fire after fn returns, not during.

    Usage:
        pair = reactive({"a": 0, "b": 1})

        @action
        def swap():
            pair["a"], pair["b"] = pair["b"], pair["a"]
            # reactions see both changes at once, not one at a time
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        begin_batch()
        try:
            return fn(*args, **kwargs)
        finally:
            end_batch()

    return wrapper


@contextmanager
def transaction():
    """Context manager for batching mutations.

    Usage:
        with transaction():
            state["a"] = 1
            state["b"] = 2
            # reactions fire here, after both are set
    """
    begin_batch()
    try:
        yield
    finally:
        end_batch()


def untracked(fn: Callable[[], R]) -> R:
    """Call fn with dependency tracking paused and return its result."""
    with paused_tracking():
        return fn()
