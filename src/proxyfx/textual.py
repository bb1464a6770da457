"""Textual integration for proxyfx. Opt-in, requires textual.

Reactions that write to widgets must not fire while the widget tree is
being rebuilt, must tolerate widgets that are gone, and must run on the
app's thread. The guard for all three lives here so callsites stay plain.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from proxyfx import autorun as _autorun, reaction as _reaction

# id(app) is present exactly while that app is inside pause().
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend guarded reactions during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def _guard(app, fn):
    """Wrap fn so it is skipped while unsafe, run on the app's thread and
    silent about widgets that no longer exist."""
    main = threading.get_ident()

    def _safe(*args):
        try:
            fn(*args)
        except NoMatches:
            pass

    def _guarded(*args):
        if not is_safe(app):
            return
        if threading.get_ident() != main:
            app.call_from_thread(_safe, *args)
        else:
            _safe(*args)

    return _guarded


def reaction(app, data_fn, effect_fn, *, fire_immediately=False):
    """reaction() whose effect is guarded for app."""
    return _reaction(data_fn, _guard(app, effect_fn), fire_immediately=fire_immediately)


def autorun(app, fn):
    """autorun() whose body is guarded for app."""
    return _autorun(_guard(app, fn))
