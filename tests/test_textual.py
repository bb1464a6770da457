"""Tests for proxyfx.textual, guarded reactions driving widgets from proxies."""

import threading

import pytest
from textual.css.query import NoMatches

from proxyfx import readonly, reactive, transaction
from proxyfx import textual as ptx


class _FakeApp:
    """Just the App surface the bridge touches."""

    def __init__(self, *, is_running=True):
        self.is_running = is_running
        self.marshalled = []

    def call_from_thread(self, fn, *args):
        self.marshalled.append(args)
        fn(*args)


class Status:
    def __init__(self):
        self.text = "idle"


class TestGuardedReaction:
    def test_list_append_reaches_widget(self):
        app = _FakeApp()
        todos = reactive([])
        rendered = []
        ptx.reaction(app, lambda: len(todos), rendered.append)
        todos.append("a")
        todos.append("b")
        assert rendered == [1, 2]

    def test_stopped_app_sees_nothing(self):
        app = _FakeApp(is_running=False)
        todos = reactive(["a"])
        rendered = []
        ptx.reaction(app, lambda: list(todos), rendered.append)
        todos.pop()
        assert rendered == []

    def test_paused_write_is_dropped(self):
        app = _FakeApp()
        status = reactive(Status())
        rendered = []
        ptx.reaction(app, lambda: status.text, rendered.append)
        with ptx.pause(app):
            status.text = "loading"
        status.text = "done"
        assert rendered == ["done"]

    def test_batched_writes_render_once(self):
        app = _FakeApp()
        state = reactive({"first": "Ann", "last": "Lee"})
        rendered = []
        ptx.reaction(app, lambda: f"{state['first']} {state['last']}", rendered.append)
        with transaction():
            state["first"] = "Bo"
            state["last"] = "Ng"
        assert rendered == ["Bo Ng"]

    def test_readonly_view_tracks_source(self):
        app = _FakeApp()
        state = reactive({"count": 0})
        view = readonly(state)
        rendered = []
        ptx.reaction(app, lambda: view["count"], rendered.append)
        state["count"] = 4
        assert rendered == [4]

    def test_missing_widget_ignored(self):
        app = _FakeApp()
        state = reactive({"count": 0})

        def _update(count):
            raise NoMatches("#counter")

        r = ptx.reaction(app, lambda: state["count"], _update)
        state["count"] = 1
        r.dispose()

    def test_other_errors_reach_writer(self):
        app = _FakeApp()
        state = reactive({"count": 0})

        def _update(count):
            raise ValueError("bad render")

        ptx.reaction(app, lambda: state["count"], _update)
        with pytest.raises(ValueError, match="bad render"):
            state["count"] = 1

    def test_worker_thread_write_marshalled(self):
        app = _FakeApp()
        log_lines = reactive([])
        rendered = []
        ptx.reaction(app, lambda: len(log_lines), rendered.append)

        worker = threading.Thread(target=lambda: log_lines.append("started"))
        worker.start()
        worker.join()

        assert rendered == [1]
        assert app.marshalled == [(1,)]


class TestGuardedAutorun:
    def test_nested_write_reruns(self):
        app = _FakeApp()
        state = reactive({"user": {"name": "Ann"}})
        names = []
        ptx.autorun(app, lambda: names.append(state["user"]["name"]))
        state["user"]["name"] = "Bo"
        assert names == ["Ann", "Bo"]

    def test_paused_run_skipped(self):
        app = _FakeApp()
        status = reactive(Status())
        seen = []
        ptx.autorun(app, lambda: seen.append(status.text))
        with ptx.pause(app):
            status.text = "busy"
        assert seen == ["idle"]

    def test_missing_widget_on_rerun(self):
        app = _FakeApp()
        items = reactive(["a"])
        runs = []

        def _render():
            runs.append(list(items))
            if len(runs) > 1:
                raise NoMatches("#items")

        ptx.autorun(app, _render)
        items.append("b")
        assert runs == [["a"], ["a", "b"]]


class TestPause:
    def test_restored_after_error(self):
        app = _FakeApp()
        with pytest.raises(RuntimeError):
            with ptx.pause(app):
                assert not ptx.is_safe(app)
                raise RuntimeError("rebuild failed")
        assert ptx.is_safe(app)

    def test_state_kept_off_the_app(self):
        app = _FakeApp()
        before = dict(vars(app))
        with ptx.pause(app):
            assert dict(vars(app)) == before
        assert dict(vars(app)) == before

    def test_apps_paused_independently(self):
        first, second = _FakeApp(), _FakeApp()
        with ptx.pause(first):
            assert not ptx.is_safe(first)
            assert ptx.is_safe(second)
