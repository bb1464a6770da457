"""Tests for Reaction, autorun, and reaction."""

from proxyfx import autorun, reaction, reactive


class TestAutorun:
    def test_runs_immediately(self):
        state = reactive({"v": 10})
        log = []
        autorun(lambda: log.append(state["v"]))
        assert log == [10]

    def test_reruns_on_change(self):
        state = reactive({"v": 10})
        log = []
        autorun(lambda: log.append(state["v"]))
        state["v"] = 20
        assert log == [10, 20]

    def test_dispose_stops(self):
        state = reactive({"v": 10})
        log = []
        r = autorun(lambda: log.append(state["v"]))
        r.dispose()
        state["v"] = 20
        assert log == [10]  # no additional run

    def test_repr(self):
        def show():
            pass

        r = autorun(show)
        assert repr(r) == "Reaction(show, active)"
        r.dispose()
        assert repr(r) == "Reaction(show, disposed)"

    def test_object_attributes(self):
        class Settings:
            def __init__(self):
                self.theme = "dark"

        settings = reactive(Settings())
        log = []
        autorun(lambda: log.append(settings.theme))
        settings.theme = "light"
        assert log == ["dark", "light"]


class TestReaction:
    def test_no_initial_effect(self):
        """Without fire_immediately, effect doesn't run on setup."""
        state = reactive({"v": "a"})
        effects = []
        reaction(lambda: state["v"], lambda v: effects.append(v))
        assert effects == []

    def test_fires_on_change(self):
        state = reactive({"v": "a"})
        effects = []
        reaction(lambda: state["v"], lambda v: effects.append(v))
        state["v"] = "b"
        assert effects == ["b"]

    def test_fire_immediately(self):
        state = reactive({"v": "a"})
        effects = []
        reaction(lambda: state["v"], lambda v: effects.append(v), fire_immediately=True)
        assert effects == ["a"]

    def test_dedup_effect(self):
        """Effect only fires when data_fn result actually changes."""
        state = reactive({"v": 1})
        effects = []
        reaction(
            lambda: "even" if state["v"] % 2 == 0 else "odd",
            lambda v: effects.append(v),
        )
        state["v"] = 3  # still odd
        assert effects == []
        state["v"] = 4
        assert effects == ["even"]

    def test_effect_reads_not_tracked(self):
        state = reactive({"v": 1, "other": 1})
        effects = []
        reaction(lambda: state["v"], lambda v: effects.append((v, state["other"])))
        state["v"] = 2
        state["other"] = 5
        assert effects == [(2, 1)]

    def test_list_contents(self):
        todos = reactive([])
        counts = []
        reaction(lambda: len(todos), counts.append)
        todos.append("write")
        todos.append("test")
        todos.pop(0)
        assert counts == [1, 2, 1]

    def test_dispose(self):
        state = reactive({"v": 1})
        effects = []
        r = reaction(lambda: state["v"], lambda v: effects.append(v))
        state["v"] = 2
        assert effects == [2]
        r.dispose()
        state["v"] = 3
        assert effects == [2]  # no more effects
