"""Tests for action batching, the transaction context manager and untracked."""

from proxyfx import action, autorun, reactive, transaction, untracked


class TestAction:
    def test_batches_updates(self):
        state = reactive({"a": 0, "b": 0})
        log = []
        autorun(lambda: log.append((state["a"], state["b"])))
        assert log == [(0, 0)]

        @action
        def update_both():
            state["a"] = 1
            state["b"] = 2

        update_both()
        # Should see (1, 2) not intermediate (1, 0)
        assert log == [(0, 0), (1, 2)]

    def test_nested_actions(self):
        state = reactive({"v": 0})
        log = []
        autorun(lambda: log.append(state["v"]))

        @action
        def outer():
            state["v"] = 1

            @action
            def inner():
                state["v"] = 2

            inner()
            state["v"] = 3

        outer()
        # Only fires after outermost action completes
        assert log == [0, 3]

    def test_preserves_return_value(self):
        @action
        def compute():
            return 42

        assert compute() == 42

    def test_list_mutations_batched(self):
        items = reactive([])
        log = []
        autorun(lambda: log.append(list(items)))

        @action
        def fill():
            items.extend([1, 2])
            items.insert(0, 0)

        fill()
        assert log == [[], [0, 1, 2]]


class TestTransaction:
    def test_batches_updates(self):
        state = reactive({"a": 0, "b": 0})
        log = []
        autorun(lambda: log.append((state["a"], state["b"])))

        with transaction():
            state["a"] = 10
            state["b"] = 20

        assert log == [(0, 0), (10, 20)]

    def test_nested_transactions(self):
        state = reactive({"v": 0})
        log = []
        autorun(lambda: log.append(state["v"]))

        with transaction():
            state["v"] = 1
            with transaction():
                state["v"] = 2
            state["v"] = 3

        assert log == [0, 3]

    def test_flushes_on_exception(self):
        state = reactive({"v": 0})
        log = []
        autorun(lambda: log.append(state["v"]))
        try:
            with transaction():
                state["v"] = 1
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert log == [0, 1]


class TestUntracked:
    def test_reads_not_tracked(self):
        state = reactive({"a": 1, "b": 1})
        log = []
        autorun(lambda: log.append((untracked(lambda: state["a"]), state["b"])))
        state["a"] = 2
        assert log == [(1, 1)]
        state["b"] = 2
        assert log == [(1, 1), (2, 2)]

    def test_returns_value_outside_reactions(self):
        state = reactive({"a": 5})
        assert untracked(lambda: state["a"]) == 5
