"""Tests for the mutable dict handlers: tracking, notification and ref unwrapping."""

import pytest

from proxyfx import autorun, computed, is_readonly, readonly, reactive, ref, to_raw


class TestRecordTracking:
    def test_get_tracks_key(self):
        state = reactive({"a": 1, "b": 2})
        log = []
        autorun(lambda: log.append(state["a"]))
        state["b"] = 3  # not read
        state["a"] = 10
        assert log == [1, 10]

    def test_same_value_does_not_notify(self):
        state = reactive({"a": 1})
        log = []
        autorun(lambda: log.append(state["a"]))
        state["a"] = 1
        assert log == [1]

    def test_nan_is_unchanged(self):
        state = reactive({"n": float("nan")})
        log = []
        autorun(lambda: log.append(state["n"]))
        state["n"] = float("nan")
        assert len(log) == 1

    def test_type_change_notifies(self):
        state = reactive({"a": 1})
        log = []
        autorun(lambda: log.append(state["a"]))
        state["a"] = True
        state["a"] = 1.0
        state["a"] = 1
        assert [type(v) for v in log] == [int, bool, float, int]

    def test_missing_key_tracked(self):
        state = reactive({})
        log = []
        autorun(lambda: log.append(state.get("late")))
        state["late"] = "here"
        assert log == [None, "here"]

    def test_missing_key_raises(self):
        state = reactive({})
        with pytest.raises(KeyError):
            state["nope"]
        with pytest.raises(KeyError):
            del state["nope"]

    def test_has_tracks_key(self):
        state = reactive({})
        log = []
        autorun(lambda: log.append("k" in state))
        state["k"] = 1
        del state["k"]
        assert log == [False, True, False]

    def test_iteration_tracks_key_set(self):
        state = reactive({"a": 1})
        log = []
        autorun(lambda: log.append(sorted(state)))
        state["a"] = 2  # value change only
        state["b"] = 1
        del state["a"]
        assert log == [["a"], ["a", "b"], ["b"]]

    def test_len_tracks_key_set(self):
        state = reactive({})
        log = []
        autorun(lambda: log.append(len(state)))
        state["x"] = 1
        assert log == [0, 1]

    def test_items_wraps_values(self):
        state = reactive({"n": {"v": 1}})
        for _, value in state.items():
            assert value["v"] == 1
            value["v"] = 2
        assert to_raw(state)["n"]["v"] == 2

    def test_deep_nested_write(self):
        state = reactive({"user": {"name": "Ann"}})
        log = []
        autorun(lambda: log.append(state["user"]["name"]))
        state["user"]["name"] = "Bob"
        assert log == ["Ann", "Bob"]

    def test_replacing_nested_value_notifies(self):
        state = reactive({"user": {"name": "Ann"}})
        log = []
        autorun(lambda: log.append(state["user"]["name"]))
        state["user"] = {"name": "Cy"}
        assert log == ["Ann", "Cy"]

    def test_writing_back_same_proxy_is_no_change(self):
        state = reactive({"user": {"name": "Ann"}})
        log = []
        autorun(lambda: log.append(state["user"]))
        state["user"] = state["user"]
        assert len(log) == 1

    def test_mapping_helpers(self):
        state = reactive({"a": 1})
        assert state.setdefault("b", 2) == 2
        assert state.pop("a") == 1
        state.update(c=3)
        assert to_raw(state) == {"b": 2, "c": 3}
        assert state == {"b": 2, "c": 3}

    def test_self_write_does_not_loop(self):
        state = reactive({"n": 0})
        autorun(lambda: state.__setitem__("n", state["n"] + 1))
        assert state["n"] == 1
        state["n"] = 10
        assert state["n"] == 11


class TestRefUnwrapping:
    def test_ref_unwrapped_on_read(self):
        count = ref(1)
        state = reactive({"count": count})
        assert state["count"] == 1

    def test_write_goes_through_ref(self):
        count = ref(1)
        state = reactive({"count": count})
        state["count"] = 5
        assert count.value == 5
        assert to_raw(state)["count"] is count

    def test_ref_change_notifies_readers(self):
        count = ref(1)
        state = reactive({"count": count})
        log = []
        autorun(lambda: log.append(state["count"]))
        count.value = 2
        assert log == [1, 2]

    def test_ref_replaced_by_ref(self):
        first, second = ref(1), ref(2)
        state = reactive({"r": first})
        state["r"] = second
        assert to_raw(state)["r"] is second
        assert first.value == 1

    def test_readonly_ref_cannot_be_replaced(self):
        guarded = readonly(ref(1))
        state = reactive({"r": guarded})
        with pytest.raises(TypeError):
            state["r"] = 5
        assert to_raw(state)["r"] is guarded

    def test_computed_cannot_be_replaced(self):
        total = computed(lambda: 1)
        assert is_readonly(total)
        state = reactive({"c": total})
        with pytest.raises(TypeError):
            state["c"] = 5
        assert to_raw(state)["c"] is total
        assert state["c"] == 1
