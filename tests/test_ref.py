"""Tests for Ref, ref, shallow_ref, unref and trigger_ref."""

from proxyfx import (
    Ref,
    autorun,
    is_reactive,
    is_ref,
    reactive,
    readonly,
    ref,
    shallow_ref,
    to_raw,
    trigger_ref,
    unref,
)


class TestRef:
    def test_get_set(self):
        r = ref(10)
        assert r.value == 10
        assert r.get() == 10
        r.set(20)
        assert r.value == 20

    def test_notifies_readers(self):
        r = ref(1)
        log = []
        autorun(lambda: log.append(r.value))
        r.value = 2
        assert log == [1, 2]

    def test_same_value_does_not_notify(self):
        r = ref(1)
        log = []
        autorun(lambda: log.append(r.value))
        r.value = 1
        assert log == [1]

    def test_ref_of_ref_is_itself(self):
        r = ref(1)
        assert ref(r) is r
        assert shallow_ref(r) is r

    def test_is_ref(self):
        assert is_ref(ref(1))
        assert not is_ref(1)
        assert not is_ref(reactive({}))

    def test_unref(self):
        assert unref(ref(3)) == 3
        assert unref(3) == 3

    def test_deep_content_is_reactive(self):
        raw = {"a": 1}
        r = ref(raw)
        assert is_reactive(r.value)
        log = []
        autorun(lambda: log.append(r.value["a"]))
        r.value["a"] = 2
        assert log == [1, 2]

    def test_assigning_proxy_compares_raw(self):
        raw = {"a": 1}
        r = ref(raw)
        log = []
        autorun(lambda: log.append(r.value))
        r.value = reactive(raw)
        assert len(log) == 1
        assert to_raw(r.value) is raw

    def test_readonly_value_kept(self):
        view = readonly({"a": 1})
        r = ref({})
        r.value = view
        assert r.value is view

    def test_repr(self):
        assert repr(ref(1)) == "Ref(1)"
        assert isinstance(ref(1), Ref)


class TestShallowRef:
    def test_content_not_wrapped(self):
        raw = {"a": 1}
        r = shallow_ref(raw)
        assert r.value is raw
        assert not is_reactive(r.value)

    def test_trigger_ref_forces_notification(self):
        raw = {"a": 1}
        r = shallow_ref(raw)
        log = []
        autorun(lambda: log.append(r.value["a"]))
        raw["a"] = 2  # invisible to readers
        assert log == [1]
        trigger_ref(r)
        assert log == [1, 2]
